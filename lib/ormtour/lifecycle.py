"""Entity manager style operations on top of :class:`.Session`.

merge, refresh and flush are used as :meth:`.Session.merge`,
:meth:`.Session.refresh` and :meth:`.Session.flush` directly.  The
functions here cover the operations whose contract differs from the
nearest :class:`.Session` method:

* :func:`find` - a primary key lookup that also consults the second
  level cache for classes marked ``__cacheable__``.
* :func:`get_reference` - an unloaded handle to a row, loaded on first
  attribute access.
* :func:`persist` - like :meth:`.Session.add`, but refuses instances that
  already have an identity.
* :func:`remove` - like :meth:`.Session.delete`, but only for instances
  managed by this session.

"""
import logging

from sqlalchemy import inspect
from sqlalchemy.orm import make_transient_to_detached
from sqlalchemy.orm.base import state_str

from . import exc
from .caching_query import EntityCache


log = logging.getLogger(__name__)


def _ident_tuple(ident):
    if isinstance(ident, (tuple, list)):
        return tuple(ident)
    return (ident,)


def find(session, cls, ident):
    """Return the instance of ``cls`` with primary key ``ident``, or None.

    The identity map is checked first, then the second level cache for
    cacheable classes, then the database.

    """
    ident = _ident_tuple(ident)
    options = []
    if getattr(cls, "__cacheable__", False):
        options.append(EntityCache(cls, ident))
    return session.get(cls, ident, options=options)


def get_reference(session, cls, ident):
    """Return a persistent instance of ``cls`` for ``ident`` without
    emitting SQL.

    All attributes besides the primary key are expired, so the row is
    loaded on first access; if the row does not exist at that point,
    :exc:`~sqlalchemy.orm.exc.ObjectDeletedError` is raised.

    """
    mapper = inspect(cls)
    ident = _ident_tuple(ident)
    key = mapper.identity_key_from_primary_key(ident)

    existing = session.identity_map.get(key)
    if existing is not None:
        return existing

    obj = mapper.class_manager.new_instance()
    for column, value in zip(mapper.primary_key, ident):
        prop = mapper.get_property_by_column(column)
        setattr(obj, prop.key, value)
    make_transient_to_detached(obj)
    session.add(obj)
    return obj


def persist(session, obj):
    """Make a transient instance pending.

    Instances already pending or persistent in this session are left
    as they are.

    """
    state = inspect(obj)
    if state.pending or state.persistent:
        if state.session_id == session.hash_key:
            return
        raise exc.IllegalEntityStateError(
            "%s is attached to another session" % state_str(state)
        )

    if state.detached or state.deleted:
        raise exc.EntityExistsError(
            "Detached instance %s passed to persist(); use merge()"
            % state_str(state)
        )

    mapper = state.mapper
    if any(
        state.dict.get(mapper.get_property_by_column(column).key) is not None
        for column in mapper.primary_key
    ):
        raise exc.EntityExistsError(
            "Transient instance %s has a primary key; use merge()"
            % state_str(state)
        )

    log.debug("persist %s", state_str(state))
    session.add(obj)


def remove(session, obj):
    """Mark a persistent instance for deletion.

    A pending instance is simply expunged, as nothing was written for it
    yet.

    """
    state = inspect(obj)
    if state.session_id != session.hash_key or not (
        state.pending or state.persistent
    ):
        raise exc.IllegalEntityStateError(
            "Can only remove instances managed by this session; "
            "%s is not" % state_str(state)
        )

    if state.pending:
        session.expunge(obj)
    else:
        log.debug("remove %s", state_str(state))
        session.delete(obj)
