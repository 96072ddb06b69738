"""Query helpers: named queries, constructor projections, native SQL.

Named queries are statement factories registered under a string name,
usually next to the mapped class they query::

    @named_query("Customer.by_id")
    def _customer_by_id():
        return select(Customer).where(Customer.id == bindparam("id"))

and run with parameters supplied by name::

    customer = run_named_query(session, "Customer.by_id", id=3).one()

"""
import logging

from sqlalchemy import text
from sqlalchemy import update
from sqlalchemy.orm import Bundle

from . import exc
from .caching_query import FromCache


log = logging.getLogger(__name__)

_named_queries = {}


def named_query(name):
    """Register the decorated zero-argument function as the factory for
    the named query ``name``."""

    def decorate(fn):
        if name in _named_queries:
            raise exc.OrmTourError(
                "Named query %r is already registered by %s"
                % (name, _named_queries[name].__qualname__)
            )
        _named_queries[name] = fn
        return fn

    return decorate


def get_named_query(name):
    try:
        factory = _named_queries[name]
    except KeyError as err:
        raise exc.NoSuchQueryError(
            "No named query %r; registered: %s"
            % (name, ", ".join(sorted(_named_queries)) or "(none)")
        ) from err
    return factory()


def run_named_query(session, name, **params):
    """Execute a named query, returning a :class:`.ScalarResult`."""

    stmt = get_named_query(name)
    log.debug("named query %r with %r", name, params)
    return session.scalars(stmt, params)


class Constructor(Bundle):
    """A :class:`.Bundle` which builds a new, transient instance of
    ``cls`` from the selected columns.

    Selecting ``Constructor(Customer, Customer.last_name, Customer.age)``
    returns ``Customer`` objects carrying only those two attributes,
    which are not part of any session.

    """

    def __init__(self, cls, *exprs, **kw):
        self.target_class = cls
        super(Constructor, self).__init__(cls.__name__.lower(), *exprs, **kw)

    def create_row_processor(self, query, procs, labels):
        cls = self.target_class

        def proc(row):
            values = [getter(row) for getter in procs]
            return cls(**dict(zip(labels, values)))

        return proc


def native_query(session, sql, **params):
    """Execute a literal SQL string with named ``:param`` binds."""

    return session.execute(text(sql), params)


def single_result(session, stmt, **params):
    """Return exactly one result of ``stmt``.

    :exc:`~sqlalchemy.exc.NoResultFound` and
    :exc:`~sqlalchemy.exc.MultipleResultsFound` propagate.

    """
    return session.scalars(stmt, params).one()


def cacheable(stmt, region="default", cache_key=None):
    """Mark ``stmt`` so that its results are stored in and served from
    the query cache."""

    return stmt.options(FromCache(region, cache_key))


def bulk_update(session, cls, criteria, values):
    """Emit a single UPDATE against ``cls`` and return the number of
    rows matched.

    Instances already present in the session are synchronized, but the
    second level cache is not; evict from it as needed.

    """
    stmt = update(cls).where(*criteria).values(**values)
    result = session.execute(stmt)
    log.debug(
        "bulk update of %s matched %d rows", cls.__name__, result.rowcount
    )
    return result.rowcount
