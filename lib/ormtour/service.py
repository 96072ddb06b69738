"""Declarative transaction demarcation for a service layer.

A service method decorated with :func:`transactional` runs inside one
transaction on the current session of the service's
:class:`.scoped_session`; repositories used by the method share that same
session, so everything they save commits or rolls back together::

    service = PersonService(environment.scoped_session)
    service.save_persons(Person(last_name="AA"), Person(last_name="BB"))

"""
import functools
import logging

from sqlalchemy import select

from .model import Person


log = logging.getLogger(__name__)


def transactional(fn):
    """Run the decorated method in a transaction.

    When a transaction is already in progress on the current session the
    method joins it; otherwise a transaction is begun, committed when the
    method returns, rolled back if it raises, and the session is removed
    from the registry afterwards.

    """

    @functools.wraps(fn)
    def go(self, *arg, **kw):
        registry = self.Session
        session = registry()
        if session.in_transaction():
            return fn(self, *arg, **kw)

        try:
            with session.begin():
                log.debug("begin transaction for %s", fn.__qualname__)
                return fn(self, *arg, **kw)
        finally:
            registry.remove()

    return go


class PersonRepository(object):
    def __init__(self, Session):
        self.Session = Session

    def save(self, person):
        """Add ``person`` and flush, so that constraint violations raise
        here rather than at commit."""

        self.Session.add(person)
        self.Session.flush()
        return person

    def find_all(self):
        return self.Session.scalars(select(Person).order_by(Person.id)).all()


class PersonService(object):
    def __init__(self, Session):
        self.Session = Session
        self.persons = PersonRepository(Session)

    @transactional
    def save_persons(self, p1, p2):
        self.persons.save(p1)
        self.persons.save(p2)

    @transactional
    def find_persons(self):
        return self.persons.find_all()
