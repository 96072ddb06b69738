"""Transactions declared on service methods.

Both saves of ``PersonService.save_persons`` share one transaction: when
the second fails, the first is rolled back with it.

"""
from sqlalchemy import exc as sa_exc
from sqlalchemy import select

from . import Walkthrough
from ..model import Person
from ..service import PersonService


Walkthrough.init("transactions")


@Walkthrough.probe
def service_commit(session):
    """Both persons are committed together."""

    service = PersonService(session.info["environment"].scoped_session)

    service.save_persons(
        Person(last_name="AA", email="aa@163.com", age=12),
        Person(last_name="BB", email="bb@163.com", age=13),
    )

    print(service.find_persons())


@Walkthrough.probe
def service_rollback(session):
    """The second person violates NOT NULL; neither is committed."""

    service = PersonService(session.info["environment"].scoped_session)

    try:
        service.save_persons(
            Person(last_name="AA", email="aa@163.com", age=12),
            Person(last_name=None, email="bb@163.com", age=13),
        )
    except sa_exc.IntegrityError as err:
        print("rolled back: %s" % err.orig)

    print(session.scalars(select(Person)).all())
