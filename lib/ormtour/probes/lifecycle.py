"""The persistence lifecycle of a single Customer: find and
get_reference, persist and remove, the four cases of merge, flush and
refresh.

"""
from sqlalchemy import inspect

from . import Walkthrough
from ..fixture_data import new_customer
from ..lifecycle import find
from ..lifecycle import get_reference
from ..lifecycle import persist
from ..lifecycle import remove
from ..model import Customer


Walkthrough.init("lifecycle")


@Walkthrough.probe
def find_by_id(session):
    """Load a customer by primary key; SELECT is emitted immediately."""

    customer = find(session, Customer, 1)
    print(customer)


@Walkthrough.probe
def reference_by_id(session):
    """Obtain an unloaded reference; SELECT waits for attribute access."""

    customer = get_reference(session, Customer, 1)
    print(type(customer).__name__, sorted(inspect(customer).unloaded))

    print(customer.last_name)


@Walkthrough.probe
def persist_new(session):
    """Persist two transient customers; ids are assigned at flush."""

    customer = new_customer("pp", age=10)
    customer1 = new_customer("qq", age=11)

    persist(session, customer)
    persist(session, customer1)
    print(customer.id, customer1.id)

    session.flush()
    print(customer.id, customer1.id)


@Walkthrough.probe
def remove_persistent(session):
    """Remove a persistent customer; only managed instances can be
    removed."""

    customer = find(session, Customer, 1)
    print(customer)
    remove(session, customer)


@Walkthrough.probe
def merge_transient(session):
    """Merge a transient instance: a new instance is created, receives
    the state and is inserted; the argument stays transient."""

    customer = new_customer("CC")
    customer2 = session.merge(customer)
    session.flush()

    print("customer#id: %s" % customer.id)
    print("customer2#id: %s" % customer2.id)


@Walkthrough.probe
def merge_detached_missing(session):
    """Merge an instance whose id is neither in the session nor in the
    database: a new instance is created and inserted with that id."""

    customer = new_customer("DD", id=100)
    customer2 = session.merge(customer)
    session.flush()

    print("customer#id: %s" % customer.id)
    print("customer2#id: %s" % customer2.id)


@Walkthrough.probe
def merge_detached_existing(session):
    """Merge an instance whose row exists but is not in the session: the
    row is loaded, receives the state and is updated."""

    customer = new_customer("EE", id=4)
    customer2 = session.merge(customer)

    print(customer is customer2)


@Walkthrough.probe
def merge_detached_in_session(session):
    """Merge an instance whose id is already in the session: the state is
    copied onto the instance in the session, which is updated."""

    customer = new_customer("DD", id=4)
    customer2 = find(session, Customer, 4)

    merged = session.merge(customer)

    print(customer is customer2)
    print(merged is customer2)


@Walkthrough.probe
def flush_early(session):
    """Flush sends the UPDATE before commit, inside the same
    transaction."""

    customer = find(session, Customer, 2)
    print(customer)

    customer.last_name = "AA"

    session.flush()


@Walkthrough.probe
def refresh_loaded(session):
    """The second find is served by the identity map; refresh re-reads
    the row."""

    customer = find(session, Customer, 1)
    customer = find(session, Customer, 1)

    session.refresh(customer)
