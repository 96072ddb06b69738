"""Caching tiers.

The identity map of a session means that looking up the same primary
key twice in one session emits one SELECT.  The second level cache,
dogpile regions shared by all sessions of an :class:`.Environment`,
means the lookup is served without SQL in a later session as well.  The
query cache stores the rows of a whole statement, keyed on the SQL and
its parameters.

"""
from sqlalchemy import select

from . import Walkthrough
from ..caching_query import RelationshipCache
from ..lifecycle import find
from ..model import Customer
from ..model import Order
from ..queries import cacheable


Walkthrough.init("caching")


@Walkthrough.probe
def identity_map(session):
    """Two lookups in one session; one SELECT, one object."""

    customer = find(session, Customer, 1)
    again = find(session, Customer, 1)

    print(customer is again)


@Walkthrough.probe
def second_level_cache(session):
    """A lookup in a second session is served from the second level
    cache; one SELECT in all."""

    env = session.info["environment"]

    customer1 = find(session, Customer, 2)
    session.commit()

    with env.begin() as other:
        customer2 = find(other, Customer, 2)

    print(customer1 is customer2, customer2.last_name)


@Walkthrough.probe
def cache_eviction(session):
    """Updating a cached entity evicts it, so the next session reads
    the new value from the database."""

    env = session.info["environment"]

    find(session, Customer, 2).last_name = "B2"
    session.commit()

    with env.begin() as other:
        print(find(other, Customer, 2).last_name)


@Walkthrough.probe
def query_cache(session):
    """The same statement, with the query cache hint, run twice; the
    second run is served from the cache."""

    stmt = cacheable(select(Customer).where(Customer.age > 1))

    customers = session.scalars(stmt).all()
    print(len(customers))

    customers = session.scalars(stmt).all()
    print(len(customers))


@Walkthrough.probe
def relationship_cache(session):
    """Lazy loads of Order.customer are served from the cache in a
    second session; only the orders themselves are selected again."""

    env = session.info["environment"]
    stmt = select(Order).options(RelationshipCache(Order.customer))

    for order in session.scalars(stmt).all():
        print(order.order_name, order.customer.last_name)
    session.commit()

    with env.begin() as other:
        orders = other.scalars(stmt).all()
        names = [order.customer.last_name for order in orders]
    print(names)
