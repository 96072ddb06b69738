"""Order --(n..1)--> Customer, navigated from the Order side.

Persisting the Customer first, or last, makes no difference to the SQL:
the unit of work sorts INSERT statements by dependency, so the Customer
row exists before the Order rows referring to it.

"""
from . import Walkthrough
from .. import lifecycle
from ..fixture_data import new_customer
from ..model import Order


Walkthrough.init("many_to_one")


@Walkthrough.probe
def persist(session):
    """Persist the orders before their customer."""

    customer = new_customer("GG")

    order1 = Order(order_name="G-GG-1")
    order2 = Order(order_name="G-GG-2")

    order1.customer = customer
    order2.customer = customer

    lifecycle.persist(session, order1)
    lifecycle.persist(session, order2)
    lifecycle.persist(session, customer)


@Walkthrough.probe
def find(session):
    """The customer is loaded lazily, when first accessed."""

    order = lifecycle.find(session, Order, 1)
    print(order.order_name)

    print(order.customer.last_name)


@Walkthrough.probe
def update(session):
    """Change the customer reached through an order."""

    order = lifecycle.find(session, Order, 2)
    order.customer.last_name = "FFF"


@Walkthrough.probe
def remove(session):
    """Removing an order leaves its customer in place."""

    order = lifecycle.find(session, Order, 1)
    lifecycle.remove(session, order)
