"""Customer --(1..n)--> Order, navigated from the Customer side.

The foreign key lives on jpa_orders and is written when each Order is
inserted, so persisting a Customer with n Orders emits n + 1 INSERT
statements and no UPDATE, whichever order the objects are persisted in.

"""
from . import Walkthrough
from .. import lifecycle
from ..fixture_data import new_customer
from ..model import Customer
from ..model import Order


Walkthrough.init("one_to_many")


@Walkthrough.probe
def persist(session):
    """Persist a customer and its orders."""

    customer = new_customer("MM")

    order1 = Order(order_name="O-MM-1")
    order2 = Order(order_name="O-MM-2")

    customer.orders.append(order1)
    customer.orders.append(order2)

    # already established by back_populates; no duplicates result
    order1.customer = customer
    order2.customer = customer

    lifecycle.persist(session, customer)
    lifecycle.persist(session, order1)
    lifecycle.persist(session, order2)

    print(
        "customer %s persisted with %d orders"
        % (customer.last_name, len(customer.orders))
    )


@Walkthrough.probe
def find(session):
    """The orders collection is loaded lazily, on first access."""

    customer = lifecycle.find(session, Customer, 9)
    print(customer.last_name)

    print(len(customer.orders))


@Walkthrough.probe
def update(session):
    """Change an order reached through the collection."""

    customer = lifecycle.find(session, Customer, 9)

    customer.orders[0].order_name = "O-XXX-10"


@Walkthrough.probe
def remove(session):
    """Without a delete cascade, removing the customer sets the foreign
    key of its orders to NULL, then deletes the customer."""

    customer = lifecycle.find(session, Customer, 8)
    lifecycle.remove(session, customer)
