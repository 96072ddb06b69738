"""Install the rows the probes expect to find.

Primary keys are assigned explicitly so that probes may refer to
particular rows, e.g. customer 9 and its three orders.

"""
import datetime
import logging

from sqlalchemy import func
from sqlalchemy import select

from .model import Category
from .model import Customer
from .model import Department
from .model import Item
from .model import Manager
from .model import Order


log = logging.getLogger(__name__)

CREATED = datetime.datetime(2019, 4, 26, 14, 58)

LAST_NAMES = [
    "AA",
    "BB",
    "CC",
    "DD",
    "EE",
    "FF",
    "GG",
    "HH",
    "II",
    "JJ",
    "KK",
    "YY",
]

# order id -> (order name, customer id)
ORDERS = {
    1: ("O-CC-1", 3),
    2: ("O-HH-1", 8),
    3: ("O-HH-2", 8),
    4: ("O-II-1", 9),
    5: ("O-II-2", 9),
    6: ("O-II-3", 9),
    7: ("O-YY-1", 12),
    8: ("O-YY-2", 12),
}

# item id -> category ids
ITEM_CATEGORIES = {1: (1, 2), 2: (1, 3), 3: ()}


def new_customer(last_name, age=18, **kw):
    """A transient Customer with the remaining columns filled in."""

    now = datetime.datetime.now()
    return Customer(
        last_name=last_name,
        email="%s@163.com" % last_name.lower(),
        age=age,
        birth=now.date(),
        created_time=now,
        **kw
    )


def installed(session):
    return session.scalar(select(func.count(Customer.id))) > 0


def install(session):
    customers = {}
    for id_, last_name in enumerate(LAST_NAMES, 1):
        customers[id_] = Customer(
            id=id_,
            last_name=last_name,
            email="%s@163.com" % last_name,
            age=10 + id_,
            birth=datetime.date(1990, 1, id_),
            created_time=CREATED,
        )
    session.add_all(customers.values())

    session.add_all(
        Order(id=id_, order_name=name, customer=customers[customer_id])
        for id_, (name, customer_id) in ORDERS.items()
    )

    categories = {
        id_: Category(id=id_, category_name="C-%d" % id_)
        for id_ in (1, 2, 3)
    }
    session.add_all(
        Item(
            id=id_,
            item_name="i-%d" % id_,
            categories={categories[c] for c in category_ids},
        )
        for id_, category_ids in ITEM_CATEGORIES.items()
    )
    session.add_all(categories.values())

    manager = Manager(id=1, mgr_name="M-AA")
    session.add(Department(id=1, dept_name="D-AA", mgr=manager))
    session.add(Manager(id=2, mgr_name="M-ZZ"))

    session.flush()
    log.info(
        "installed %d customers, %d orders", len(customers), len(ORDERS)
    )
