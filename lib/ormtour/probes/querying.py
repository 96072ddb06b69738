"""Query styles: ORM-enabled select(), projections, named queries,
literal SQL, aggregation, eager joins, subqueries, SQL functions and
bulk UPDATE.

"""
from sqlalchemy import func
from sqlalchemy import select
from sqlalchemy.orm import contains_eager

from . import Walkthrough
from ..model import Customer
from ..model import Order
from ..queries import bulk_update
from ..queries import cacheable
from ..queries import Constructor
from ..queries import native_query
from ..queries import run_named_query
from ..queries import single_result


Walkthrough.init("querying")


@Walkthrough.probe
def hello_query(session):
    """Select entities with a bound parameter."""

    stmt = select(Customer).where(Customer.age > 1)

    customers = session.scalars(stmt).all()
    print(len(customers))


@Walkthrough.probe
def partial_properties(session):
    """Selecting some columns returns rows of tuples; selecting them
    through a Constructor returns new, transient Customer objects."""

    rows = session.execute(
        select(Customer.last_name, Customer.age).where(Customer.id > 1)
    ).all()
    print(rows[0])

    stmt = select(
        Constructor(Customer, Customer.last_name, Customer.age)
    ).where(Customer.id > 1)

    print(session.scalars(stmt).all())


@Walkthrough.probe
def named_query(session):
    """Run a statement registered under a name."""

    customer = run_named_query(session, "Customer.by_id", id=3).one()

    print(customer)


@Walkthrough.probe
def native_sql(session):
    """Run literal SQL against the table, rather than the entity."""

    result = native_query(
        session, "SELECT age FROM jpa_customers WHERE id = :id", id=3
    )

    print(result.scalar_one())


@Walkthrough.probe
def order_by(session):
    """Sort descending, with the query cache hint set."""

    stmt = cacheable(
        select(Customer)
        .where(Customer.age > 1)
        .order_by(Customer.age.desc())
    )

    customers = session.scalars(stmt).all()
    print(len(customers))


@Walkthrough.probe
def group_by(session):
    """Customers having two or more orders."""

    stmt = (
        select(Customer)
        .join(Customer.orders)
        .group_by(Customer.id)
        .having(func.count(Order.id) >= 2)
    )

    print(session.scalars(stmt).all())


@Walkthrough.probe
def left_outer_join_fetch(session):
    """Load a customer and its orders in one SELECT; the collection is
    populated from the joined rows."""

    stmt = (
        select(Customer)
        .outerjoin(Customer.orders)
        .options(contains_eager(Customer.orders))
        .where(Customer.id == 12)
    )

    customer = session.scalars(stmt).unique().one()
    print(customer.last_name)
    print(len(customer.orders))


@Walkthrough.probe
def subquery(session):
    """Orders of the customer whose last name is YY."""

    customer_id = (
        select(Customer.id)
        .where(Customer.last_name == "YY")
        .scalar_subquery()
    )
    stmt = select(Order).where(Order.customer_id == customer_id)

    orders = session.scalars(stmt).all()
    print(len(orders))


@Walkthrough.probe
def sql_function(session):
    """Apply a SQL function in the columns clause."""

    emails = session.scalars(select(func.lower(Customer.email))).all()
    print(emails)


@Walkthrough.probe
def single_row(session):
    """Exactly one row is expected; none or several raise."""

    customer = single_result(
        session, select(Customer).where(Customer.last_name == "CC")
    )
    print(customer)


@Walkthrough.probe
def execute_update(session):
    """UPDATE rows directly, without loading them."""

    count = bulk_update(
        session, Customer, [Customer.id == 12], {"last_name": "YYY"}
    )
    session.info["environment"].cache.evict(Customer, 12)

    print(count)
