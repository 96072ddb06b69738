"""model.py

The datamodel, a conventional schema used to exercise each kind of
relationship mapping.

Customer --(1..n)--> Order        bidirectional, Order holds the foreign key
Item     --(n..m)--> Category     bidirectional, via jpa_item_category
Department --(1..1)--> Manager    bidirectional, Department holds the
                                  (unique) foreign key

Person stands alone and is used by the service layer.

"""
from __future__ import annotations

import datetime
from typing import List
from typing import Optional
from typing import Set

from sqlalchemy import bindparam
from sqlalchemy import Column
from sqlalchemy import ForeignKey
from sqlalchemy import select
from sqlalchemy import String
from sqlalchemy import Table
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.orm import Mapped
from sqlalchemy.orm import mapped_column
from sqlalchemy.orm import relationship

from .queries import named_query


class Base(DeclarativeBase):
    pass


class Customer(Base):
    __tablename__ = "jpa_customers"

    # loaded by lifecycle.find() through the second level cache
    __cacheable__ = True

    id: Mapped[int] = mapped_column(primary_key=True)
    last_name: Mapped[str] = mapped_column(String(50))
    email: Mapped[Optional[str]] = mapped_column(String(100))
    age: Mapped[Optional[int]]
    birth: Mapped[Optional[datetime.date]]
    created_time: Mapped[Optional[datetime.datetime]]

    # no delete cascade; removing a Customer sets customer_id
    # to NULL on its orders
    orders: Mapped[List[Order]] = relationship(
        back_populates="customer", order_by="Order.id"
    )

    def __repr__(self):
        return "Customer(id=%r, last_name=%r, email=%r, age=%r)" % (
            self.id,
            self.last_name,
            self.email,
            self.age,
        )


class Order(Base):
    __tablename__ = "jpa_orders"

    id: Mapped[int] = mapped_column(primary_key=True)
    order_name: Mapped[Optional[str]] = mapped_column(String(50))
    customer_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("jpa_customers.id")
    )

    customer: Mapped[Optional[Customer]] = relationship(
        back_populates="orders"
    )

    def __repr__(self):
        return "Order(id=%r, order_name=%r)" % (self.id, self.order_name)


item_category = Table(
    "jpa_item_category",
    Base.metadata,
    Column("item_id", ForeignKey("jpa_items.id"), primary_key=True),
    Column("category_id", ForeignKey("jpa_categories.id"), primary_key=True),
)


class Item(Base):
    __tablename__ = "jpa_items"

    id: Mapped[int] = mapped_column(primary_key=True)
    item_name: Mapped[Optional[str]] = mapped_column(String(50))

    categories: Mapped[Set[Category]] = relationship(
        secondary=item_category, back_populates="items"
    )

    def __repr__(self):
        return "Item(id=%r, item_name=%r)" % (self.id, self.item_name)


class Category(Base):
    __tablename__ = "jpa_categories"

    id: Mapped[int] = mapped_column(primary_key=True)
    category_name: Mapped[Optional[str]] = mapped_column(String(50))

    items: Mapped[Set[Item]] = relationship(
        secondary=item_category, back_populates="categories"
    )

    def __repr__(self):
        return "Category(id=%r, category_name=%r)" % (
            self.id,
            self.category_name,
        )


class Manager(Base):
    __tablename__ = "jpa_managers"

    id: Mapped[int] = mapped_column(primary_key=True)
    mgr_name: Mapped[Optional[str]] = mapped_column(String(50))

    # the side without the foreign key loads its counterpart
    # eagerly, with a LEFT OUTER JOIN
    dept: Mapped[Optional[Department]] = relationship(
        back_populates="mgr", lazy="joined"
    )

    def __repr__(self):
        return "Manager(id=%r, mgr_name=%r)" % (self.id, self.mgr_name)


class Department(Base):
    __tablename__ = "jpa_departments"

    id: Mapped[int] = mapped_column(primary_key=True)
    dept_name: Mapped[Optional[str]] = mapped_column(String(50))
    mgr_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("jpa_managers.id"), unique=True
    )

    mgr: Mapped[Optional[Manager]] = relationship(back_populates="dept")

    def __repr__(self):
        return "Department(id=%r, dept_name=%r)" % (self.id, self.dept_name)


class Person(Base):
    __tablename__ = "jpa_persons"

    id: Mapped[int] = mapped_column(primary_key=True)
    last_name: Mapped[str] = mapped_column(String(50))
    email: Mapped[Optional[str]] = mapped_column(String(100))
    age: Mapped[Optional[int]]

    def __repr__(self):
        return "Person(id=%r, last_name=%r)" % (self.id, self.last_name)


@named_query("Customer.by_id")
def _customer_by_id():
    return select(Customer).where(Customer.id == bindparam("id"))
