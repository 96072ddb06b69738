"""Item --(n..m)--> Category, through the jpa_item_category table.

Both sides declare the relationship, with ``back_populates`` linking
them; the association rows are written once even though the links are
set from both ends.

"""
from . import Walkthrough
from .. import lifecycle
from ..model import Category
from ..model import Item


Walkthrough.init("many_to_many")


@Walkthrough.probe
def persist(session):
    """Two items, two categories and four association rows."""

    i1 = Item(item_name="i-1")
    i2 = Item(item_name="i-2")

    c1 = Category(category_name="C-1")
    c2 = Category(category_name="C-2")

    i1.categories.add(c1)
    i1.categories.add(c2)

    i2.categories.add(c1)
    i2.categories.add(c2)

    c1.items.add(i1)
    c1.items.add(i2)

    c2.items.add(i1)
    c2.items.add(i2)

    lifecycle.persist(session, i1)
    lifecycle.persist(session, i2)
    lifecycle.persist(session, c1)
    lifecycle.persist(session, c2)


@Walkthrough.probe
def find(session):
    """The categories of an item load lazily, joining the association
    table; the same SQL results when loading from Category."""

    item = lifecycle.find(session, Item, 2)
    print(item.item_name)

    print(len(item.categories))
