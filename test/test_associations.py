from sqlalchemy import select
from sqlalchemy.testing import eq_
from sqlalchemy.testing import in_
from sqlalchemy.testing import is_
from sqlalchemy.testing import not_in

from _fixtures import FixtureTest
from ormtour.fixture_data import new_customer
from ormtour.lifecycle import find
from ormtour.lifecycle import persist
from ormtour.lifecycle import remove
from ormtour.model import Category
from ormtour.model import Customer
from ormtour.model import Department
from ormtour.model import Item
from ormtour.model import Manager
from ormtour.model import Order
from ormtour.queries import native_query


class OneToManyTest(FixtureTest):
    def test_persist_parent_first(self):
        customer = new_customer("MM")
        o1 = Order(order_name="O-MM-1")
        o2 = Order(order_name="O-MM-2")
        customer.orders.append(o1)
        customer.orders.append(o2)

        # the other side is set by back_populates already
        is_(o1.customer, customer)
        o1.customer = customer
        o2.customer = customer
        eq_(len(customer.orders), 2)

        persist(self.session, customer)
        persist(self.session, o1)
        persist(self.session, o2)
        self.session.flush()

        self.assert_sql_count(3, "INSERT")
        self.assert_sql_count(0, "UPDATE")
        eq_(o1.customer_id, customer.id)

    def test_find_loads_collection_lazily(self):
        customer = find(self.session, Customer, 9)
        eq_(customer.last_name, "II")
        self.assert_sql_count(1, "SELECT")

        eq_(
            [o.order_name for o in customer.orders],
            ["O-II-1", "O-II-2", "O-II-3"],
        )
        self.assert_sql_count(2, "SELECT")

    def test_update_through_collection(self):
        customer = find(self.session, Customer, 9)
        customer.orders[0].order_name = "O-XXX-10"
        self.session.flush()

        self.assert_sql_count(1, "UPDATE", "jpa_orders")
        self.assert_sql_count(0, "UPDATE", "jpa_customers")

    def test_remove_nulls_foreign_keys(self):
        customer = find(self.session, Customer, 8)
        remove(self.session, customer)
        self.session.flush()

        self.assert_sql_count(2, "UPDATE", "jpa_orders")
        self.assert_sql_count(1, "DELETE", "jpa_customers")
        self.assert_sql_count(0, "DELETE", "jpa_orders")

        eq_(
            native_query(
                self.session,
                "SELECT id, customer_id FROM jpa_orders "
                "WHERE id IN (2, 3) ORDER BY id",
            ).all(),
            [(2, None), (3, None)],
        )


class ManyToOneTest(FixtureTest):
    def test_persist_children_first(self):
        customer = new_customer("GG")
        o1 = Order(order_name="G-GG-1", customer=customer)
        o2 = Order(order_name="G-GG-2", customer=customer)

        persist(self.session, o1)
        persist(self.session, o2)
        persist(self.session, customer)
        self.session.flush()

        self.assert_sql_count(3, "INSERT")
        self.assert_sql_count(0, "UPDATE")
        eq_(
            self.recorder.statements[0].statement.split("(")[0].strip(),
            "INSERT INTO jpa_customers",
        )

    def test_find_loads_parent_lazily(self):
        order = find(self.session, Order, 1)
        eq_(order.order_name, "O-CC-1")
        self.assert_sql_count(1, "SELECT")

        eq_(order.customer.last_name, "CC")
        self.assert_sql_count(2, "SELECT")

    def test_update_through_reference(self):
        order = find(self.session, Order, 2)
        order.customer.last_name = "FFF"
        self.session.flush()

        self.assert_sql_count(1, "UPDATE", "jpa_customers")

    def test_remove_child_keeps_parent(self):
        order = find(self.session, Order, 1)
        remove(self.session, order)
        self.session.flush()

        self.assert_sql_count(1, "DELETE", "jpa_orders")
        self.assert_sql_count(0, "DELETE", "jpa_customers")

        customer = find(self.session, Customer, 3)
        eq_(customer.orders, [])


class OneToOneTest(FixtureTest):
    def test_persist(self):
        mgr = Manager(mgr_name="M-BB")
        dept = Department(dept_name="D-BB")
        dept.mgr = mgr

        is_(mgr.dept, dept)

        persist(self.session, mgr)
        persist(self.session, dept)
        self.session.flush()

        self.assert_sql_count(2, "INSERT")
        self.assert_sql_count(0, "UPDATE")
        eq_(dept.mgr_id, mgr.id)

    def test_find_owning_side(self):
        dept = find(self.session, Department, 1)
        eq_(dept.dept_name, "D-AA")
        self.assert_sql_count(1, "SELECT")

        eq_(dept.mgr.mgr_name, "M-AA")
        is_(dept.mgr.dept, dept)
        self.assert_sql_count(2, "SELECT")

    def test_find_inverse_side_joins(self):
        mgr = find(self.session, Manager, 1)

        self.assert_sql_count(1, "SELECT")
        in_("LEFT OUTER JOIN", self.recorder.statements[0].statement)

        eq_(mgr.dept.dept_name, "D-AA")
        self.assert_sql_count(1, "SELECT")

    def test_inverse_side_without_counterpart(self):
        mgr = find(self.session, Manager, 2)

        is_(mgr.dept, None)
        self.assert_sql_count(1, "SELECT")


class ManyToManyTest(FixtureTest):
    def test_persist_links_once(self):
        i1 = Item(item_name="i-1")
        i2 = Item(item_name="i-2")
        c1 = Category(category_name="C-1")
        c2 = Category(category_name="C-2")

        i1.categories.add(c1)
        i1.categories.add(c2)
        i2.categories.add(c1)
        i2.categories.add(c2)

        # set from the other side as well; nothing changes
        c1.items.add(i1)
        c1.items.add(i2)
        c2.items.add(i1)
        c2.items.add(i2)

        for obj in (i1, i2, c1, c2):
            persist(self.session, obj)
        self.session.flush()

        self.assert_sql_count(8, "INSERT")
        self.assert_sql_count(2, "INSERT", "jpa_items")
        self.assert_sql_count(2, "INSERT", "jpa_categories")
        self.assert_sql_count(4, "INSERT", "jpa_item_category")

    def test_find_item(self):
        item = find(self.session, Item, 2)
        eq_(item.item_name, "i-2")
        self.assert_sql_count(1, "SELECT")

        eq_({c.category_name for c in item.categories}, {"C-1", "C-3"})
        self.assert_sql_count(2, "SELECT")
        in_("jpa_item_category", self.recorder.statements[1].statement)

    def test_find_category(self):
        category = find(self.session, Category, 1)

        eq_({i.item_name for i in category.items}, {"i-1", "i-2"})
        self.assert_sql_count(2, "SELECT")

    def test_unlink(self):
        item = find(self.session, Item, 1)
        category = find(self.session, Category, 2)

        item.categories.remove(category)
        not_in(item, category.items)
        self.session.flush()

        self.assert_sql_count(1, "DELETE", "jpa_item_category")
        eq_(
            self.session.scalars(
                select(Category.category_name)
                .join(Category.items)
                .where(Item.id == 1)
            ).all(),
            ["C-1"],
        )
