from unittest import mock

from dogpile.cache.api import NO_VALUE

from sqlalchemy import select
from sqlalchemy.testing import eq_
from sqlalchemy.testing import is_
from sqlalchemy.testing import is_not

from _fixtures import FixtureTest
from ormtour.caching_query import EntityCache
from ormtour.caching_query import FromCache
from ormtour.caching_query import RelationshipCache
from ormtour.fixture_data import new_customer
from ormtour.lifecycle import find
from ormtour.lifecycle import remove
from ormtour.model import Customer
from ormtour.model import Order
from ormtour.queries import cacheable


class EntityCacheTest(FixtureTest):
    def _in_new_session(self, fn):
        self.session.commit()
        with self.env.begin() as session:
            return fn(session)

    def test_key(self):
        eq_(EntityCache.key_for(Customer, 1), "Customer:(1,)")
        eq_(EntityCache.key_for(Customer, (1,)), "Customer:(1,)")

    def test_shared_across_sessions(self):
        customer = find(self.session, Customer, 2)

        other = self._in_new_session(lambda s: find(s, Customer, 2))

        is_not(other, customer)
        eq_(other.last_name, "BB")
        self.assert_sql_count(1, "SELECT")

    def test_uncacheable_class(self):
        find(self.session, Order, 2)

        other = self._in_new_session(lambda s: find(s, Order, 2))

        eq_(other.order_name, "O-HH-1")
        self.assert_sql_count(2, "SELECT")

    def test_update_evicts(self):
        find(self.session, Customer, 2).last_name = "B2"
        self.session.flush()
        self.assert_sql_count(1, "UPDATE")

        other = self._in_new_session(lambda s: find(s, Customer, 2))

        eq_(other.last_name, "B2")
        self.assert_sql_count(2, "SELECT")

    def test_remove_evicts(self):
        remove(self.session, find(self.session, Customer, 1))

        other = self._in_new_session(lambda s: find(s, Customer, 1))

        is_(other, None)
        self.assert_sql_count(2, "SELECT", "jpa_customers")

    def test_explicit_evict(self):
        find(self.session, Customer, 5)
        self.env.cache.evict(Customer, 5)

        self._in_new_session(lambda s: find(s, Customer, 5))

        self.assert_sql_count(2, "SELECT")

    def test_missing_row_not_cached(self):
        is_(find(self.session, Customer, 100), None)

        self._in_new_session(
            lambda s: s.merge(new_customer("DD", id=100))
        )
        found = self._in_new_session(lambda s: find(s, Customer, 100))

        eq_(found.last_name, "DD")

    def test_rolled_back_delete(self):
        remove(self.session, find(self.session, Customer, 1))
        self.session.flush()
        is_(find(self.session, Customer, 1), None)

        self.session.rollback()
        found = self._in_new_session(lambda s: find(s, Customer, 1))

        eq_(found.last_name, "AA")

    def test_insert_evicts(self):
        region = self.env.regions["entities"]
        key = EntityCache.key_for(Customer, 100)
        region.set(key, "stale")

        self.session.merge(new_customer("DD", id=100))
        self.session.flush()

        is_(region.get(key), NO_VALUE)


class QueryCacheTest(FixtureTest):
    def test_invalidate_statement(self):
        stmt = cacheable(select(Customer).where(Customer.age > 1))

        self.session.scalars(stmt).all()
        self.session.scalars(stmt).all()
        self.assert_sql_count(1, "SELECT")

        self.env.cache.invalidate(stmt, {}, FromCache())

        eq_(len(self.session.scalars(stmt).all()), 12)
        self.assert_sql_count(2, "SELECT")

    def test_explicit_cache_key(self):
        s1 = cacheable(select(Customer).where(Customer.age > 1), cache_key="c")
        s2 = cacheable(select(Customer).where(Customer.age > 1), cache_key="d")

        self.session.scalars(s1).all()
        self.session.scalars(s2).all()
        self.session.scalars(s1).all()

        self.assert_sql_count(2, "SELECT")

    def test_invalidate_caches(self):
        eq_(sorted(self.env.regions), ["default", "entities"])

        with mock.patch.object(
            self.env.regions["default"], "invalidate"
        ) as default, mock.patch.object(
            self.env.regions["entities"], "invalidate"
        ) as entities:
            self.env.invalidate_caches()

        eq_(default.mock_calls, [mock.call()])
        eq_(entities.mock_calls, [mock.call()])


class RelationshipCacheTest(FixtureTest):
    def test_lazy_loads_cached(self):
        stmt = select(Order).options(RelationshipCache(Order.customer))

        orders = self.session.scalars(stmt).all()
        names = [o.customer.last_name for o in orders]
        # four distinct customers
        self.assert_sql_count(5, "SELECT")
        self.session.commit()
        self.recorder.clear()

        with self.env.begin() as session:
            eq_(
                [o.customer.last_name for o in session.scalars(stmt).all()],
                names,
            )

        self.assert_sql_count(1, "SELECT")
