"""Represent functions and classes
which allow the usage of Dogpile caching with SQLAlchemy.

This is the "second level" of caching: the :class:`.Session` identity map
is the first level and lives only as long as the session does, while the
regions used here are shared by every session created from the same
factory.

The concepts introduced here are:

 * ORMCache - an extension for an ORM :class:`.Session`
   retrieves results in/from dogpile.cache, and evicts cached entities
   when a flush writes to them.
 * FromCache - a statement option that establishes caching
   parameters on a query; used as the "query cache".
 * RelationshipCache - a variant of FromCache which is specific
   to a query invoked during a lazy load.
 * EntityCache - a variant of FromCache for primary key lookups, keyed
   on the identity of the entity rather than on the SQL statement.

The rest of what's here are standard SQLAlchemy and
dogpile.cache constructs.

"""
import logging

from dogpile.cache.api import NO_VALUE

from sqlalchemy import event
from sqlalchemy import inspect
from sqlalchemy.orm import loading
from sqlalchemy.orm.interfaces import UserDefinedOption


log = logging.getLogger(__name__)


class ORMCache(object):

    """An add-on for an ORM :class:`.Session` which loads full results
    from dogpile cache regions, for statements carrying a
    :class:`.FromCache` option, and keeps the entity region current
    as flushes write.

    """

    def __init__(self, regions, entity_region="entities"):
        self.cache_regions = regions
        self.entity_region = entity_region
        self._statement_cache = {}

    def listen_on_session(self, session_factory):
        event.listen(session_factory, "do_orm_execute", self._do_orm_execute)

    def listen_for_writes(self, session_factory):
        """Evict cacheable entities from the entity region when a flush
        inserts, updates or deletes them."""

        event.listen(session_factory, "after_flush", self._after_flush)

    def _do_orm_execute(self, orm_context):

        for opt in orm_context.user_defined_options:
            if isinstance(opt, RelationshipCache):
                opt = opt._process_orm_context(orm_context)
                if opt is None:
                    continue

            if isinstance(opt, FromCache):
                dogpile_region = self.cache_regions[opt.region]

                our_cache_key = opt._generate_cache_key(
                    orm_context.statement, orm_context.parameters, self
                )

                if opt.ignore_expiration:
                    cached_value = dogpile_region.get(
                        our_cache_key,
                        expiration_time=opt.expiration_time,
                        ignore_expiration=opt.ignore_expiration,
                    )
                else:

                    def createfunc():
                        log.debug("cache miss: %s", our_cache_key)
                        return orm_context.invoke_statement().freeze()

                    cached_value = dogpile_region.get_or_create(
                        our_cache_key,
                        createfunc,
                        expiration_time=opt.expiration_time,
                        should_cache_fn=opt.should_cache,
                    )

                if cached_value is NO_VALUE:
                    raise KeyError(our_cache_key)

                orm_result = loading.merge_frozen_result(
                    orm_context.session,
                    orm_context.statement,
                    cached_value,
                    load=False,
                )
                return orm_result()

        else:
            return None

    def _after_flush(self, session, flush_context):
        # new/dirty/deleted still show the pre-flush state here; rows
        # just inserted have their primary key, but no identity key yet
        dogpile_region = self.cache_regions[self.entity_region]
        written = list(session.new) + list(session.dirty)
        for obj in written + list(session.deleted):
            if not getattr(type(obj), "__cacheable__", False):
                continue
            state = inspect(obj)
            if state.key is not None:
                ident = state.key[1]
            else:
                ident = state.mapper.primary_key_from_instance(obj)
            if None in ident:
                continue
            key = EntityCache.key_for(state.class_, tuple(ident))
            log.debug("evicting %s", key)
            dogpile_region.delete(key)

    def invalidate(self, statement, parameters, opt):
        """Invalidate the cache value represented by a statement.

        ``statement`` and ``parameters`` are those the statement was
        executed with, ``opt`` the :class:`.FromCache` option it carried
        or an equivalent one.

        """

        # a legacy Query; select() constructs are used as they are
        if hasattr(statement, "__clause_element__"):
            statement = statement.__clause_element__()

        dogpile_region = self.cache_regions[opt.region]

        cache_key = opt._generate_cache_key(statement, parameters, self)

        dogpile_region.delete(cache_key)

    def evict(self, cls, ident, region=None):
        """Remove one entity from the second level cache."""

        dogpile_region = self.cache_regions[region or self.entity_region]
        dogpile_region.delete(EntityCache.key_for(cls, ident))


class FromCache(UserDefinedOption):
    """A statement option placing the results of the statement in the
    query cache.

    Applied by :func:`.queries.cacheable`; the cached rows are merged
    into the executing session without a database round trip on later
    executions of the same SQL with the same parameters.

    """

    propagate_to_loaders = False

    def __init__(
        self,
        region="default",
        cache_key=None,
        expiration_time=None,
        ignore_expiration=False,
    ):
        """Construct a new FromCache.

        :param region: name of a region in :attr:`.Environment.regions`;
         ``"default"`` holds query results.

        :param cache_key: optional string appended to the key derived
         from the SQL and its parameters, so that two otherwise equal
         statements may be cached apart.

        :param expiration_time: per-statement override of the region's
         expiration time, in seconds.

        :param ignore_expiration: serve whatever is cached, expired or
         not, and never run the statement; a missing value raises
         ``KeyError``.

        """
        self.region = region
        self.cache_key = cache_key
        self.expiration_time = expiration_time
        self.ignore_expiration = ignore_expiration

    def _gen_cache_key(self, anon_map, bindparams):
        return None

    def _generate_cache_key(self, statement, parameters, orm_cache):
        statement_cache_key = statement._generate_cache_key()

        return statement_cache_key.to_offline_string(
            orm_cache._statement_cache, statement, parameters
        ) + repr(self.cache_key)

    def should_cache(self, frozen_result):
        return True


class RelationshipCache(FromCache):
    """A :class:`.FromCache` which applies to the lazy loads of one
    relationship, e.g. ``Order.customer``, for objects loaded by the
    statement carrying it."""

    propagate_to_loaders = True

    def __init__(
        self,
        attribute,
        region="default",
        cache_key=None,
        expiration_time=None,
        ignore_expiration=False,
    ):
        super(RelationshipCache, self).__init__(
            region, cache_key, expiration_time, ignore_expiration
        )
        prop = attribute.property
        self._relationship_options = {(prop.parent.class_, prop.key): self}

    def _process_orm_context(self, orm_context):
        """Return the option for the relationship being lazy loaded, if
        any; None for the statement itself and other loads."""

        current_path = orm_context.loader_strategy_path
        if not current_path:
            return None

        mapper, prop = current_path[-2:]
        for cls in mapper.class_.__mro__:
            option = self._relationship_options.get((cls, prop.key))
            if option is not None:
                return option
        return None

    def and_(self, option):
        """Chain another RelationshipCache, so that a single option
        covers several relationships, e.g. ``Order.customer`` and
        ``Customer.orders``."""

        self._relationship_options.update(option._relationship_options)
        return self


class EntityCache(FromCache):
    """Specifies that a primary key lookup should load its entity from
    the second level cache.

    The key is formed from the class name and the identity, so that
    :class:`.ORMCache` can evict the entry when a flush writes that same
    entity.  A lookup which finds no row is not cached, as the row may
    be inserted, or its deletion rolled back, later on.

    """

    def __init__(self, cls, ident, region="entities", expiration_time=None):
        super(EntityCache, self).__init__(
            region,
            cache_key=self.key_for(cls, ident),
            expiration_time=expiration_time,
        )

    @classmethod
    def key_for(cls, entity_cls, ident):
        if not isinstance(ident, tuple):
            ident = (ident,)
        return "%s:%r" % (entity_cls.__name__, ident)

    def _generate_cache_key(self, statement, parameters, orm_cache):
        return self.cache_key

    def should_cache(self, frozen_result):
        return bool(frozen_result.data)
