"""Establish the engine, session factory and cache regions for a
persistence unit.

"""
import contextlib
from hashlib import md5
import logging

from dogpile.cache.region import make_region

from sqlalchemy.orm import scoped_session
from sqlalchemy.orm import sessionmaker

from . import caching_query
from .config import PersistenceUnit
from .model import Base


log = logging.getLogger(__name__)


def md5_key_mangler(key):
    """Receive cache keys as long concatenated strings;
    distill them into an md5 hash.

    """
    return md5(key.encode("utf-8")).hexdigest()


class Environment(object):
    """Everything built from one :class:`.PersistenceUnit`.

    ``Session`` is the session factory; every session it creates shares
    the dogpile cache ``regions``, consulted by statements carrying a
    :class:`.FromCache` option.  Each session's ``info`` dictionary
    refers back to this environment under the key ``"environment"``.

    """

    def __init__(self, unit=None):
        if unit is None:
            unit = PersistenceUnit.from_config()
        self.unit = unit
        self.engine = unit.create_engine()

        self.Session = sessionmaker(
            bind=self.engine,
            expire_on_commit=unit.expire_on_commit,
            info={"environment": self},
        )
        self.scoped_session = scoped_session(self.Session)

        # dogpile cache regions.  A home base for cache configurations.
        # "default" holds query results, "entities" the instances loaded
        # by primary key
        self.regions = {
            name: make_region(key_mangler=md5_key_mangler).configure(
                unit.cache_backend,
                expiration_time=unit.cache_expiration_time,
                arguments=self._region_arguments(name),
            )
            for name in ("default", "entities")
        }

        self.cache = caching_query.ORMCache(self.regions, "entities")
        self.cache.listen_on_session(self.Session)
        self.cache.listen_for_writes(self.Session)

        log.info("environment ready for %r", unit)

    def _region_arguments(self, name):
        arguments = dict(self.unit.cache_arguments)
        # file based backends need a file per region
        if "filename" in arguments and name != "default":
            arguments["filename"] = "%s.%s" % (arguments["filename"], name)
        return arguments

    @contextlib.contextmanager
    def begin(self):
        """Provide a session within a transaction; commit when the block
        completes, roll back if it raises."""

        session = self.Session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def create_schema(self):
        Base.metadata.create_all(self.engine)

    def drop_schema(self):
        Base.metadata.drop_all(self.engine)

    def reset_schema(self):
        """Apply the unit's ``schema`` action."""

        action = self.unit.schema
        log.debug("schema action %r", action)
        if action == "drop-and-create":
            self.drop_schema()
            self.create_schema()
        elif action == "create":
            self.create_schema()

    def invalidate_caches(self):
        for region in self.regions.values():
            region.invalidate()

    def dispose(self):
        self.scoped_session.remove()
        self.engine.dispose()
