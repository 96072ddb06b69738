"""Persistence unit configuration.

A persistence unit is a named set of settings: database URL, SQL echo,
what to do with the schema at startup, and the cache region backing the
second level / query cache.  Units are read from an ini file, one section
per unit::

    [persistence-unit:ormtour]
    url = sqlite:///ormtour.db
    echo = true
    schema = create
    cache.backend = dogpile.cache.dbm
    cache.expiration_time = 3600
    cache.arguments.filename = ./ormtour-cache.dbm

The file is located via the ``ORMTOUR_CONFIG`` environment variable,
else ``ormtour.cfg`` in the current directory.  When no file is found
at all, the defaults below are used.

"""
import configparser
import logging
import os

from sqlalchemy import create_engine

from . import exc


log = logging.getLogger(__name__)

DEFAULT_UNIT = "ormtour"
CONFIG_ENV = "ORMTOUR_CONFIG"
CONFIG_FILE = "ormtour.cfg"

SCHEMA_ACTIONS = ("create", "drop-and-create", "none")

_BOOLEAN_KEYS = ("echo", "expire_on_commit", "batch_inserts")
_ARGUMENT_PREFIX = "cache.arguments."


class PersistenceUnit(object):
    """Settings for one named persistence unit.

    :param url: database URL passed to :func:`_sa.create_engine`.

    :param echo: log all SQL emitted, via the ``sqlalchemy.engine``
     logger.

    :param schema: one of ``"create"``, ``"drop-and-create"`` or
     ``"none"``; consulted by :meth:`.Environment.reset_schema`.

    :param expire_on_commit: passed to the session factory.  Defaults to
     False so that instances stay usable after their transaction commits,
     which is also what allows cached instances to be merged into a later
     session without reloading.

    :param batch_inserts: when False (the default), INSERT statements for
     rows which need server generated primary keys are emitted one row at
     a time, rather than batched using "insertmanyvalues", so that each
     INSERT can be observed individually.

    """

    def __init__(
        self,
        name=DEFAULT_UNIT,
        url="sqlite://",
        echo=False,
        schema="drop-and-create",
        expire_on_commit=False,
        batch_inserts=False,
        cache_backend="dogpile.cache.memory",
        cache_expiration_time=3600,
        cache_arguments=None,
    ):
        if schema not in SCHEMA_ACTIONS:
            raise exc.ConfigurationError(
                "Unknown schema action %r for persistence unit %r; "
                "expected one of %s"
                % (schema, name, ", ".join(SCHEMA_ACTIONS))
            )
        self.name = name
        self.url = url
        self.echo = echo
        self.schema = schema
        self.expire_on_commit = expire_on_commit
        self.batch_inserts = batch_inserts
        self.cache_backend = cache_backend
        self.cache_expiration_time = cache_expiration_time
        self.cache_arguments = dict(cache_arguments or {})

    @classmethod
    def from_config(cls, name=DEFAULT_UNIT, filenames=None, **overrides):
        """Load the unit ``name`` from ini files.

        ``overrides`` replace values read from the file; overrides
        which are None are ignored, so that unset command line options
        may be passed straight through.

        """
        if filenames is None:
            filenames = [os.environ.get(CONFIG_ENV, CONFIG_FILE)]

        # URLs may carry percent-encoded characters
        parser = configparser.ConfigParser(interpolation=None)
        found = parser.read(filenames)
        section_name = "persistence-unit:%s" % name

        if parser.has_section(section_name):
            kw = cls._options_from_section(parser[section_name])
            log.debug("persistence unit %r read from %s", name, found)
        elif found:
            raise exc.ConfigurationError(
                "No section [%s] in %s" % (section_name, ", ".join(found))
            )
        else:
            log.debug(
                "no configuration file found; "
                "persistence unit %r uses defaults",
                name,
            )
            kw = {}

        kw.update(
            (key, value)
            for key, value in overrides.items()
            if value is not None
        )
        return cls(name, **kw)

    @classmethod
    def _options_from_section(cls, section):
        kw = {}
        try:
            if "url" in section:
                kw["url"] = section["url"]
            if "schema" in section:
                kw["schema"] = section["schema"]
            for key in _BOOLEAN_KEYS:
                if key in section:
                    kw[key] = section.getboolean(key)
            if "cache.backend" in section:
                kw["cache_backend"] = section["cache.backend"]
            if "cache.expiration_time" in section:
                kw["cache_expiration_time"] = section.getint(
                    "cache.expiration_time"
                )
        except ValueError as err:
            raise exc.ConfigurationError(
                "Invalid value in [%s]: %s" % (section.name, err)
            ) from err

        kw["cache_arguments"] = {
            key[len(_ARGUMENT_PREFIX) :]: value
            for key, value in section.items()
            if key.startswith(_ARGUMENT_PREFIX)
        }
        return kw

    def create_engine(self):
        return create_engine(
            self.url,
            echo=self.echo,
            use_insertmanyvalues=self.batch_inserts,
        )

    def __repr__(self):
        return "PersistenceUnit(%r, url=%r)" % (self.name, self.url)
