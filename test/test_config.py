import os
import shutil
import tempfile
from unittest import mock
from unittest import TestCase

from sqlalchemy import exc as sa_exc
from sqlalchemy.testing import assert_raises
from sqlalchemy.testing import assert_raises_message
from sqlalchemy.testing import eq_
from sqlalchemy.testing import is_false
from sqlalchemy.testing import is_true

from ormtour import exc
from ormtour.config import CONFIG_ENV
from ormtour.config import PersistenceUnit


class PersistenceUnitTest(TestCase):
    def setUp(self):
        self.dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.dir)

    def _write(self, text, name="ormtour.cfg"):
        path = os.path.join(self.dir, name)
        with open(path, "w") as file_:
            file_.write(text)
        return path

    def test_defaults(self):
        unit = PersistenceUnit()
        eq_(unit.name, "ormtour")
        eq_(unit.url, "sqlite://")
        eq_(unit.schema, "drop-and-create")
        is_false(unit.echo)
        is_false(unit.expire_on_commit)
        is_false(unit.batch_inserts)
        eq_(unit.cache_backend, "dogpile.cache.memory")
        eq_(unit.cache_arguments, {})

    def test_unknown_schema_action(self):
        assert_raises_message(
            exc.ConfigurationError,
            "Unknown schema action 'update'",
            PersistenceUnit,
            "x",
            schema="update",
        )

    def test_configuration_error_is_sqlalchemy_error(self):
        assert issubclass(exc.ConfigurationError, sa_exc.SQLAlchemyError)

    def test_no_file_uses_defaults(self):
        unit = PersistenceUnit.from_config(
            "ormtour", filenames=[os.path.join(self.dir, "missing.cfg")]
        )
        eq_(unit.url, "sqlite://")
        eq_(unit.schema, "drop-and-create")

    def test_read_section(self):
        path = self._write(
            """
[persistence-unit:ormtour]
url = sqlite:///some.db
echo = true
schema = create
expire_on_commit = yes
cache.backend = dogpile.cache.dbm
cache.expiration_time = 60
cache.arguments.filename = ./cache.dbm

[persistence-unit:other]
url = sqlite:///other.db
"""
        )
        unit = PersistenceUnit.from_config("ormtour", filenames=[path])

        eq_(unit.name, "ormtour")
        eq_(unit.url, "sqlite:///some.db")
        is_true(unit.echo)
        eq_(unit.schema, "create")
        is_true(unit.expire_on_commit)
        is_false(unit.batch_inserts)
        eq_(unit.cache_backend, "dogpile.cache.dbm")
        eq_(unit.cache_expiration_time, 60)
        eq_(unit.cache_arguments, {"filename": "./cache.dbm"})

        other = PersistenceUnit.from_config("other", filenames=[path])
        eq_(other.url, "sqlite:///other.db")
        eq_(other.cache_arguments, {})

    def test_percent_encoded_url(self):
        path = self._write(
            "[persistence-unit:ormtour]\n"
            "url = postgresql://u:p%40ss@h/db\n"
            "cache.arguments.filename = ./cache%%.dbm\n"
        )
        unit = PersistenceUnit.from_config("ormtour", filenames=[path])

        eq_(unit.url, "postgresql://u:p%40ss@h/db")
        eq_(unit.cache_arguments, {"filename": "./cache%%.dbm"})

    def test_missing_section(self):
        path = self._write("[persistence-unit:ormtour]\nurl = sqlite://\n")
        assert_raises_message(
            exc.ConfigurationError,
            r"No section \[persistence-unit:nope\]",
            PersistenceUnit.from_config,
            "nope",
            filenames=[path],
        )

    def test_invalid_boolean(self):
        path = self._write("[persistence-unit:ormtour]\necho = maybe\n")
        assert_raises(
            exc.ConfigurationError,
            PersistenceUnit.from_config,
            "ormtour",
            filenames=[path],
        )

    def test_invalid_expiration_time(self):
        path = self._write(
            "[persistence-unit:ormtour]\ncache.expiration_time = soon\n"
        )
        assert_raises(
            exc.ConfigurationError,
            PersistenceUnit.from_config,
            "ormtour",
            filenames=[path],
        )

    def test_overrides(self):
        path = self._write(
            "[persistence-unit:ormtour]\nurl = sqlite:///a.db\necho = true\n"
        )
        unit = PersistenceUnit.from_config(
            "ormtour", filenames=[path], url="sqlite:///b.db", echo=None
        )
        eq_(unit.url, "sqlite:///b.db")
        is_true(unit.echo)

    def test_environment_variable(self):
        path = self._write(
            "[persistence-unit:ormtour]\nurl = sqlite:///env.db\n",
            name="elsewhere.cfg",
        )
        with mock.patch.dict(os.environ, {CONFIG_ENV: path}):
            unit = PersistenceUnit.from_config()
        eq_(unit.url, "sqlite:///env.db")

    def test_create_engine(self):
        unit = PersistenceUnit("x", url="sqlite://", echo=True)
        engine = unit.create_engine()
        try:
            eq_(engine.url.render_as_string(), "sqlite://")
            is_true(engine.echo)
        finally:
            engine.dispose()

    def test_repr(self):
        eq_(
            repr(PersistenceUnit("x", url="sqlite://")),
            "PersistenceUnit('x', url='sqlite://')",
        )
