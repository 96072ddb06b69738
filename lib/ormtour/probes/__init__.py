"""Probes of ORM behavior, grouped into suites.

Each probe performs one operation (a lookup, a persist, a query) inside
its own session and transaction, prints what it observes, and the runner
reports which SQL statements the operation caused:

* lifecycle - find, get_reference, persist, remove, merge, flush, refresh
* one_to_many / many_to_one - Customer and its Orders
* one_to_one - Department and Manager
* many_to_many - Item and Category
* querying - object queries, projections, named and native queries
* caching - identity map, second level cache, query cache
* transactions - declarative transactions in a service layer

A command line tool is presented at the package level which allows
individual suites to be run::

    $ python -m ormtour.probes --help
    usage: python -m ormtour.probes [-h] [--probe PROBE] [--unit UNIT]
                                    [--config CONFIG] [--dburl DBURL]
                                    [--echo] [--sql] [--log-info LOGGER]
                                    [--log-debug LOGGER]
                                    {caching,lifecycle,...}

An example run looks like::

    $ python -m ormtour.probes one_to_many --sql
    Probes to run: persist, find, update, remove
    customer MM persisted with 2 orders
    persist : Persist a customer and its orders.; INSERT 3
    INSERT INTO jpa_customers (last_name, email, age, birth, ...

Before each probe the schema is reset according to the persistence
unit's ``schema`` setting and the fixture data in
:mod:`ormtour.fixture_data` is installed if the tables are empty.

Writing your Own Suites
-----------------------

A suite is a module in this package which calls
:meth:`.Walkthrough.init` and registers probe functions; a probe
receives the :class:`.Session` the runner opened for it::

    from . import Walkthrough
    from ..lifecycle import find
    from ..model import Customer

    Walkthrough.init("my_suite")


    @Walkthrough.probe
    def lookup_twice(session):
        "Two lookups of one primary key in one session."

        print(find(session, Customer, 1) is find(session, Customer, 1))

"""
import argparse
import logging
import os
import re
import sys

from .. import fixture_data
from ..config import DEFAULT_UNIT
from ..config import PersistenceUnit
from ..environment import Environment
from ..recorder import StatementRecorder


log = logging.getLogger(__name__)


class Walkthrough(object):
    suites = {}

    _setup = {}
    _setup_once = {}
    name = None

    def __init__(self, suite, unit, probe_name=None, show_sql=False):
        self.suite = suite
        self.unit = unit
        self.probe_name = probe_name
        self.show_sql = show_sql
        self.results = []

    @classmethod
    def init(cls, name):
        cls.name = name
        cls.suites.setdefault(name, [])

    @classmethod
    def probe(cls, fn):
        if cls.name is None:
            raise ValueError(
                "Need to call Walkthrough.init(<suitename>) first."
            )
        cls.suites[cls.name].append(fn)
        return fn

    @classmethod
    def setup(cls, fn):
        """Register a function run with the :class:`.Environment` before
        each probe of the current suite, after fixture data is
        installed."""

        if cls.name in cls._setup:
            raise ValueError(
                "setup function already set to %s" % cls._setup[cls.name]
            )
        cls._setup[cls.name] = fn
        return fn

    @classmethod
    def setup_once(cls, fn):
        """Register a function run with the :class:`.PersistenceUnit` once
        per run of the current suite, before its first probe."""

        if cls.name in cls._setup_once:
            raise ValueError(
                "setup_once function already set to %s"
                % cls._setup_once[cls.name]
            )
        cls._setup_once[cls.name] = fn
        return fn

    def run(self):
        """Run the probes of the suite; return True if none raised."""

        try:
            probes = self.suites[self.suite]
        except KeyError as err:
            raise ValueError("No such suite: %s" % self.suite) from err

        if self.probe_name:
            probes = [fn for fn in probes if fn.__name__ == self.probe_name]
            if not probes:
                raise ValueError("No such probe: %s" % self.probe_name)

        setup_once = self._setup_once.get(self.suite)
        if setup_once is not None:
            print("Running setup once...")
            setup_once(self.unit)
        print("Probes to run: %s" % ", ".join([p.__name__ for p in probes]))
        for probe in probes:
            self._run_probe(probe)
            self.results[-1].report()

        return not any(result.error for result in self.results)

    def _prepare(self):
        env = Environment(self.unit)
        env.reset_schema()
        with env.begin() as session:
            if not fixture_data.installed(session):
                fixture_data.install(session)
        setup = self._setup.get(self.suite)
        if setup is not None:
            setup(env)
        return env

    def _run_probe(self, fn):
        env = self._prepare()
        recorder = StatementRecorder(env.engine)
        error = None
        try:
            with recorder, env.begin() as session:
                fn(session)
        except Exception as err:
            log.debug("probe %s failed", fn.__name__, exc_info=True)
            error = err
        finally:
            env.dispose()
        self.results.append(ProbeResult(self, fn, recorder, error))

    @classmethod
    def main(cls, argv=None):
        parser = argparse.ArgumentParser("python -m ormtour.probes")

        parser.add_argument(
            "suite", choices=cls._suite_names(), help="suite to run"
        )
        parser.add_argument(
            "--probe", type=str, help="run specific probe name"
        )
        parser.add_argument(
            "--unit",
            type=str,
            default=DEFAULT_UNIT,
            help="persistence unit name, default %s" % DEFAULT_UNIT,
        )
        parser.add_argument(
            "--config",
            type=str,
            help="persistence unit configuration file, default "
            "$ORMTOUR_CONFIG or ./ormtour.cfg",
        )
        parser.add_argument(
            "--dburl",
            type=str,
            help="database URL, overrides the persistence unit",
        )
        parser.add_argument(
            "--echo", action="store_true", help="Echo SQL output"
        )
        parser.add_argument(
            "--sql",
            action="store_true",
            help="print the statements each probe emitted",
        )
        parser.add_argument(
            "--log-info",
            action="append",
            default=[],
            metavar="LOGGER",
            help="turn on info logging for <LOGGER> (multiple OK)",
        )
        parser.add_argument(
            "--log-debug",
            action="append",
            default=[],
            metavar="LOGGER",
            help="turn on debug logging for <LOGGER> (multiple OK)",
        )
        args = parser.parse_args(argv)

        _log(args.log_info, args.log_debug)

        unit = PersistenceUnit.from_config(
            args.unit,
            filenames=[args.config] if args.config else None,
            url=args.dburl,
            echo=args.echo or None,
        )

        __import__(__name__ + "." + args.suite)

        walkthrough = cls(
            args.suite, unit, probe_name=args.probe, show_sql=args.sql
        )
        return 0 if walkthrough.run() else 1

    @classmethod
    def _suite_names(cls):
        suites = []
        for file_ in os.listdir(os.path.dirname(__file__)):
            match = re.match(r"^([a-z].*)\.py$", file_)
            if match:
                suites.append(match.group(1))
        return sorted(suites)


def _log(info, debug):
    if info or debug:
        logging.basicConfig()
    for name in info:
        logging.getLogger(name).setLevel(logging.INFO)
    for name in debug:
        logging.getLogger(name).setLevel(logging.DEBUG)


class ProbeResult(object):
    def __init__(self, walkthrough, probe, recorder, error=None):
        self.walkthrough = walkthrough
        self.probe = probe
        self.recorder = recorder
        self.error = error

    def report(self):
        print(self._summary())
        if self.walkthrough.show_sql and self.recorder.statements:
            print(self.recorder.report())

    def _summary(self):
        summary = "%s : %s" % (self.probe.__name__, self.probe.__doc__)
        counts = self.recorder.counts()
        if counts:
            summary += "; %s" % ", ".join(
                "%s %d" % (verb, count) for verb, count in counts.items()
            )
        else:
            summary += "; no SQL"
        if self.error is not None:
            summary += "; FAILED with %s: %s" % (
                type(self.error).__name__,
                self.error,
            )
        return summary


def main():
    sys.exit(Walkthrough.main())
