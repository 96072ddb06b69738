"""Record the SQL an engine emits.

Probes are about observing which statements the ORM generates for an
operation, so each probe runs inside a :class:`.StatementRecorder`::

    with StatementRecorder(engine) as recorder:
        session.flush()

    print(recorder.count("INSERT"), recorder.count("UPDATE", "jpa_orders"))

An ``executemany()`` call is counted once per parameter set, so that a
statement batched by the DBAPI counts the same as the equivalent series
of single-row statements.

"""
import collections
import logging
import re

from sqlalchemy import event


log = logging.getLogger(__name__)


class RecordedStatement(
    collections.namedtuple(
        "RecordedStatement", ["statement", "parameters", "executemany"]
    )
):
    @property
    def verb(self):
        words = self.statement.split(None, 1)
        return words[0].upper() if words else ""

    @property
    def executions(self):
        if self.executemany:
            return len(self.parameters)
        return 1

    def touches(self, table):
        return (
            re.search(r"\b%s\b" % re.escape(table), self.statement)
            is not None
        )


class StatementRecorder(object):
    """Collect statements passed to the cursor of an :class:`.Engine`."""

    def __init__(self, engine):
        self.engine = engine
        self.statements = []
        self._listening = False

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, *exc_info):
        self.stop()

    def start(self):
        if not self._listening:
            event.listen(
                self.engine, "before_cursor_execute", self._before_execute
            )
            self._listening = True

    def stop(self):
        if self._listening:
            event.remove(
                self.engine, "before_cursor_execute", self._before_execute
            )
            self._listening = False

    def clear(self):
        del self.statements[:]

    def _before_execute(
        self, conn, cursor, statement, parameters, context, executemany
    ):
        recorded = RecordedStatement(statement, parameters, executemany)
        log.debug("%s %r", statement, parameters)
        self.statements.append(recorded)

    def count(self, verb=None, table=None):
        """Number of executions, optionally limited to one SQL verb
        and/or to statements naming ``table``."""

        total = 0
        for recorded in self.statements:
            if verb is not None and recorded.verb != verb.upper():
                continue
            if table is not None and not recorded.touches(table):
                continue
            total += recorded.executions
        return total

    def counts(self):
        """Executions per SQL verb, in order of first appearance."""

        totals = collections.OrderedDict()
        for recorded in self.statements:
            totals[recorded.verb] = (
                totals.get(recorded.verb, 0) + recorded.executions
            )
        return totals

    def report(self):
        lines = []
        for recorded in self.statements:
            lines.append(recorded.statement)
            if recorded.parameters:
                lines.append("    %r" % (recorded.parameters,))
        return "\n".join(lines)
