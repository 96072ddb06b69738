"""Nox configuration for ormtour."""

from __future__ import annotations

import os
from typing import Dict

import nox


PYTHON_VERSIONS = ["3.9", "3.10", "3.11", "3.12", "3.13"]
DATABASES = ["sqlite", "sqlite_file"]

# database URL used by the test suite, per database name; see
# test/_fixtures.py
DB_URLS: Dict[str, str] = {
    "sqlite": "sqlite://",
    "sqlite_file": "sqlite:///ormtour-test.db",
}

nox.options.sessions = ["tests"]


@nox.session(python=PYTHON_VERSIONS)
@nox.parametrize("database", DATABASES)
def tests(session: nox.Session, database: str) -> None:
    """run the test suite"""

    _tests(session, database)


@nox.session(name="coverage")
def coverage(session: nox.Session) -> None:
    """Run tests with coverage."""

    _tests(session, "sqlite", coverage=True)


@nox.session(name="pep8")
def test_pep8(session: nox.Session) -> None:
    """Run linting and formatting checks."""

    session.install("flake8", "black")
    session.run(
        "black", "--check", "-l", "79", "lib", "test", "noxfile.py", "setup.py"
    )
    session.run(
        "flake8",
        "--max-line-length",
        "79",
        "lib",
        "test",
        "noxfile.py",
        "setup.py",
    )


def _tests(
    session: nox.Session, database: str, coverage: bool = False
) -> None:
    # PYTHONNOUSERSITE - this *MUST* be set so that the ./lib/ import
    # set up explicitly in test/conftest.py is *disabled*, so that
    # the package installed into the .nox area is the one tested
    session.env["PYTHONNOUSERSITE"] = "1"
    session.env["ORMTOUR_TEST_URL"] = os.environ.get(
        f"TOX_{database.upper()}", DB_URLS[database]
    )

    cmd = ["python", "-m", "pytest", "test", "--tb", "native", "-v"]

    if coverage:
        session.install("-e", ".[tests]")
        session.install("pytest-cov")
        cmd.extend(
            [
                "--cov=ormtour",
                "--cov-report",
                "term",
                "--cov-report",
                "xml",
            ]
        )
    else:
        session.install(".[tests]")

    cmd.extend(session.posargs)

    try:
        session.run(*cmd)
    finally:
        if database == "sqlite_file" and os.path.exists("ormtour-test.db"):
            os.remove("ormtour-test.db")
