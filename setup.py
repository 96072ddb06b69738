from __future__ import annotations

import os
import re

from setuptools import find_packages
from setuptools import setup


def _version() -> str:
    path = os.path.join(
        os.path.dirname(__file__), "lib", "ormtour", "__init__.py"
    )
    with open(path) as file_:
        match = re.search(r'^__version__ = "(.+)"$', file_.read(), re.M)
    if match is None:
        raise RuntimeError("Cannot find __version__ in lib/ormtour")
    return match.group(1)


setup(
    name="ormtour",
    version=_version(),
    description="Probes of ORM mapping, querying, caching and lifecycle "
    "behaviors, observed through the SQL SQLAlchemy emits",
    python_requires=">=3.9",
    package_dir={"": "lib"},
    packages=find_packages("lib"),
    install_requires=[
        "SQLAlchemy>=2.0.10",
        "dogpile.cache>=1.1",
    ],
    extras_require={
        "tests": ["pytest>=7"],
    },
    entry_points={
        "console_scripts": ["ormtour-probes = ormtour.probes:main"],
    },
)
