"""A guided tour of ORM behaviors: relationship mappings, query styles,
caching tiers and the persistence lifecycle, observed through the SQL
that SQLAlchemy emits.

The mapped classes are in :mod:`ormtour.model`; the probes which
exercise them, and the command line runner, are in
:mod:`ormtour.probes`::

    python -m ormtour.probes lifecycle --sql

"""

__version__ = "0.1.0"
