"""Exceptions raised by ormtour.

Only contract checks which the ORM itself does not perform raise the
exceptions here; everything else (:exc:`~sqlalchemy.exc.IntegrityError`,
:exc:`~sqlalchemy.orm.exc.StaleDataError`,
:exc:`~sqlalchemy.exc.NoResultFound`, ...) propagates from SQLAlchemy
and the DBAPI untouched.

"""

import sqlalchemy.exc as sa_exc


class OrmTourError(sa_exc.SQLAlchemyError):
    """Generic error class."""


class ConfigurationError(OrmTourError):
    """A persistence unit could not be located or contains invalid
    settings."""


class EntityExistsError(sa_exc.InvalidRequestError, OrmTourError):
    """An instance passed to :func:`.persist` already has an identity.

    Detached instances, deleted instances and transient instances
    carrying a primary key value are rejected; :meth:`.Session.merge`
    is the operation for those.

    """


class IllegalEntityStateError(sa_exc.InvalidRequestError, OrmTourError):
    """An instance is not in a state that allows the requested operation,
    e.g. :func:`.remove` given a detached instance."""


class NoSuchQueryError(sa_exc.InvalidRequestError, OrmTourError):
    """No named query is registered under the given name."""
