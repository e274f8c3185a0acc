"""
Garde commune aux opérations de service : une panne ou un timeout de la base
devient un Result DatastoreUnavailable, après rollback de la transaction en cours.
"""

import functools
import logging

from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from app.errors import ErrorKind, Result

logger = logging.getLogger(__name__)

DATASTORE_ERRORS = (OperationalError, InterfaceError, PoolTimeoutError)


def datastore_guard(func):
    """Décore une fonction de service `func(db, ...) -> Result`."""

    @functools.wraps(func)
    def wrapper(db, *args, **kwargs):
        try:
            return func(db, *args, **kwargs)
        except DATASTORE_ERRORS as exc:
            db.rollback()
            logger.error("Base de données indisponible pendant %s : %s", func.__name__, exc, exc_info=True)
            return Result.fail(
                ErrorKind.DATASTORE_UNAVAILABLE,
                "La base de données est momentanément indisponible.",
            )

    return wrapper
