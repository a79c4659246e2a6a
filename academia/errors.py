"""Error kinds raised at the store boundary.

Driver failures are translated into a small set of kinds so callers can
tell a duplicate record apart from an unreachable database. The HTTP
layer still answers every store failure with a 500 and an `error`
message; the kind is only used for logging and by service callers.
"""

import enum
import logging
from contextlib import contextmanager
from typing import Optional

from sqlalchemy import exc as sa_exc
from sqlmodel import Session

logger = logging.getLogger("academia.store")


class ErrorKind(str, enum.Enum):
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    STORAGE_UNAVAILABLE = "storage_unavailable"
    INTERNAL = "internal"


class StoreError(Exception):
    """A persistence failure classified by `kind`."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


class RouteNotFound(Exception):
    """Raised when no handler exists for an `/api` path."""

    def __init__(self, path: str):
        super().__init__(path)
        self.path = path


UNAVAILABLE_MARKERS = (
    "database is locked",
    "database table is locked",
    "unable to open database",
    "disk i/o error",
    "could not connect",
    "connection refused",
    "server closed the connection",
)


def is_unavailable_message(message: str) -> bool:
    """True when a driver message describes a locked or unreachable store."""
    lowered = message.lower()
    return any(marker in lowered for marker in UNAVAILABLE_MARKERS)


def _driver_message(exc: sa_exc.SQLAlchemyError) -> str:
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


def translate(exc: Exception) -> StoreError:
    """Map a SQLAlchemy exception onto a `StoreError`."""
    if isinstance(exc, StoreError):
        return exc
    if isinstance(exc, sa_exc.IntegrityError):
        message = _driver_message(exc)
        # SQLite: "UNIQUE constraint failed", PostgreSQL: "duplicate key value"
        lowered = message.lower()
        if "unique" in lowered or "duplicate" in lowered:
            return StoreError(ErrorKind.CONFLICT, message)
        return StoreError(ErrorKind.INTERNAL, message)
    if isinstance(exc, sa_exc.NoResultFound):
        return StoreError(ErrorKind.NOT_FOUND, str(exc))
    if isinstance(exc, (sa_exc.InterfaceError, sa_exc.DisconnectionError)):
        return StoreError(ErrorKind.STORAGE_UNAVAILABLE, _driver_message(exc))
    if isinstance(exc, sa_exc.OperationalError):
        # "no such table" and syntax errors are also OperationalError in SQLite
        message = _driver_message(exc)
        if exc.connection_invalidated or is_unavailable_message(message):
            return StoreError(ErrorKind.STORAGE_UNAVAILABLE, message)
        return StoreError(ErrorKind.INTERNAL, message)
    if isinstance(exc, sa_exc.SQLAlchemyError):
        return StoreError(ErrorKind.INTERNAL, _driver_message(exc))
    return StoreError(ErrorKind.INTERNAL, str(exc))


@contextmanager
def store_errors(session: Optional[Session] = None):
    """Translate SQLAlchemy failures raised inside the block.

    The session, when given, is rolled back before the `StoreError`
    propagates so it can be reused or closed cleanly.
    """
    try:
        yield
    except sa_exc.SQLAlchemyError as exc:
        if session is not None:
            session.rollback()
        err = translate(exc)
        logger.warning("store failure kind=%s: %s", err.kind.value, err.message)
        raise err from exc
