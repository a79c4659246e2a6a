"""Database engine and helpers.

`RecordStore` is the single store handle the application builds at
startup. It owns the SQLModel/SQLAlchemy engine, hands out sessions to
services and is disposed when the process shuts down. Nothing in the
package keeps a module-level engine.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

logger = logging.getLogger("academia.store")


def _is_memory_sqlite(url: str) -> bool:
    return url.rstrip("/") in ("sqlite:", "sqlite:///:memory:")


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class RecordStore:
    """Relational persistence handle shared by every service."""

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        kwargs = {"echo": echo}
        if url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if _is_memory_sqlite(url):
                # one shared connection, otherwise every session gets its own empty database
                kwargs["poolclass"] = StaticPool
        self.engine: Engine = create_engine(url, **kwargs)
        if url.startswith("sqlite"):
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Yield a `Session` bound to this store and close it afterwards."""
        with Session(self.engine) as session:
            yield session

    def dispose(self) -> None:
        """Release pooled connections."""
        self.engine.dispose()
        logger.info("record store closed")


def get_store(request: Request) -> RecordStore:
    """FastAPI dependency returning the store built by the app lifespan."""
    return request.app.state.store


def get_session(request: Request):
    """Yield a database `Session` for FastAPI dependency injection.

    The generator yields a session and ensures it is closed when the
    request scope finishes.
    """
    with get_store(request).session() as session:
        yield session
