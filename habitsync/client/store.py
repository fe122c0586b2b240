from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from habitsync.client.models import LocalBase
from habitsync.db import make_engine
from habitsync.settings import settings

logger = logging.getLogger(__name__)


class LocalStore:
    """One device-local database, opened once at startup and passed around.

    `open()` creates the engine and tables, `close()` disposes them. Use
    `session()` for a unit of work: it commits on success and rolls back on
    error.
    """

    def __init__(self, url: str | None = None) -> None:
        self.url = url or settings.LOCAL_DATABASE_URL
        self._engine = None
        self._sessionmaker: sessionmaker | None = None

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    def open(self) -> "LocalStore":
        if self._engine is not None:
            return self
        kwargs = {}
        if self.url in ("sqlite://", "sqlite+pysqlite://", "sqlite:///:memory:"):
            # Keep one connection so the in-memory database survives across sessions.
            kwargs["poolclass"] = StaticPool
        self._engine = make_engine(self.url, **kwargs)
        LocalBase.metadata.create_all(self._engine)
        self._sessionmaker = sessionmaker(bind=self._engine, autocommit=False, autoflush=False, expire_on_commit=False)
        logger.info("Local store opened (%s)", self._engine.url.get_backend_name())
        return self

    def close(self) -> None:
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._sessionmaker = None

    def __enter__(self) -> "LocalStore":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @contextmanager
    def session(self) -> Iterator[Session]:
        if self._sessionmaker is None:
            raise RuntimeError("LocalStore is not open")
        db = self._sessionmaker()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()
