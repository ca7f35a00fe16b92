"""Database handle: lazily-created engine and session factory.

One ``Database`` is created at application start-up, injected into the
request handlers and disposed on shutdown.
"""

import contextlib
import logging
from collections.abc import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from database.models import Base

logger = logging.getLogger(__name__)


class Database:
    def __init__(self, url: str) -> None:
        self.url = url
        self._engine: Engine | None = None
        self._sessionmaker: sessionmaker | None = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            kwargs: dict = {}
            if self.url.startswith("sqlite"):
                kwargs["connect_args"] = {"check_same_thread": False}
                if ":memory:" in self.url or self.url == "sqlite://":
                    # One shared connection, otherwise every session sees an empty DB
                    kwargs["poolclass"] = StaticPool
            self._engine = create_engine(self.url, **kwargs)
            logger.info("Database engine created for %s", self._engine.url.render_as_string(hide_password=True))
        return self._engine

    @property
    def sessionmaker(self) -> sessionmaker:
        if self._sessionmaker is None:
            self._sessionmaker = sessionmaker(
                bind=self.engine, autoflush=False, expire_on_commit=False
            )
        return self._sessionmaker

    def create_all(self) -> None:
        Base.metadata.create_all(self.engine)

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._sessionmaker = None

    @contextlib.contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Provide a transactional scope around a series of operations."""
        session = self.sessionmaker()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
