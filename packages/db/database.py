"""
SQLAlchemy database engine and session management.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker

from packages.shared.config import StoreConfig

logger = logging.getLogger("pharmalocal.db")


class Database:
    """Engine and session factory bound to one StoreConfig."""

    def __init__(self, config: StoreConfig):
        self.config = config
        url = make_url(config.database_url)

        # Connection arguments for SQLite (not needed for other backends)
        connect_args = {}
        if url.drivername.startswith("sqlite"):
            connect_args = {"check_same_thread": False}
            if url.database and url.database != ":memory:":
                Path(url.database).parent.mkdir(parents=True, exist_ok=True)

        self.engine = create_engine(config.database_url, echo=config.echo, connect_args=connect_args)
        self.SessionLocal = sessionmaker(bind=self.engine, autoflush=False, autocommit=False)

    def init_db(self) -> None:
        """Create all tables (idempotent)."""
        from packages.db.models import Base  # noqa: F811
        Base.metadata.create_all(bind=self.engine)
        logger.debug("Tables ready on %s", self.engine.url)

    def dispose(self) -> None:
        self.engine.dispose()

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Context manager that yields a DB session and handles commit/rollback."""
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
