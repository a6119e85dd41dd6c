"""
Database handle - owns the SQLAlchemy engine, its connection pool and the
session factory.

The handle is constructed explicitly (by the application lifespan or a
script) and passed down; nothing here is created at import time.
"""

from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from listingboard.core.config import Settings
from listingboard.core.errors import StorageError
from listingboard.core.logging_config import get_logger

logger = get_logger(__name__)


def build_engine(url: str, settings: Settings) -> Engine:
    """
    Create an engine with a bounded pool.

    pool_size: maximum concurrent connections (no overflow)
    pool_timeout: seconds to wait for a free connection
    pool_recycle: replace connections older than this many seconds
    """
    if url.startswith("sqlite"):
        # One shared connection so in-memory databases survive across sessions
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=settings.debug,
        )
    return create_engine(
        url,
        pool_size=settings.db_pool_size,
        max_overflow=0,
        pool_timeout=settings.db_pool_timeout,
        pool_recycle=settings.db_pool_recycle,
        pool_pre_ping=True,
        echo=settings.debug,  # Log SQL queries in debug mode
    )


class Database:
    """Engine + session factory with scoped, always-released sessions."""

    def __init__(self, url: str, settings: Settings, engine: Optional[Engine] = None):
        self.url = url
        self.engine = engine or build_engine(url, settings)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(settings.resolved_database_url, settings)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """
        Context manager for database sessions.
        Usage:
            with database.session() as db:
                db.execute(text("SELECT * FROM users"))

        Commits on success, rolls back on any error, always closes. Driver
        errors are re-raised as StorageError.
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("Database error: %s", exc)
            raise StorageError(detail=str(exc)) from exc
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def ping(self) -> bool:
        """
        Test if the database is reachable.
        Returns True if connection successful, False otherwise.
        """
        try:
            with self.session() as db:
                row = db.execute(text("SELECT 1 AS test")).fetchone()
                return row[0] == 1
        except StorageError as exc:
            logger.warning("Database connection failed: %s", exc.detail)
            return False

    def dispose(self) -> None:
        """Close every pooled connection."""
        self.engine.dispose()


def get_database(request: Request) -> Database:
    """
    Dependency for FastAPI route injection.
    Usage:
        @router.get("/listings")
        def list_listings(database: Database = Depends(get_database)):
            ...
    """
    return request.app.state.database
