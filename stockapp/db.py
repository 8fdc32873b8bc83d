"""
Primary store engine and sessions.

Usage:
    from stockapp.db import db, get_db

    db.initialize()
    db.create_all_tables()
    with db.session() as session:
        ProductService(session, notifier).create(...)

Write services commit explicitly so their post-commit hooks fire at a
known point; ``session()`` commits whatever is left and rolls back on
error.
"""

from collections.abc import Generator
from contextlib import contextmanager
from typing import Optional

from sqlalchemy import Engine, create_engine, event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import Settings, get_settings
from .logging import get_logger

logger = get_logger("db")


class Base(DeclarativeBase):
    """Declarative base for the catalog, product and stock models."""


def enable_sqlite_foreign_keys(engine: Engine) -> None:
    """SQLite ignores ON DELETE rules unless the pragma is set per connection."""

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_db_engine(url: str, settings: Optional[Settings] = None) -> Engine:
    """
    Build the engine for ``url``.

    In-memory SQLite shares one connection across threads; other databases
    get a pool sized from settings.
    """
    settings = settings or get_settings()
    if url.startswith("sqlite"):
        kwargs: dict = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, echo=settings.debug, **kwargs)
        enable_sqlite_foreign_keys(engine)
        return engine

    return create_engine(
        url,
        echo=settings.debug,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
    )


class DatabaseManager:
    """Owns the process-wide engine and session factory."""

    def __init__(self):
        self.engine: Optional[Engine] = None
        self.SessionLocal: Optional[sessionmaker[Session]] = None

    def initialize(self, database_url: str | None = None) -> None:
        """Create the engine once; later calls are no-ops."""
        if self.engine is not None:
            return
        url = database_url or get_settings().database_url
        self.engine = create_db_engine(url)
        self.SessionLocal = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)
        logger.info("database_engine_created", dialect=self.engine.dialect.name)

    @property
    def is_initialized(self) -> bool:
        return self.engine is not None

    def _require_engine(self) -> Engine:
        if self.engine is None:
            raise RuntimeError("DatabaseManager not initialized. Call initialize() first.")
        return self.engine

    def create_all_tables(self) -> None:
        Base.metadata.create_all(bind=self._require_engine())

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Session that commits on success and rolls back on any error."""
        self._require_engine()
        assert self.SessionLocal is not None
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def ping(self) -> bool:
        """True when the database answers a trivial query."""
        if self.engine is None:
            return False
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning("database_ping_failed", error=str(e))
            return False


db = DatabaseManager()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding one session per request."""
    with db.session() as session:
        yield session


__all__ = ["Base", "DatabaseManager", "create_db_engine", "db", "enable_sqlite_foreign_keys", "get_db"]
