"""Database connection and session management.

This module owns the process-wide SQLAlchemy engine. The engine is created
lazily on first use, the schema is created once alongside it, and the same
engine is reused for the lifetime of the process.
"""

import functools
import logging
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, TypeVar

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from config import DATA_DIR, DATABASE_ECHO, DATABASE_URL
from core.exceptions import StorageError
from models.base import Base
# Import models to ensure they are registered with Base.metadata
import models  # noqa: F401

logger = logging.getLogger(__name__)

T = TypeVar("T")

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None
_init_lock = threading.Lock()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


def _build_engine(url: str, **kwargs) -> Engine:
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        if url.startswith("sqlite:///") and ":memory:" not in url:
            # Ensure data directory exists
            DATA_DIR.mkdir(parents=True, exist_ok=True)
    engine = create_engine(url, echo=DATABASE_ECHO, **kwargs)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def init_db(engine: Engine) -> None:
    """Create all tables that do not exist yet."""
    Base.metadata.create_all(bind=engine)


def configure_engine(url: str, **kwargs) -> Engine:
    """Replace the process-wide engine.

    Args:
        url: SQLAlchemy database URL.
        **kwargs: Extra arguments forwarded to create_engine.

    Returns:
        The newly created engine.
    """
    global _engine, _session_factory
    with _init_lock:
        engine = _build_engine(url, **kwargs)
        init_db(engine)
        _engine = engine
        _session_factory = sessionmaker(
            autocommit=False, autoflush=False, bind=engine
        )
    logger.info("Database engine configured for dialect: %s", engine.dialect.name)
    return engine


def get_engine() -> Engine:
    """Return the process-wide engine, creating it on first use."""
    if _engine is None:
        with _init_lock:
            if _engine is None:
                _create_default_engine()
    return _engine


def _create_default_engine() -> None:
    global _engine, _session_factory
    engine = _build_engine(DATABASE_URL)
    init_db(engine)
    _engine = engine
    _session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    logger.info("Database engine initialized for dialect: %s", engine.dialect.name)


def SessionLocal() -> Session:
    """Open a new ORM session bound to the process-wide engine."""
    get_engine()
    return _session_factory()


def get_db() -> Iterator[Session]:
    """Dependency for getting a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """Run a sequence of writes atomically.

    Commits when the block exits normally. On any exception the whole unit of
    work is rolled back. IntegrityError is re-raised unchanged so callers can
    translate it into a domain conflict; every other storage failure becomes
    StorageError.

    Args:
        db: SQLAlchemy Session.

    Yields:
        The same session.

    Raises:
        StorageError: If the database fails for a reason other than a
            constraint violation.
    """
    try:
        yield db
        db.commit()
    except IntegrityError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Transaction rolled back: %s", e.__class__.__name__)
        raise StorageError() from e
    except Exception:
        db.rollback()
        raise


def storage_guard(func: Callable[..., T]) -> Callable[..., T]:
    """Translate storage failures raised by a read method into StorageError.

    The wrapped callable must be a manager method exposing the session as
    ``self.db``.
    """

    @functools.wraps(func)
    def wrapper(self, *args, **kwargs):
        try:
            return func(self, *args, **kwargs)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Query failed in %s: %s", func.__name__, e.__class__.__name__)
            raise StorageError() from e

    return wrapper
