import os
import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker, declarative_base

from core.config import DATABASE_URL
from core.errors import ConflictError, TransientStoreError

logger = logging.getLogger(__name__)


def build_engine(url: str, **kwargs):
    """Create an engine; SQLite files get their parent directory created."""
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        path = url.split("///", 1)[-1] if "///" in url else ""
        if path and path != ":memory:":
            os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    return create_engine(url, **kwargs)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores FOREIGN KEY clauses unless asked per connection
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# Create engine
engine = build_engine(DATABASE_URL)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for all models
Base = declarative_base()


def init_db(bind=None):
    """Create all tables known to the models package."""
    import models  # noqa: F401  registers the mapped classes on Base

    try:
        Base.metadata.create_all(bind=bind or engine)
    except SQLAlchemyError as exc:
        logger.exception("Could not create tables")
        raise TransientStoreError("The data store is unavailable. Please try again.") from exc


@contextmanager
def get_db_context():
    """
    Context manager for database sessions.
    Automatically closes session when done.

    Usage:
        with get_db_context() as db:
            result = db.query(Model).all()
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def translate_store_errors(db):
    """
    Roll back and re-raise database failures as store errors.

    IntegrityError becomes ConflictError; anything else from SQLAlchemy
    becomes TransientStoreError. Non-database exceptions pass through.
    """
    try:
        yield db
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Store rejected write: %s", exc.orig)
        raise ConflictError("The record conflicts with existing data.") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Store operation failed")
        raise TransientStoreError("The data store is unavailable. Please try again.") from exc
