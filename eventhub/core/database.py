"""Database configuration and session management.

The default backend is a SQLite file, which suits a single-node deployment.
Any SQLAlchemy URL works (PostgreSQL, MySQL); the SQLite-specific settings
below are only applied when the URL points at SQLite.

SQLite Configuration Choices:
    - **WAL (Write-Ahead Logging)**: readers are not blocked while a request
      writes an event update.

    - **Foreign Keys**: disabled by default in SQLite; enabled so the schema
      behaves like the server databases it stands in for.

    - **check_same_thread=False**: FastAPI may hand a session created in one
      thread to a handler running in another.
"""

import logging

from sqlalchemy import event as sa_event
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, SQLModel, create_engine

from eventhub.core.config import settings

logger = logging.getLogger(__name__)

is_sqlite = settings.database_url.startswith("sqlite")
connect_args = {"check_same_thread": False} if is_sqlite else {}

engine = create_engine(
    settings.database_url,
    connect_args=connect_args,
    echo=settings.debug,  # Log SQL statements when DEBUG=true
)


def set_sqlite_pragma(dbapi_connection, connection_record):
    """Configure SQLite pragmas on each new connection.

    These settings are connection-level, not database-level, so they must
    be set each time a new connection is established from the pool.
    """
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


if is_sqlite:
    sa_event.listen(engine, "connect", set_sqlite_pragma)


def create_db_and_tables():
    """Create all database tables."""
    # Import models so their tables are registered on the metadata
    import eventhub.models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def check_connection(session: Session) -> bool:
    """Return True if the database answers a trivial query."""
    try:
        session.exec(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.error(f"Database connectivity check failed: {e}")
        return False


def is_unique_violation(error: IntegrityError, column: str) -> bool:
    """Check whether an integrity error is a duplicate value in ``column``.

    SQLite reports "UNIQUE constraint failed: table.column", PostgreSQL
    "duplicate key value violates unique constraint ... (column)".
    """
    message = str(error.orig).lower()
    return ("unique" in message or "duplicate" in message) and column in message


def get_session():
    """Dependency for getting database session."""
    with Session(engine) as session:
        yield session
