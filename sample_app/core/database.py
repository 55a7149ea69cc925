"""
Database configuration and session management.

This module provides database configuration, session management, and transaction
handling with automatic rollback and retry on deadlocks.
"""

import contextlib
import logging
import time
from functools import wraps
from typing import Generator, Any, Callable, TypeVar

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base, Session
from sqlalchemy.exc import OperationalError

from .config import settings

# Type variable for generic function return type
T = TypeVar('T')

logger = logging.getLogger(__name__)

# Default retry settings
MAX_RETRIES = 3
RETRY_BACKOFF = 0.1  # seconds


def get_database_url() -> str:
    """Build the SQLAlchemy URL for the configured DB_TYPE."""
    if settings.DB_TYPE == "mysql":
        return (
            f"mysql://{settings.MYSQL_USER}:{settings.MYSQL_PASSWORD}@"
            f"{settings.MYSQL_HOST}:{settings.MYSQL_PORT}/{settings.MYSQL_DB}"
        )
    return f"sqlite:///{settings.SQLITE_DB}"


def create_app_engine(url: str) -> Engine:
    """
    Create an engine with settings suited to the backend.

    Args:
        url: SQLAlchemy database URL

    Returns:
        Engine: Configured engine
    """
    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},  # Required for SQLite
            echo=False
        )
    return create_engine(
        url,
        pool_pre_ping=True,  # Enable automatic reconnection
        pool_size=10,  # Set connection pool size
        max_overflow=20,  # Allow up to 20 connections to overflow from the pool
        pool_timeout=30,  # Connection timeout in seconds
        pool_recycle=1800,  # Recycle connections after 30 minutes
        echo=False,  # Set to True for SQL query logging
        isolation_level="REPEATABLE READ"  # Default isolation level
    )


SQLALCHEMY_DATABASE_URL = get_database_url()

engine = create_app_engine(SQLALCHEMY_DATABASE_URL)

# Create SessionLocal class with transaction settings
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False  # Prevent expired object access after commit
)

# Create Base class for declarative models
Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """
    Get database session with automatic cleanup.

    Yields:
        Session: Database session

    Note:
        This function should be used as a FastAPI dependency.
        The session is automatically closed after the request is completed.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# PUBLIC_INTERFACE
@contextlib.contextmanager
def transaction_context(db: Session):
    """
    Context manager for handling database transactions.

    Everything done inside the block is committed together, or rolled back
    together if the block raises.

    Args:
        db: Database session
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


def with_transaction_retry(func: Callable[..., T]) -> Callable[..., T]:
    """
    Decorator for retrying database operations on deadlock or lock timeout.

    Args:
        func: Function to wrap with retry logic

    Returns:
        Wrapped function with retry logic
    """
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> T:
        retries = 0
        while True:
            try:
                return func(*args, **kwargs)
            except OperationalError as e:
                if retries >= MAX_RETRIES or "deadlock" not in str(e).lower():
                    raise
                retries += 1
                logger.warning(f"Deadlock detected, retry {retries}/{MAX_RETRIES}")
                time.sleep(RETRY_BACKOFF * retries)
    return wrapper


@event.listens_for(Engine, "connect")
def receive_connect(dbapi_connection: Any, connection_record: Any) -> None:
    """Enforce foreign keys on SQLite connections so ON DELETE CASCADE applies."""
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


@event.listens_for(Session, 'after_begin')
def receive_after_begin(session: Session, transaction: Any, connection: Any) -> None:
    """
    Event listener that executes after a transaction begins.
    Sets the transaction isolation level to REPEATABLE READ on MySQL.

    Args:
        session (Session): The database session
        transaction (Any): The transaction object
        connection (Any): The database connection
    """
    if connection.dialect.name == "mysql" and not session.info.get("isolation_level_set"):
        connection.execute(text("SET TRANSACTION ISOLATION LEVEL REPEATABLE READ"))
        session.info["isolation_level_set"] = True


@event.listens_for(Session, 'after_rollback')
def receive_after_rollback(session: Session) -> None:
    """
    Event listener that executes after a transaction rollback.
    Ensures all objects in the session are expired after rollback.

    Args:
        session (Session): The database session
    """
    session.expire_all()
