"""Database configuration and session management."""

import logging
import time
from collections.abc import Callable, Generator
from contextlib import contextmanager
from typing import TypeVar

from sqlalchemy import create_engine, func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from employee_registry.config import settings
from employee_registry.models import Base, Department

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _engine_kwargs(url: str) -> dict:
    # Only use check_same_thread for SQLite
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,
        "pool_timeout": settings.DB_POOL_TIMEOUT,
        "pool_recycle": 1800,
        "connect_args": {"connect_timeout": settings.DB_CONNECT_TIMEOUT},
    }


engine = create_engine(settings.DATABASE_URL, **_engine_kwargs(settings.DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Default departments to seed on first run
DEFAULT_DEPARTMENTS = [
    {"name": "Engineering", "description": "Software development and architecture"},
    {"name": "Human Resources", "description": "People operations and recruiting"},
    {"name": "Finance", "description": "Accounting, budgeting and payroll"},
    {"name": "Marketing", "description": "Brand, campaigns and communications"},
    {"name": "Sales", "description": "Customer acquisition and accounts"},
]


def with_retry(
    operation: Callable[[], T],
    attempts: int | None = None,
    backoff: float | None = None,
) -> T:
    """
    Run ``operation``, retrying on transient connectivity failures.

    Only ``OperationalError`` is retried, with exponential backoff between
    attempts. The last failure is re-raised.
    """
    attempts = attempts or settings.DB_CONNECT_RETRIES
    backoff = settings.DB_RETRY_BACKOFF_SECONDS if backoff is None else backoff
    for attempt in range(1, attempts + 1):
        try:
            return operation()
        except OperationalError:
            if attempt == attempts:
                logger.error("Database unavailable after %d attempts", attempts)
                raise
            delay = backoff * (2 ** (attempt - 1))
            logger.warning(
                "Database connection failed (attempt %d/%d), retrying in %.2fs",
                attempt,
                attempts,
                delay,
            )
            time.sleep(delay)
    raise RuntimeError("unreachable")


def init_db() -> None:
    """Create all database tables."""
    with_retry(lambda: Base.metadata.create_all(bind=engine))


def seed_departments(db: Session | None = None) -> int:
    """Seed default departments if the table is empty. Returns rows added."""
    with session_scope(db) as session:
        count = session.scalar(select(func.count()).select_from(Department))
        if count:
            return 0
        for dept_data in DEFAULT_DEPARTMENTS:
            department = Department(**dept_data)
            department.mark_created(settings.DEFAULT_ACTOR)
            session.add(department)
        logger.info("Seeded %d default departments", len(DEFAULT_DEPARTMENTS))
        return len(DEFAULT_DEPARTMENTS)


@contextmanager
def session_scope(db: Session | None = None) -> Generator[Session, None, None]:
    """
    Transactional scope for work outside a request.

    When an existing session is passed in, it is committed on success but
    left open for the caller.
    """
    session = db or SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        if db is None:
            session.close()


def get_db():
    """Dependency to get a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
