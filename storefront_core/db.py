"""
Database connection management.

The order-submission path writes orders and performs the authoritative stock
decrement through a SQLAlchemy session obtained here. Pricing, stock and
scheduling rules never touch the database.

Environment variables:
    - DATABASE_URL: SQLAlchemy connection URL (see config.DATABASE_URL)
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from .config import DATABASE_URL
from .models import Base

engine = create_engine(
    DATABASE_URL,
    pool_pre_ping=True,
    echo=False,
)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


def get_db() -> Generator[Session, None, None]:
    """Yield a SQLAlchemy Session and close it afterwards."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """Context-manager form of ``get_db`` for scripts and background jobs."""
    yield from get_db()


def init_db() -> None:
    """Create all tables that do not exist yet."""
    Base.metadata.create_all(bind=engine)
