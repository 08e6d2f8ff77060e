"""
SQLite key-value table for the durable cache slot.

Uses SQLite with SQLAlchemy; one row per slot name.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional

from sqlalchemy import create_engine, Column, String, Text, DateTime
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


class CacheSlot(Base):
    """A named, serialized payload."""

    __tablename__ = "cache_slots"

    key = Column(String, primary_key=True)  # e.g. cachedJobs
    payload = Column(Text, nullable=False)  # JSON document
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)


def get_engine(db_path: Path) -> Engine:
    """
    Create an engine for a SQLite file, creating its parent directories.

    Args:
        db_path: Path to SQLite database file
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return create_engine(f"sqlite:///{db_path}")


def init_database(db_path: Path, engine: Optional[Engine] = None) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
        engine: Engine to use; a temporary one is created and disposed if omitted
    """
    if engine is not None:
        Base.metadata.create_all(engine)
        return
    engine = get_engine(db_path)
    try:
        Base.metadata.create_all(engine)
    finally:
        engine.dispose()


def get_session_factory(engine: Engine) -> sessionmaker:
    """
    Get a session factory bound to an engine.

    Args:
        engine: Engine created with get_engine

    Returns:
        SQLAlchemy sessionmaker
    """
    return sessionmaker(bind=engine)
