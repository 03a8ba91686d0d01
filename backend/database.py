"""
PharmaTrack Database Configuration

Sets up the SQLAlchemy engine, session factory, and declarative base.
Uses SQLite locally with a file-based database (pharmatrack.db).

Architecture:
    - SQLAlchemy 2.0 style with mapped_column and type annotations
    - The database holds a single key/value table (kv_slots); the whole
      project collection is one serialized value in one slot
    - SQLite for local development; change DATABASE_URL only to switch engines
    - Sessions are opened per storage operation by SqlKeyValueStore

Key Design Decisions:
    - check_same_thread=False for SQLite because FastAPI runs sync endpoints
      in a thread pool
    - pool_pre_ping=True to handle stale connections gracefully
    - echo=False in production; set SQLALCHEMY_ECHO=true for SQL debugging
"""

import os
from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

# Database file location: backend/pharmatrack.db
_DB_DIR = Path(__file__).parent
DATABASE_URL = os.environ.get(
    "DATABASE_URL",
    f"sqlite:///{_DB_DIR / 'pharmatrack.db'}"
)


def make_engine(url: str = DATABASE_URL) -> Engine:
    """
    Create a SQLAlchemy engine for the given URL.

    SQLite connections get WAL mode so the Streamlit frontend and the API
    can read while a save is in progress.
    """
    is_sqlite = url.startswith("sqlite")
    new_engine = create_engine(
        url,
        connect_args={"check_same_thread": False} if is_sqlite else {},
        pool_pre_ping=True,
        echo=os.environ.get("SQLALCHEMY_ECHO", "false").lower() == "true",
    )

    if is_sqlite and ":memory:" not in url:
        @event.listens_for(new_engine, "connect")
        def _set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.close()

    return new_engine


engine = make_engine()

# Session factory — each storage operation gets its own session
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    """
    Declarative base class for all SQLAlchemy ORM models.
    """
    pass


def init_db(bind: Engine = engine):
    """
    Create all database tables from ORM model definitions.
    Called during application startup.

    Note: import models before calling this to ensure all tables
    are registered with Base.metadata.
    """
    from . import models  # noqa: F401 — side-effect import to register models
    Base.metadata.create_all(bind=bind)
