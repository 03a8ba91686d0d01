"""Shared test fixtures for PharmaTrack."""

import sys
import os
from datetime import date

import pytest

# Keep the app's module-level engine off the developer's database file
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

# Add repo root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from sqlalchemy.orm import sessionmaker

from backend.database import init_db, make_engine
from backend.repository import ProjectRepository
from backend.storage import InMemoryKeyValueStore, ProjectStorage, SqlKeyValueStore

FIXED_TODAY = date(2023, 11, 15)


@pytest.fixture
def kv_store():
    """Fresh dict-backed key/value store."""
    return InMemoryKeyValueStore()


@pytest.fixture
def storage(kv_store):
    return ProjectStorage(kv_store)


@pytest.fixture
def repo(storage):
    """Repository over in-memory storage, with a fixed 'today'."""
    return ProjectRepository(storage, today=lambda: FIXED_TODAY)


@pytest.fixture
def seed_projects(repo):
    """The seeded collection, loaded through the repository."""
    return repo.get_all()


@pytest.fixture
def sql_session_factory(tmp_path):
    """Session factory bound to a file-based temp SQLite database with kv_slots created."""
    engine = make_engine(f"sqlite:///{tmp_path / 'test.db'}")
    init_db(bind=engine)
    yield sessionmaker(bind=engine)
    engine.dispose()


@pytest.fixture
def sql_store(sql_session_factory):
    return SqlKeyValueStore(sql_session_factory)


def project_by_id(projects, project_id):
    return next(p for p in projects if p.id == project_id)
