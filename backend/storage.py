"""
PharmaTrack Storage Adapter

Persists the whole project collection as one serialized value in a single
key/value slot. There is no per-project storage: every save rewrites the
entire collection.

Layers:
    - KeyValueStore: the injected capability (read/write one slot by key).
      SqlKeyValueStore keeps slots in the kv_slots table;
      InMemoryKeyValueStore keeps them in a dict (tests, throwaway runs).
    - ProjectStorage: encodes/decodes the versioned envelope, seeds the
      default collection on first access, and re-seeds when the stored
      value cannot be decoded.

Revisions:
    Each slot carries an integer revision. write() with expected_revision
    only succeeds if the slot is still at that revision (0 = slot absent),
    otherwise it raises ConcurrentModification.
"""

import logging
import os
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from pydantic import ValidationError
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from .errors import ConcurrentModification, StorageError
from .models import KeyValueSlot
from .schemas import CURRENT_SCHEMA_VERSION, Project, StoredCollection
from .seed_data import SEED_PROJECTS

logger = logging.getLogger("pharmatrack.storage")

STORAGE_KEY = os.environ.get("PHARMATRACK_STORAGE_KEY", "pharma_projects_v1")


@dataclass
class Slot:
    """Raw contents of one key/value slot."""
    value: str
    revision: int


# ---------------------------------------------------------------------------
# Key/value stores
# ---------------------------------------------------------------------------

class KeyValueStore(ABC):
    """Abstract single-slot key/value storage."""

    @abstractmethod
    def read(self, key: str) -> Optional[Slot]:
        """Return the slot stored under key, or None if absent."""
        ...

    @abstractmethod
    def write(self, key: str, value: str, expected_revision: Optional[int] = None) -> int:
        """
        Overwrite the slot and return its new revision.

        If expected_revision is given, the slot must currently be at that
        revision (0 meaning absent) or ConcurrentModification is raised.
        """
        ...


class InMemoryKeyValueStore(KeyValueStore):
    """Dict-backed store. State lives only as long as the instance."""

    def __init__(self):
        self._slots: dict[str, Slot] = {}
        self._lock = threading.Lock()

    def read(self, key: str) -> Optional[Slot]:
        with self._lock:
            slot = self._slots.get(key)
            return Slot(slot.value, slot.revision) if slot else None

    def write(self, key: str, value: str, expected_revision: Optional[int] = None) -> int:
        with self._lock:
            current = self._slots[key].revision if key in self._slots else 0
            if expected_revision is not None and current != expected_revision:
                raise ConcurrentModification(
                    f"Slot {key} is at revision {current}, expected {expected_revision}",
                    key=key, current=current, expected=expected_revision,
                )
            self._slots[key] = Slot(value, current + 1)
            return current + 1


class SqlKeyValueStore(KeyValueStore):
    """
    Store backed by the kv_slots table.

    Opens one session per call. Saves to an existing row are an
    UPDATE ... WHERE revision = <current>, so two writers that read the
    same revision cannot both succeed.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def read(self, key: str) -> Optional[Slot]:
        try:
            with self.session_factory() as db:
                row = db.get(KeyValueSlot, key)
                return Slot(row.value, row.revision) if row else None
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to read slot {key}: {e}", key=key) from e

    def write(self, key: str, value: str, expected_revision: Optional[int] = None) -> int:
        try:
            with self.session_factory() as db:
                row = db.get(KeyValueSlot, key)
                current = row.revision if row else 0
                if expected_revision is not None and current != expected_revision:
                    raise ConcurrentModification(
                        f"Slot {key} is at revision {current}, expected {expected_revision}",
                        key=key, current=current, expected=expected_revision,
                    )

                if row is None:
                    db.add(KeyValueSlot(key=key, value=value, revision=1))
                else:
                    result = db.execute(
                        update(KeyValueSlot)
                        .where(KeyValueSlot.key == key, KeyValueSlot.revision == current)
                        .values(value=value, revision=current + 1)
                    )
                    if result.rowcount != 1:
                        raise ConcurrentModification(
                            f"Slot {key} changed during save",
                            key=key, expected=current,
                        )
                db.commit()
                return current + 1
        except IntegrityError as e:
            # Another writer inserted the slot first
            raise ConcurrentModification(
                f"Slot {key} was created concurrently", key=key, expected=0,
            ) from e
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to write slot {key}: {e}", key=key) from e


# ---------------------------------------------------------------------------
# Project collection adapter
# ---------------------------------------------------------------------------

def encode_collection(projects: list[Project]) -> str:
    """Serialize the collection into the versioned envelope."""
    envelope = StoredCollection(schema_version=CURRENT_SCHEMA_VERSION, projects=projects)
    return envelope.model_dump_json()


def decode_collection(value: str) -> list[Project]:
    """
    Parse a stored envelope.

    Raises:
        ValueError: malformed JSON, schema violation, or unknown schema_version
    """
    envelope = StoredCollection.model_validate_json(value)
    if envelope.schema_version != CURRENT_SCHEMA_VERSION:
        raise ValueError(
            f"Unsupported schema_version {envelope.schema_version} "
            f"(expected {CURRENT_SCHEMA_VERSION})"
        )
    return envelope.projects


def seed_collection() -> list[Project]:
    """Fresh Project instances built from the seed data."""
    return [Project.model_validate(p) for p in SEED_PROJECTS]


class ProjectStorage:
    """
    Reads and writes the project collection as one unit.

    load() never raises for bad stored data: an absent, unparsable or
    schema-invalid slot is replaced by the seed collection.
    """

    def __init__(self, store: KeyValueStore, key: str = STORAGE_KEY):
        self.store = store
        self.key = key

    def load(self) -> list[Project]:
        projects, _ = self.load_versioned()
        return projects

    def load_versioned(self) -> tuple[list[Project], int]:
        """Return the collection together with the slot revision it was read at."""
        slot = self.store.read(self.key)
        if slot is None:
            logger.info(f"No stored collection at '{self.key}', writing seed data")
            return self._write_seed(expected_revision=0)

        try:
            return decode_collection(slot.value), slot.revision
        except (ValidationError, ValueError) as e:
            logger.warning(
                f"Stored collection at '{self.key}' (revision {slot.revision}) "
                f"is unreadable, re-seeding: {e}"
            )
            return self._write_seed(expected_revision=slot.revision)

    def save(self, projects: list[Project], expected_revision: Optional[int] = None) -> int:
        """Overwrite the whole collection. Returns the new slot revision."""
        revision = self.store.write(self.key, encode_collection(projects), expected_revision)
        logger.debug(f"Saved {len(projects)} projects to '{self.key}' (revision {revision})")
        return revision

    def _write_seed(self, expected_revision: int) -> tuple[list[Project], int]:
        seed = seed_collection()
        try:
            revision = self.save(seed, expected_revision=expected_revision)
        except ConcurrentModification:
            # Someone else initialized or repaired the slot first; use theirs
            return self.load_versioned()
        return seed, revision
