"""
PharmaTrack ORM Models

The project collection is not normalized into tables. It is stored as one
serialized JSON document in a single key/value slot, read and written as a
unit by the storage adapter (see storage.py).

Tables:
    - kv_slots: key/value slots; one row per storage key, with a revision
      counter used for compare-and-swap saves
"""

from datetime import datetime, timezone

from sqlalchemy import Integer, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class KeyValueSlot(Base):
    """
    A single persisted key/value slot.

    `revision` starts at 1 on first write and is incremented by every save.
    A writer that read revision N may only save if the row is still at N.
    """
    __tablename__ = "kv_slots"

    key: Mapped[str] = mapped_column(Text, primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    revision: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    def __repr__(self) -> str:
        return f"<KeyValueSlot(key={self.key}, revision={self.revision}, bytes={len(self.value)})>"
