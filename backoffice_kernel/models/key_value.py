"""
Key-value entry model.

A single table of string keys mapped to serialized documents.  Backs the
SQL implementation of the draft store; each key holds one JSON payload
and is overwritten wholesale on save (last write wins).
"""

from datetime import datetime

from sqlalchemy import String, func
from sqlalchemy.orm import Mapped, mapped_column

from backoffice_kernel.db.base import Base


class KeyValueEntry(Base):
    """One stored document under a unique key."""

    __tablename__ = "kv_entries"

    key: Mapped[str] = mapped_column(String(200), primary_key=True)
    value: Mapped[str] = mapped_column(nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<KeyValueEntry {self.key}>"
