"""
Draft Store (``backoffice_modules.timesheets.drafts``).

Responsibility
--------------
Persists a user's not-yet-submitted timesheet drafts as one versioned JSON
document under a single key of a key-value store:

    {"schema_version": 1, "drafts": [{"id": ..., "date": "2025-03-03", ...}]}

Architecture position
---------------------
**Modules layer** -- the only persistence the core owns.  The key-value
store is an interface; ``InMemoryKeyValueStore`` serves tests and
single-process use, ``SqlKeyValueStore`` is backed by the kernel's
``KeyValueEntry`` table through SQLAlchemy.

Invariants enforced
-------------------
* Documents are always written at ``DRAFT_SCHEMA_VERSION``.
* An unversioned JSON array (the dashboard's earlier local format) is read
  as version 0 and rewritten at the current version.
* Hours round-trip exactly: written as decimal strings, and JSON numbers
  are parsed as ``Decimal``.
* Last write wins; there is no locking or merge.

Failure modes
-------------
* ``UnsupportedDraftSchemaVersionError`` -- document from a newer build.
* ``CorruptDraftPayloadError`` -- not JSON, wrong shape, or invalid drafts.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable
from datetime import date
from decimal import Decimal
from typing import Any, Protocol

from sqlalchemy.orm import Session, sessionmaker

from backoffice_kernel.db.engine import session_scope
from backoffice_kernel.exceptions import (
    BackofficeError,
    CorruptDraftPayloadError,
    UnsupportedDraftSchemaVersionError,
)
from backoffice_kernel.logging_config import get_logger
from backoffice_kernel.models.key_value import KeyValueEntry
from backoffice_modules.timesheets.models import DraftEntry

logger = get_logger("modules.timesheets.drafts")

DRAFT_SCHEMA_VERSION = 1
DRAFTS_KEY_PREFIX = "timesheet_drafts"


# -----------------------------------------------------------------------------
# Key-value stores
# -----------------------------------------------------------------------------


class KeyValueStore(Protocol):
    """String documents under string keys."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class InMemoryKeyValueStore:
    """Process-local store."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class SqlKeyValueStore:
    """Store backed by the ``kv_entries`` table.

    Each call runs in its own transaction.  Pass a session factory to use a
    specific engine; otherwise the kernel's configured engine is used.
    """

    def __init__(self, session_factory: sessionmaker[Session] | None = None):
        self._factory = session_factory

    def get(self, key: str) -> str | None:
        with session_scope(self._factory) as session:
            row = session.get(KeyValueEntry, key)
            return row.value if row is not None else None

    def set(self, key: str, value: str) -> None:
        with session_scope(self._factory) as session:
            row = session.get(KeyValueEntry, key)
            if row is None:
                session.add(KeyValueEntry(key=key, value=value))
            else:
                row.value = value

    def delete(self, key: str) -> None:
        with session_scope(self._factory) as session:
            row = session.get(KeyValueEntry, key)
            if row is not None:
                session.delete(row)


# -----------------------------------------------------------------------------
# Serialization
# -----------------------------------------------------------------------------


def draft_to_dict(draft: DraftEntry) -> dict[str, Any]:
    """Wire shape of one draft; keys follow the dashboard's field names."""
    return {
        "id": draft.id,
        "date": draft.date.isoformat(),
        "hours": format(draft.hours, "f"),
        "clientId": draft.client_id,
        "client": draft.client_name,
        "jobId": draft.job_id,
        "job": draft.job_title,
        "taskId": draft.task_id or "",
        "task": draft.task_name,
        "notes": draft.notes,
        "billable": draft.billable,
    }


def draft_from_dict(data: dict[str, Any]) -> DraftEntry:
    hours = data["hours"]
    if isinstance(hours, str):
        hours = Decimal(hours)
    return DraftEntry(
        id=str(data["id"]),
        date=date.fromisoformat(str(data["date"])[:10]),
        hours=hours,
        job_id=str(data["jobId"]),
        job_title=data.get("job") or "",
        client_id=data.get("clientId") or "",
        client_name=data.get("client") or "",
        task_id=data.get("taskId") or None,
        task_name=data.get("task") or "",
        notes=data.get("notes") or "",
        billable=bool(data.get("billable", True)),
    )


def encode_drafts(drafts: Iterable[DraftEntry]) -> str:
    payload = {
        "schema_version": DRAFT_SCHEMA_VERSION,
        "drafts": [draft_to_dict(d) for d in drafts],
    }
    return json.dumps(payload, sort_keys=True, separators=(",", ":"))


def decode_drafts(key: str, text: str) -> tuple[int, list[DraftEntry]]:
    """
    Parse a stored document into ``(schema_version, drafts)``.

    A bare JSON array is the unversioned format and reports version 0.

    Raises:
        UnsupportedDraftSchemaVersionError: For any version other than 0 or 1.
        CorruptDraftPayloadError: For anything that does not decode.
    """
    try:
        payload = json.loads(text, parse_float=Decimal)
    except json.JSONDecodeError as exc:
        raise CorruptDraftPayloadError(key, f"invalid JSON: {exc.msg}") from exc

    if isinstance(payload, list):
        version, items = 0, payload
    elif isinstance(payload, dict):
        version = payload.get("schema_version")
        if isinstance(version, bool) or version != DRAFT_SCHEMA_VERSION:
            raise UnsupportedDraftSchemaVersionError(key, version, DRAFT_SCHEMA_VERSION)
        items = payload.get("drafts")
        if not isinstance(items, list):
            raise CorruptDraftPayloadError(key, "'drafts' is not a list")
    else:
        raise CorruptDraftPayloadError(key, f"unexpected {type(payload).__name__} document")

    try:
        drafts = [draft_from_dict(item) for item in items]
    except (KeyError, TypeError, ValueError, AttributeError, BackofficeError) as exc:
        raise CorruptDraftPayloadError(key, f"invalid draft: {exc}") from exc
    return version, drafts


# -----------------------------------------------------------------------------
# Draft store
# -----------------------------------------------------------------------------


class DraftStore:
    """
    A user's local drafts, persisted as one document.

    Usage:
        store = DraftStore(InMemoryKeyValueStore(), user_id="u-1")
        store.add(draft)
        drafts = store.load()
    """

    def __init__(
        self,
        store: KeyValueStore,
        user_id: str | None = None,
        key: str | None = None,
    ):
        self._store = store
        self._key = key or (f"{DRAFTS_KEY_PREFIX}:{user_id}" if user_id else DRAFTS_KEY_PREFIX)

    @property
    def key(self) -> str:
        return self._key

    def load(self) -> list[DraftEntry]:
        """Stored drafts in insertion order; empty when nothing is stored."""
        text = self._store.get(self._key)
        if text is None or not text.strip():
            return []
        version, drafts = decode_drafts(self._key, text)
        if version != DRAFT_SCHEMA_VERSION:
            self._store.set(self._key, encode_drafts(drafts))
            logger.info(
                "draft_payload_migrated",
                extra={
                    "key": self._key,
                    "from_version": version,
                    "to_version": DRAFT_SCHEMA_VERSION,
                    "draft_count": len(drafts),
                },
            )
        return drafts

    def save(self, drafts: Iterable[DraftEntry]) -> None:
        items = list(drafts)
        self._store.set(self._key, encode_drafts(items))
        logger.debug("drafts_saved", extra={"key": self._key, "draft_count": len(items)})

    def add(self, draft: DraftEntry) -> list[DraftEntry]:
        drafts = [*self.load(), draft]
        self.save(drafts)
        return drafts

    def remove(self, draft_id: str) -> list[DraftEntry]:
        drafts = [d for d in self.load() if d.id != draft_id]
        self.save(drafts)
        return drafts

    def clear(self) -> None:
        self._store.delete(self._key)
        logger.debug("drafts_cleared", extra={"key": self._key})

    def remove_where(self, predicate: Callable[[DraftEntry], bool]) -> list[DraftEntry]:
        """Drop drafts matching ``predicate``; returns the ones kept."""
        kept = [d for d in self.load() if not predicate(d)]
        self.save(kept)
        return kept
