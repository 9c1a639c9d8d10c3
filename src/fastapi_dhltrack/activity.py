"""Append-only activity log."""

from __future__ import annotations

import time
import uuid
from collections.abc import Iterable
from datetime import UTC, datetime

from fastapi_dhltrack.background import BackgroundWriter
from fastapi_dhltrack.protocols import ActivityLogStore
from fastapi_dhltrack.schemas import LogAction, LogEntry


def new_log_id() -> str:
    """Time-ordered prefix with a random suffix."""
    return f"{time.time_ns():x}-{uuid.uuid4().hex[:12]}"


class ActivityLog:
    """In-memory activity log, newest entry first.

    Entries are never mutated or removed here; every new entry is
    upserted to ``store`` in the background.
    """

    def __init__(
        self,
        store: ActivityLogStore,
        writer: BackgroundWriter,
        entries: Iterable[LogEntry] = (),
    ) -> None:
        self.store = store
        self.writer = writer
        self._entries: list[LogEntry] = list(entries)

    @property
    def entries(self) -> list[LogEntry]:
        return list(self._entries)

    def recent(self, limit: int) -> list[LogEntry]:
        return self._entries[:limit]

    def replace_all(self, entries: Iterable[LogEntry]) -> None:
        """Seed from storage at startup."""
        self._entries = list(entries)

    def append(
        self,
        action: LogAction,
        description: str,
        related_shipment_id: str | None = None,
    ) -> LogEntry:
        entry = LogEntry(
            id=new_log_id(),
            timestamp=datetime.now(tz=UTC),
            action=action,
            description=description,
            related_shipment_id=related_shipment_id,
        )
        self._entries.insert(0, entry)
        self.writer.submit(
            self.store.upsert(entry),
            description=f"log {entry.id} ({entry.action})",
        )
        return entry
