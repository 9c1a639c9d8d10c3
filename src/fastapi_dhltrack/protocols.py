"""Collaborator protocols used by the tracker."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from fastapi_dhltrack.schemas import LogEntry, ShipmentSnapshot, TrackedShipment


@dataclass(frozen=True)
class ShipmentRow:
    """A persisted shipment as read back from storage.

    Only ``shipment_data`` is authoritative; the remaining columns are
    denormalized copies for external queries.
    """

    tracking_number: str
    shipment_data: str | None
    status: str = ""
    origin: str = ""
    destination: str = ""


@runtime_checkable
class TrackingClient(Protocol):
    """Resolves tracking numbers to remote shipment snapshots.

    Implementations raise ``TrackingError`` subclasses on failure.
    """

    async def fetch(self, tracking_id: str) -> ShipmentSnapshot: ...


@runtime_checkable
class ShipmentStore(Protocol):
    """Durable shipment storage keyed by tracking number."""

    async def list_all(self, limit: int = 100) -> list[ShipmentRow]: ...

    async def upsert(self, shipment: TrackedShipment) -> None: ...

    async def delete(self, tracking_number: str) -> None: ...


@runtime_checkable
class ActivityLogStore(Protocol):
    """Durable activity log storage keyed by log id."""

    async def list_recent(self, limit: int = 100) -> list[LogEntry]: ...

    async def upsert(self, entry: LogEntry) -> None: ...
