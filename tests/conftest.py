"""Shared fixtures for fastapi-dhltrack tests."""

from __future__ import annotations

from typing import Any

import pytest

from fastapi_dhltrack.client import demo_payload
from fastapi_dhltrack.config import TrackerConfig
from fastapi_dhltrack.exceptions import TrackingNotFoundError
from fastapi_dhltrack.protocols import ShipmentRow
from fastapi_dhltrack.schemas import LogEntry, ShipmentSnapshot, TrackedShipment
from fastapi_dhltrack.throttle import RequestThrottle
from fastapi_dhltrack.tracker import ShipmentTracker
from fastapi_dhltrack.validation import serialize_shipment


def make_snapshot(
    tracking_id: str,
    status_code: str = "transit",
    description: str = "Shipment is in transit",
    **overrides: Any,
) -> ShipmentSnapshot:
    payload = demo_payload(tracking_id)
    payload["status"]["statusCode"] = status_code
    payload["status"]["description"] = description
    payload.update(overrides)
    return ShipmentSnapshot.model_validate(payload)


class FakeTrackingClient:
    """Returns canned snapshots or raises canned errors per tracking id."""

    def __init__(self) -> None:
        self.responses: dict[str, ShipmentSnapshot | Exception] = {}
        self.calls: list[str] = []

    def respond(self, tracking_id: str, **kwargs: Any) -> ShipmentSnapshot:
        snapshot = make_snapshot(tracking_id, **kwargs)
        self.responses[tracking_id] = snapshot
        return snapshot

    def fail(self, tracking_id: str, error: Exception) -> None:
        self.responses[tracking_id] = error

    async def fetch(self, tracking_id: str) -> ShipmentSnapshot:
        self.calls.append(tracking_id)
        response = self.responses.get(tracking_id)
        if response is None:
            raise TrackingNotFoundError()
        if isinstance(response, Exception):
            raise response
        return response


class FakeClock:
    """Monotonic clock whose sleeps advance time instantly."""

    def __init__(self) -> None:
        self.now = 100.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class InMemoryShipmentStore:
    def __init__(self) -> None:
        self.rows: dict[str, ShipmentRow] = {}
        self.deleted: list[str] = []

    async def list_all(self, limit: int = 100) -> list[ShipmentRow]:
        return list(reversed(self.rows.values()))[:limit]

    async def upsert(self, shipment: TrackedShipment) -> None:
        self.rows[shipment.id] = ShipmentRow(
            tracking_number=shipment.id,
            shipment_data=serialize_shipment(shipment),
            status=shipment.snapshot.status.description,
        )

    async def delete(self, tracking_number: str) -> None:
        self.deleted.append(tracking_number)
        self.rows.pop(tracking_number, None)

    def stored(self, tracking_number: str) -> TrackedShipment:
        row = self.rows[tracking_number]
        return TrackedShipment.model_validate_json(row.shipment_data)


class InMemoryLogStore:
    def __init__(self) -> None:
        self.entries: dict[str, LogEntry] = {}

    async def list_recent(self, limit: int = 100) -> list[LogEntry]:
        ordered = sorted(
            self.entries.values(), key=lambda e: e.timestamp, reverse=True
        )
        return ordered[:limit]

    async def upsert(self, entry: LogEntry) -> None:
        self.entries[entry.id] = entry


@pytest.fixture()
def tracking_client() -> FakeTrackingClient:
    return FakeTrackingClient()


@pytest.fixture()
def shipment_store() -> InMemoryShipmentStore:
    return InMemoryShipmentStore()


@pytest.fixture()
def log_store() -> InMemoryLogStore:
    return InMemoryLogStore()


@pytest.fixture()
def config() -> TrackerConfig:
    return TrackerConfig(request_interval_seconds=0)


@pytest.fixture()
def tracker(
    tracking_client, shipment_store, log_store, config
) -> ShipmentTracker:
    return ShipmentTracker(
        client=tracking_client,
        shipment_store=shipment_store,
        log_store=log_store,
        config=config,
        throttle=RequestThrottle(0),
    )


@pytest.fixture()
async def async_engine():
    """Create an in-memory aiosqlite async engine."""
    from sqlalchemy.ext.asyncio import create_async_engine

    from fastapi_dhltrack.contrib.sqlalchemy.models import Base

    engine = create_async_engine("sqlite+aiosqlite://", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture()
async def async_session_factory(async_engine):
    """Create an async session factory bound to the in-memory engine."""
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    factory = async_sessionmaker(
        async_engine, class_=AsyncSession, expire_on_commit=False
    )
    yield factory
