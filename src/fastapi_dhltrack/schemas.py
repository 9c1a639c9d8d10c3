"""Pydantic models for tracked shipments, log entries and API bodies."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

if TYPE_CHECKING:
    from fastapi_dhltrack.tracker import AddResult, RefreshResult


class _Model(BaseModel):
    """camelCase on the wire, snake_case in Python, immutable."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


# ---------------------------------------------------------------------------
# Remote snapshot (fields consumed from the DHL tracking API)
# ---------------------------------------------------------------------------


class Address(_Model):
    country_code: str = ""
    postal_code: str = ""
    address_locality: str = ""


class Place(_Model):
    address: Address = Field(default_factory=Address)


class ShipmentStatus(_Model):
    status_code: str
    description: str
    status: str = ""
    timestamp: datetime | None = None
    location: Place = Field(default_factory=Place)


class ServiceArea(_Model):
    code: str = ""
    description: str = ""


class TrackingEvent(_Model):
    date: str = ""
    time: str = ""
    type_code: str = ""
    description: str = ""
    service_area: tuple[ServiceArea, ...] = ()
    signed_by: str | None = None
    timestamp: str | None = None


class Product(_Model):
    product_name: str | None = None


class Weight(_Model):
    value: float
    unit_text: str = ""


class ShipmentDetails(_Model):
    product: Product | None = None
    weight: Weight | None = None


class ShipmentSnapshot(_Model):
    """Latest data returned by the tracking provider for one shipment.

    ``events`` are ordered newest first.
    """

    id: str
    status: ShipmentStatus
    service: str = ""
    origin: Place = Field(default_factory=Place)
    destination: Place = Field(default_factory=Place)
    events: tuple[TrackingEvent, ...] = ()
    details: ShipmentDetails | None = None


# ---------------------------------------------------------------------------
# Locally owned state
# ---------------------------------------------------------------------------


class TrackedShipment(_Model):
    """A shipment in the active collection.

    ``snapshot`` is owned by the tracking provider and replaced on every
    successful refresh. ``assignees``, ``collected`` and ``collected_at``
    are owned by local operators and never touched by a refresh.
    """

    id: str
    snapshot: ShipmentSnapshot
    assignees: tuple[str, ...] = ()
    collected: bool = False
    collected_at: datetime | None = None

    @model_validator(mode="after")
    def _check_annotations(self) -> TrackedShipment:
        if len(set(self.assignees)) != len(self.assignees):
            raise ValueError("assignees must not contain duplicates")
        if self.collected != (self.collected_at is not None):
            raise ValueError("collected_at must be set exactly when collected")
        return self

    @property
    def status_code(self) -> str:
        return self.snapshot.status.status_code


class LogAction(StrEnum):
    ADD_SHIPMENT = "ADD_SHIPMENT"
    DELETE_SHIPMENT = "DELETE_SHIPMENT"
    UPDATE_STATUS = "UPDATE_STATUS"
    ADD_PIC = "ADD_PIC"
    REMOVE_PIC = "REMOVE_PIC"
    MARK_COLLECTED = "MARK_COLLECTED"
    MARK_UNCOLLECTED = "MARK_UNCOLLECTED"
    BULK_UPDATE = "BULK_UPDATE"


class LogEntry(_Model):
    id: str
    timestamp: datetime
    action: LogAction
    description: str
    related_shipment_id: str | None = None


# ---------------------------------------------------------------------------
# API bodies
# ---------------------------------------------------------------------------


class AddShipmentsRequest(_Model):
    """Comma or whitespace separated tracking numbers."""

    tracking_numbers: str


class AssigneeRequest(_Model):
    name: str


class AddShipmentsResponse(_Model):
    added: list[str]
    skipped: list[str]
    failed: dict[str, str]

    @classmethod
    def from_result(cls, result: AddResult) -> AddShipmentsResponse:
        return cls(
            added=list(result.added),
            skipped=list(result.skipped),
            failed=dict(result.failed),
        )


class RefreshResponse(_Model):
    updated_count: int
    failed: dict[str, str]

    @classmethod
    def from_result(cls, result: RefreshResult) -> RefreshResponse:
        return cls(
            updated_count=result.updated_count,
            failed=dict(result.failed),
        )


class StatsResponse(_Model):
    total: int
    transit: int
    delivered: int
    exception: int
    collected: int


class SummaryResponse(_Model):
    id: str
    summary: str


class DeleteShipmentResponse(_Model):
    id: str
    deleted: bool = True
