"""Schema validation at the ingestion boundary.

Remote payloads and persisted blobs are parsed into ``Valid`` or
``Invalid`` instead of being coerced.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydantic import ValidationError

from fastapi_dhltrack.schemas import ShipmentSnapshot, TrackedShipment

T = TypeVar("T")


@dataclass(frozen=True)
class Valid(Generic[T]):
    value: T


@dataclass(frozen=True)
class Invalid:
    reason: str


def parse_snapshot(payload: Any) -> Valid[ShipmentSnapshot] | Invalid:
    """Validate one shipment object from a tracking API response."""
    try:
        return Valid(ShipmentSnapshot.model_validate(payload))
    except ValidationError as exc:
        return Invalid(_describe(exc))


def parse_shipment_blob(
    tracking_number: str, blob: str | None
) -> Valid[TrackedShipment] | Invalid:
    """Validate a persisted shipment blob read back from storage."""
    if not blob:
        return Invalid("missing shipment data")
    try:
        shipment = TrackedShipment.model_validate_json(blob)
    except ValidationError as exc:
        return Invalid(_describe(exc))
    if shipment.id != tracking_number:
        return Invalid(
            f"stored id {shipment.id!r} does not match key {tracking_number!r}"
        )
    return Valid(shipment)


def serialize_shipment(shipment: TrackedShipment) -> str:
    return shipment.model_dump_json(by_alias=True)


def _describe(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first["loc"]) or "<root>"
    return f"{location}: {first['msg']} ({exc.error_count()} error(s))"
