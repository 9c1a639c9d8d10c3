"""Dashboard statistics and templated shipment summaries."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime, timedelta

from fastapi_dhltrack.schemas import StatsResponse, TrackedShipment

TRANSIT_CODES = frozenset({"transit", "pre-transit", "pre_transit"})
DELIVERED_CODES = frozenset({"delivered"})
EXCEPTION_CODES = frozenset({"failure", "unknown", "exception"})

STALE_AFTER = timedelta(hours=48)


def compute_stats(shipments: Iterable[TrackedShipment]) -> StatsResponse:
    shipments = list(shipments)
    return StatsResponse(
        total=len(shipments),
        transit=sum(s.status_code in TRANSIT_CODES for s in shipments),
        delivered=sum(s.status_code in DELIVERED_CODES for s in shipments),
        exception=sum(s.status_code in EXCEPTION_CODES for s in shipments),
        collected=sum(s.collected for s in shipments),
    )


def summarize(shipment: TrackedShipment, now: datetime | None = None) -> str:
    """Describe a shipment in a few sentences.

    Emphasis is marked with ``**`` for the presentation layer.
    """
    snapshot = shipment.snapshot
    status = snapshot.status
    latest = snapshot.events[0] if snapshot.events else None

    parts = [
        f"This shipment (AWB: {shipment.id}) is traveling from "
        f"**{snapshot.origin.address.address_locality or 'unknown origin'}** "
        f"to **{snapshot.destination.address.address_locality or 'unknown destination'}**."
    ]

    if status.status_code in DELIVERED_CODES:
        if latest is not None:
            parts.append(
                f"It has been **successfully delivered** on {latest.date} "
                f"at {latest.time}."
            )
            if latest.signed_by:
                parts.append(
                    f"The package was signed for by **{latest.signed_by}**."
                )
        else:
            parts.append("It has been **successfully delivered**.")
    elif status.status_code in EXCEPTION_CODES:
        parts.append(
            "**Attention Required**: The shipment is currently facing an "
            "exception or delay."
        )
        location = status.location.address.address_locality or "unknown location"
        parts.append(f'The latest status is "{status.description}" at {location}.')
        parts.append("Please check with the carrier for resolution steps.")
    else:
        parts.append("It is currently **in transit**.")
        if latest is not None:
            area = (
                latest.service_area[0].description
                if latest.service_area
                else "unknown location"
            )
            parts.append(
                f"The latest update was at **{latest.time}** on {latest.date}: "
                f'"{latest.description}" in {area}.'
            )
        if _is_stale(status.timestamp, now or datetime.now(tz=UTC)):
            parts.append("Note: There have been no updates for over 48 hours.")
        else:
            parts.append("The shipment is moving normally.")

    return " ".join(parts)


def _is_stale(timestamp: datetime | None, now: datetime) -> bool:
    if timestamp is None:
        return False
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=UTC)
    return abs(now - timestamp) > STALE_AFTER
