"""Remote tracking clients."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from json import JSONDecodeError
from typing import Any

import httpx

from fastapi_dhltrack.config import DHL_TRACKING_URL
from fastapi_dhltrack.exceptions import (
    GatewayTimeoutError,
    GenericTrackingError,
    InvalidResponseError,
    NetworkFailureError,
    RateLimitedError,
    TrackingNotFoundError,
    UnauthorizedError,
)
from fastapi_dhltrack.schemas import ShipmentSnapshot
from fastapi_dhltrack.validation import Invalid, parse_snapshot

logger = logging.getLogger(__name__)


class DHLTrackingClient:
    """Client for the DHL unified shipment tracking API.

    Identifies itself with the ``DHL-API-Key`` header only; the API
    gateway rejects requests that also carry basic auth.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DHL_TRACKING_URL,
        timeout: float = 15.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    async def fetch(self, tracking_id: str) -> ShipmentSnapshot:
        if not tracking_id:
            raise ValueError("Tracking number is required")

        try:
            response = await self._http.get(
                self.base_url,
                params={"trackingNumber": tracking_id},
                headers={
                    "Accept": "application/json",
                    "DHL-API-Key": self.api_key,
                },
            )
        except httpx.TimeoutException as exc:
            logger.warning("DHL request for %s timed out: %s", tracking_id, exc)
            raise GatewayTimeoutError(
                "Request timed out. The DHL API is taking too long to respond."
            ) from exc
        except httpx.TransportError as exc:
            logger.warning("DHL request for %s failed: %s", tracking_id, exc)
            raise NetworkFailureError() from exc

        _raise_for_status(response)

        try:
            data = response.json()
        except JSONDecodeError as exc:
            raise InvalidResponseError() from exc

        shipments = data.get("shipments") if isinstance(data, dict) else None
        if not shipments:
            raise TrackingNotFoundError("No shipment data found in response.")

        parsed = parse_snapshot(shipments[0])
        if isinstance(parsed, Invalid):
            logger.warning(
                "DHL returned malformed shipment for %s: %s",
                tracking_id,
                parsed.reason,
            )
            raise InvalidResponseError()
        return parsed.value

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()


def _raise_for_status(response: httpx.Response) -> None:
    if response.is_success:
        return
    code = response.status_code
    if code == 404:
        raise TrackingNotFoundError()
    if code in (401, 403):
        raise UnauthorizedError()
    if code == 504:
        raise GatewayTimeoutError()
    if code == 429:
        raise RateLimitedError()
    raise GenericTrackingError(code, response.reason_phrase)


class MockTrackingClient:
    """Demo client returning a fixed Berlin to Jakarta shipment."""

    async def fetch(self, tracking_id: str) -> ShipmentSnapshot:
        return ShipmentSnapshot.model_validate(demo_payload(tracking_id))


def demo_payload(tracking_id: str) -> dict[str, Any]:
    """Raw API-shaped payload used by ``MockTrackingClient``."""
    return {
        "id": tracking_id,
        "service": "EXPRESS WORLDWIDE",
        "origin": {
            "address": {
                "countryCode": "DE",
                "postalCode": "12345",
                "addressLocality": "Berlin",
            }
        },
        "destination": {
            "address": {
                "countryCode": "ID",
                "postalCode": "10110",
                "addressLocality": "Jakarta",
            }
        },
        "status": {
            "timestamp": datetime.now(tz=UTC).isoformat(),
            "location": {"address": {"addressLocality": "Jakarta Gateway"}},
            "statusCode": "pre-transit",
            "status": "TRANSIT",
            "description": "Shipment has departed from a DHL facility",
        },
        "details": {
            "product": {"productName": "DHL EXPRESS WORLDWIDE"},
            "weight": {"value": 2.5, "unitText": "KG"},
        },
        "events": [
            {
                "date": "2023-10-27",
                "time": "10:30:00",
                "typeCode": "OK",
                "description": "Delivered - Signed for by: BUDI",
                "serviceArea": [
                    {"code": "JKT", "description": "Jakarta - Indonesia"}
                ],
                "signedBy": "BUDI",
            },
            {
                "date": "2023-10-27",
                "time": "08:15:00",
                "typeCode": "WC",
                "description": "With delivery courier",
                "serviceArea": [
                    {"code": "JKT", "description": "Jakarta - Indonesia"}
                ],
            },
            {
                "date": "2023-10-26",
                "time": "15:45:00",
                "typeCode": "PL",
                "description": "Processed at Jakarta - Indonesia",
                "serviceArea": [
                    {"code": "JKT", "description": "Jakarta - Indonesia"}
                ],
            },
            {
                "date": "2023-10-25",
                "time": "09:00:00",
                "typeCode": "DF",
                "description": "Departed Facility in Leipzig - Germany",
                "serviceArea": [
                    {"code": "LEJ", "description": "Leipzig - Germany"}
                ],
            },
        ],
    }
