"""Tracker exceptions and their HTTP mapping."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class DHLTrackException(Exception):
    """Base exception for the shipment tracker."""


class ShipmentNotFoundError(DHLTrackException):
    """No shipment with the given tracking number is being tracked."""

    def __init__(self, shipment_id: str) -> None:
        self.shipment_id = shipment_id
        super().__init__(f"Shipment {shipment_id} not found")


class EmptyTrackingInputError(DHLTrackException):
    """Submitted input contained no tracking numbers."""

    def __init__(self) -> None:
        super().__init__("No tracking numbers were entered.")


class AlreadyTrackedError(DHLTrackException):
    """Every submitted tracking number is already in the list."""

    def __init__(self, tracking_numbers: list[str]) -> None:
        self.tracking_numbers = tracking_numbers
        super().__init__(
            "All entered tracking numbers are already in your list."
        )


class TrackingError(DHLTrackException):
    """Remote tracking lookup failed.

    Subclasses carry a ``kind`` used when aggregating failures and a
    default user-facing message.
    """

    kind = "generic"
    default_message = "Tracking request failed."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class TrackingNotFoundError(TrackingError):
    kind = "not_found"
    default_message = "Shipment not found. Please check the AWB number."


class UnauthorizedError(TrackingError):
    kind = "unauthorized"
    default_message = "Authentication failed. The API Key may be restricted."


class GatewayTimeoutError(TrackingError):
    kind = "gateway_timeout"
    default_message = (
        "DHL Gateway Timeout. The server did not respond in time."
    )


class RateLimitedError(TrackingError):
    kind = "rate_limited"
    default_message = "Too many requests. Please try again later."


class NetworkFailureError(TrackingError):
    kind = "network_failure"
    default_message = "Network connection to the DHL API failed."


class InvalidResponseError(TrackingError):
    kind = "invalid_response"
    default_message = "DHL returned shipment data in an unexpected shape."


class GenericTrackingError(TrackingError):
    kind = "generic"

    def __init__(self, status_code: int, reason: str = "") -> None:
        self.status_code = status_code
        super().__init__(f"API Error: {status_code} {reason}".rstrip())


def register_exception_handlers(app: FastAPI) -> None:
    """Register tracker exception handlers on a FastAPI app.

    More specific handlers must be registered first so FastAPI
    matches them before the generic DHLTrackException handler.

    Handler order (most specific first):
    1. ShipmentNotFoundError → 404
    2. AlreadyTrackedError → 409
    3. EmptyTrackingInputError → 400
    4. TrackingError → 502
    5. DHLTrackException → 400 (catch-all)
    """

    @app.exception_handler(ShipmentNotFoundError)
    async def _not_found(
        request: Request,
        exc: ShipmentNotFoundError,
    ) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content={
                "detail": str(exc),
                "code": "shipment_not_found",
            },
        )

    @app.exception_handler(AlreadyTrackedError)
    async def _already_tracked(
        request: Request,
        exc: AlreadyTrackedError,
    ) -> JSONResponse:
        return JSONResponse(
            status_code=409,
            content={
                "detail": str(exc),
                "code": "already_tracked",
            },
        )

    @app.exception_handler(EmptyTrackingInputError)
    async def _invalid_input(
        request: Request,
        exc: EmptyTrackingInputError,
    ) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={
                "detail": str(exc),
                "code": "invalid_input",
            },
        )

    @app.exception_handler(TrackingError)
    async def _tracking_error(
        request: Request,
        exc: TrackingError,
    ) -> JSONResponse:
        return JSONResponse(
            status_code=502,
            content={
                "detail": str(exc),
                "code": "tracking_error",
            },
        )

    @app.exception_handler(DHLTrackException)
    async def _tracker_error(
        request: Request,
        exc: DHLTrackException,
    ) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={
                "detail": str(exc),
                "code": "tracker_error",
            },
        )
