"""DHL shipment tracker public API."""

from typing import TYPE_CHECKING

__version__ = "0.1.0"

__all__ = [
    "ShipmentNotFoundError",
    "ShipmentTracker",
    "TrackerConfig",
    "TrackingClient",
    "__version__",
    "create_app",
    "create_tracking_router",
    "register_exception_handlers",
]

if TYPE_CHECKING:
    from fastapi_dhltrack.app import create_app
    from fastapi_dhltrack.config import TrackerConfig
    from fastapi_dhltrack.exceptions import (
        ShipmentNotFoundError,
        register_exception_handlers,
    )
    from fastapi_dhltrack.protocols import TrackingClient
    from fastapi_dhltrack.router import create_tracking_router
    from fastapi_dhltrack.tracker import ShipmentTracker


def __getattr__(name: str):
    # Lazy imports to avoid loading all submodules on package import.
    if name == "TrackerConfig":
        from fastapi_dhltrack.config import TrackerConfig

        return TrackerConfig
    if name == "create_tracking_router":
        from fastapi_dhltrack.router import create_tracking_router

        return create_tracking_router
    if name == "create_app":
        from fastapi_dhltrack.app import create_app

        return create_app
    if name == "ShipmentTracker":
        from fastapi_dhltrack.tracker import ShipmentTracker

        return ShipmentTracker
    if name in ("ShipmentNotFoundError", "register_exception_handlers"):
        from fastapi_dhltrack import exceptions

        return getattr(exceptions, name)
    if name == "TrackingClient":
        from fastapi_dhltrack import protocols

        return getattr(protocols, name)
    raise AttributeError(
        f"module 'fastapi_dhltrack' has no attribute {name!r}"
    )
