"""Dependency providers for request handlers."""

from __future__ import annotations

from fastapi import Request

from fastapi_dhltrack.config import TrackerConfig
from fastapi_dhltrack.tracker import ShipmentTracker


def get_config(request: Request) -> TrackerConfig:
    """Read config from FastAPI app state."""
    return request.app.state.dhltrack_config


def get_tracker(request: Request) -> ShipmentTracker:
    """Read the shipment tracker from FastAPI app state."""
    return request.app.state.dhltrack_tracker
