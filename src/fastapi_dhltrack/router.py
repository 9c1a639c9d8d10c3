"""Router factory for fastapi-dhltrack."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI

from fastapi_dhltrack.config import TrackerConfig
from fastapi_dhltrack.protocols import (
    ActivityLogStore,
    ShipmentStore,
    TrackingClient,
)
from fastapi_dhltrack.routes.activity import router as activity_router
from fastapi_dhltrack.routes.shipments import router as shipments_router
from fastapi_dhltrack.throttle import RequestThrottle
from fastapi_dhltrack.tracker import ShipmentTracker

logger = logging.getLogger(__name__)


def create_tracking_router(
    *,
    config: TrackerConfig,
    client: TrackingClient,
    shipment_store: ShipmentStore,
    log_store: ActivityLogStore,
    throttle: RequestThrottle | None = None,
) -> APIRouter:
    """Create a configured API router.

    The lifespan builds one ``ShipmentTracker`` for the app, seeds it
    from storage and waits for pending writes on shutdown. Exception
    handlers are registered separately with ``register_exception_handlers``.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        tracker = ShipmentTracker(
            client=client,
            shipment_store=shipment_store,
            log_store=log_store,
            config=config,
            throttle=throttle,
        )
        await tracker.load()
        app.state.dhltrack_config = config
        app.state.dhltrack_tracker = tracker
        yield
        logger.info("Flushing %d pending writes", tracker.writer.pending)
        await tracker.drain()

    router = APIRouter(lifespan=lifespan)
    router.include_router(shipments_router)
    router.include_router(activity_router)
    return router
