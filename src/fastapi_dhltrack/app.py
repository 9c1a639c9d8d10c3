"""Application factory wiring the tracker to SQLAlchemy and DHL."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from fastapi_dhltrack.client import DHLTrackingClient, MockTrackingClient
from fastapi_dhltrack.config import TrackerConfig
from fastapi_dhltrack.contrib.sqlalchemy.log_store import (
    SQLAlchemyActivityLogStore,
)
from fastapi_dhltrack.contrib.sqlalchemy.models import Base
from fastapi_dhltrack.contrib.sqlalchemy.repository import (
    SQLAlchemyShipmentStore,
)
from fastapi_dhltrack.exceptions import register_exception_handlers
from fastapi_dhltrack.protocols import TrackingClient
from fastapi_dhltrack.router import create_tracking_router

logger = logging.getLogger(__name__)


def create_client(config: TrackerConfig) -> TrackingClient:
    if config.use_mock_client:
        logger.info("Using mock tracking client")
        return MockTrackingClient()
    return DHLTrackingClient(
        config.dhl_api_key,
        base_url=config.dhl_api_url,
        timeout=config.request_timeout_seconds,
    )


def create_app(config: TrackerConfig | None = None) -> FastAPI:
    """Build the dashboard API with SQLAlchemy storage.

    Tables are created on startup; the engine and the HTTP client are
    closed on shutdown.
    """
    config = config or TrackerConfig()
    engine = create_async_engine(config.database_url, echo=False)
    session_factory = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )
    client = create_client(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        yield
        if isinstance(client, DHLTrackingClient):
            await client.aclose()
        await engine.dispose()

    app = FastAPI(title="DHL shipment tracker", lifespan=lifespan)
    register_exception_handlers(app)
    app.include_router(
        create_tracking_router(
            config=config,
            client=client,
            shipment_store=SQLAlchemyShipmentStore(session_factory),
            log_store=SQLAlchemyActivityLogStore(session_factory),
        ),
        prefix="/api",
    )
    return app
