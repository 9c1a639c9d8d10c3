"""Activity log endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from fastapi_dhltrack.dependencies import get_tracker
from fastapi_dhltrack.schemas import LogEntry
from fastapi_dhltrack.tracker import ShipmentTracker

router = APIRouter()


@router.get("/activity", response_model=list[LogEntry])
async def list_activity(
    limit: int = Query(100, ge=1, le=1000),
    tracker: ShipmentTracker = Depends(get_tracker),
) -> list[LogEntry]:
    """Most recent log entries, newest first."""
    return tracker.activity.recent(limit)
