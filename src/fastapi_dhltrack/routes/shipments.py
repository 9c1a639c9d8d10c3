"""Shipment endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from fastapi_dhltrack.dependencies import get_tracker
from fastapi_dhltrack.schemas import (
    AddShipmentsRequest,
    AddShipmentsResponse,
    AssigneeRequest,
    DeleteShipmentResponse,
    RefreshResponse,
    StatsResponse,
    SummaryResponse,
    TrackedShipment,
)
from fastapi_dhltrack.summary import compute_stats, summarize
from fastapi_dhltrack.tracker import ShipmentTracker

router = APIRouter()


@router.get("/health")
async def health() -> dict[str, str]:
    """Healthcheck endpoint."""
    return {"status": "ok"}


@router.get("/shipments", response_model=list[TrackedShipment])
async def list_shipments(
    tracker: ShipmentTracker = Depends(get_tracker),
) -> list[TrackedShipment]:
    """Active collection, newest first."""
    return tracker.shipments


@router.post("/shipments", response_model=AddShipmentsResponse)
async def add_shipments(
    body: AddShipmentsRequest,
    tracker: ShipmentTracker = Depends(get_tracker),
) -> AddShipmentsResponse:
    """Track a batch of AWB numbers."""
    result = await tracker.add_shipments(body.tracking_numbers)
    return AddShipmentsResponse.from_result(result)


@router.post("/shipments/refresh", response_model=RefreshResponse)
async def refresh_shipments(
    tracker: ShipmentTracker = Depends(get_tracker),
) -> RefreshResponse:
    """Re-fetch the status of every tracked shipment."""
    result = await tracker.refresh_all()
    return RefreshResponse.from_result(result)


@router.get("/stats", response_model=StatsResponse)
async def shipment_stats(
    tracker: ShipmentTracker = Depends(get_tracker),
) -> StatsResponse:
    return compute_stats(tracker.shipments)


@router.get("/shipments/{shipment_id}", response_model=TrackedShipment)
async def get_shipment(
    shipment_id: str,
    tracker: ShipmentTracker = Depends(get_tracker),
) -> TrackedShipment:
    return tracker.get(shipment_id)


@router.get("/shipments/{shipment_id}/summary", response_model=SummaryResponse)
async def shipment_summary(
    shipment_id: str,
    tracker: ShipmentTracker = Depends(get_tracker),
) -> SummaryResponse:
    shipment = tracker.get(shipment_id)
    return SummaryResponse(id=shipment.id, summary=summarize(shipment))


@router.delete("/shipments/{shipment_id}", response_model=DeleteShipmentResponse)
async def delete_shipment(
    shipment_id: str,
    tracker: ShipmentTracker = Depends(get_tracker),
) -> DeleteShipmentResponse:
    """Stop tracking a shipment. Callers confirm with the user first."""
    tracker.delete_shipment(shipment_id)
    return DeleteShipmentResponse(id=shipment_id)


@router.post(
    "/shipments/{shipment_id}/assignees", response_model=TrackedShipment
)
async def add_assignee(
    shipment_id: str,
    body: AssigneeRequest,
    tracker: ShipmentTracker = Depends(get_tracker),
) -> TrackedShipment:
    return tracker.add_assignee(shipment_id, body.name)


@router.delete(
    "/shipments/{shipment_id}/assignees/{name}",
    response_model=TrackedShipment,
)
async def remove_assignee(
    shipment_id: str,
    name: str,
    tracker: ShipmentTracker = Depends(get_tracker),
) -> TrackedShipment:
    return tracker.remove_assignee(shipment_id, name)


@router.post(
    "/shipments/{shipment_id}/collected", response_model=TrackedShipment
)
async def toggle_collected(
    shipment_id: str,
    tracker: ShipmentTracker = Depends(get_tracker),
) -> TrackedShipment:
    """Flip the internal collected flag."""
    return tracker.toggle_collected(shipment_id)
