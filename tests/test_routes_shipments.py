"""Shipment route tests."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient

from conftest import FakeTrackingClient, InMemoryLogStore, InMemoryShipmentStore
from fastapi_dhltrack.config import TrackerConfig
from fastapi_dhltrack.exceptions import (
    RateLimitedError,
    register_exception_handlers,
)
from fastapi_dhltrack.router import create_tracking_router
from fastapi_dhltrack.routes.shipments import router
from fastapi_dhltrack.throttle import RequestThrottle

# ---------------------------------------------------------------------------
# Client helpers
# ---------------------------------------------------------------------------


def _create_client(
    tracking_client: FakeTrackingClient,
    shipment_store: InMemoryShipmentStore | None = None,
) -> TestClient:
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(
        create_tracking_router(
            config=TrackerConfig(request_interval_seconds=0),
            client=tracking_client,
            shipment_store=shipment_store or InMemoryShipmentStore(),
            log_store=InMemoryLogStore(),
            throttle=RequestThrottle(0),
        )
    )
    return TestClient(app)


def _tracked_client(*ids: str) -> tuple[TestClient, FakeTrackingClient]:
    tracking_client = FakeTrackingClient()
    for tracking_id in ids:
        tracking_client.respond(tracking_id)
    return _create_client(tracking_client), tracking_client


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


def test_health_route_exists() -> None:
    paths = {route.path for route in router.routes}
    assert "/health" in paths


def test_health_endpoint() -> None:
    client, _ = _tracked_client()

    with client:
        resp = client.get("/health")

        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}


def test_add_shipments() -> None:
    client, _ = _tracked_client("111", "222")

    with client:
        resp = client.post(
            "/shipments", json={"trackingNumbers": "111, 222, 111"}
        )

        assert resp.status_code == 200
        assert resp.json() == {"added": ["111", "222"], "skipped": [], "failed": {}}

        listed = client.get("/shipments").json()
        assert [s["id"] for s in listed] == ["222", "111"]
        assert listed[0]["assignees"] == []
        assert listed[0]["collected"] is False
        assert listed[0]["collectedAt"] is None
        assert listed[0]["snapshot"]["status"]["statusCode"] == "transit"


def test_add_shipments_reports_failures() -> None:
    client, tracking_client = _tracked_client("111")
    tracking_client.fail("222", RateLimitedError())

    with client:
        resp = client.post("/shipments", json={"tracking_numbers": "111 222"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["added"] == ["111"]
        assert body["failed"] == {
            "222": "Too many requests. Please try again later."
        }


def test_add_already_tracked_returns_409() -> None:
    client, _ = _tracked_client("111")

    with client:
        client.post("/shipments", json={"trackingNumbers": "111"})
        resp = client.post("/shipments", json={"trackingNumbers": "111"})

        assert resp.status_code == 409
        assert resp.json()["code"] == "already_tracked"


def test_add_blank_input_returns_400() -> None:
    client, _ = _tracked_client()

    with client:
        resp = client.post("/shipments", json={"trackingNumbers": " , "})

        assert resp.status_code == 400
        assert resp.json()["code"] == "invalid_input"


def test_refresh() -> None:
    client, tracking_client = _tracked_client("111", "222")

    with client:
        client.post("/shipments", json={"trackingNumbers": "111 222"})
        tracking_client.respond("111", status_code="delivered")
        tracking_client.fail("222", RateLimitedError())

        resp = client.post("/shipments/refresh")

        assert resp.status_code == 200
        body = resp.json()
        assert body["updatedCount"] == 1
        assert list(body["failed"]) == ["222"]


def test_get_shipment_and_summary() -> None:
    client, _ = _tracked_client("111")

    with client:
        client.post("/shipments", json={"trackingNumbers": "111"})

        resp = client.get("/shipments/111")
        assert resp.status_code == 200
        assert resp.json()["id"] == "111"

        resp = client.get("/shipments/111/summary")
        assert resp.status_code == 200
        assert "(AWB: 111)" in resp.json()["summary"]


def test_unknown_shipment_returns_404() -> None:
    client, _ = _tracked_client()

    with client:
        assert client.get("/shipments/nope").status_code == 404
        assert client.delete("/shipments/nope").status_code == 404
        resp = client.post("/shipments/nope/collected")
        assert resp.status_code == 404
        assert resp.json()["code"] == "shipment_not_found"


def test_assignees() -> None:
    client, _ = _tracked_client("111")

    with client:
        client.post("/shipments", json={"trackingNumbers": "111"})

        resp = client.post("/shipments/111/assignees", json={"name": "Alice"})
        assert resp.json()["assignees"] == ["Alice"]

        resp = client.post("/shipments/111/assignees", json={"name": "Bob"})
        assert resp.json()["assignees"] == ["Alice", "Bob"]

        resp = client.delete("/shipments/111/assignees/Alice")
        assert resp.status_code == 200
        assert resp.json()["assignees"] == ["Bob"]


def test_toggle_collected() -> None:
    client, _ = _tracked_client("111")

    with client:
        client.post("/shipments", json={"trackingNumbers": "111"})

        resp = client.post("/shipments/111/collected")
        assert resp.json()["collected"] is True
        assert resp.json()["collectedAt"] is not None

        resp = client.post("/shipments/111/collected")
        assert resp.json()["collected"] is False
        assert resp.json()["collectedAt"] is None


def test_delete_shipment() -> None:
    store = InMemoryShipmentStore()
    tracking_client = FakeTrackingClient()
    tracking_client.respond("111")
    client = _create_client(tracking_client, store)

    with client:
        client.post("/shipments", json={"trackingNumbers": "111"})

        resp = client.delete("/shipments/111")

        assert resp.status_code == 200
        assert resp.json() == {"id": "111", "deleted": True}
        assert client.get("/shipments").json() == []

    assert "111" in store.deleted


def test_stats() -> None:
    client, _ = _tracked_client("111", "222")

    with client:
        client.post("/shipments", json={"trackingNumbers": "111 222"})
        client.post("/shipments/111/collected")

        resp = client.get("/stats")

        assert resp.status_code == 200
        assert resp.json() == {
            "total": 2,
            "transit": 2,
            "delivered": 0,
            "exception": 0,
            "collected": 1,
        }


def test_awbs_named_like_endpoints_are_reachable() -> None:
    client, _ = _tracked_client("stats", "health")

    with client:
        client.post("/shipments", json={"trackingNumbers": "stats health"})

        for tracking_id in ("stats", "health"):
            resp = client.get(f"/shipments/{tracking_id}")

            assert resp.status_code == 200
            assert resp.json()["id"] == tracking_id


def test_state_loaded_from_store_on_startup() -> None:
    store = InMemoryShipmentStore()
    tracking_client = FakeTrackingClient()
    tracking_client.respond("111")
    first = _create_client(tracking_client, store)

    with first:
        first.post("/shipments", json={"trackingNumbers": "111"})
        first.post("/shipments/111/assignees", json={"name": "Alice"})

    second = _create_client(FakeTrackingClient(), store)
    with second:
        listed = second.get("/shipments").json()

        assert [s["id"] for s in listed] == ["111"]
        assert listed[0]["assignees"] == ["Alice"]
