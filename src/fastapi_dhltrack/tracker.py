"""Shipment tracker.

Owns the active shipment collection and the activity log for one
application. Remote snapshots are merged into existing records without
touching the locally owned annotations (assignees, collected flag).
Remote lookups run strictly one at a time through ``RequestThrottle``;
persistence is written behind through ``BackgroundWriter``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from fastapi_dhltrack.activity import ActivityLog
from fastapi_dhltrack.background import BackgroundWriter
from fastapi_dhltrack.config import TrackerConfig
from fastapi_dhltrack.exceptions import (
    AlreadyTrackedError,
    EmptyTrackingInputError,
    ShipmentNotFoundError,
    TrackingError,
)
from fastapi_dhltrack.protocols import (
    ActivityLogStore,
    ShipmentStore,
    TrackingClient,
)
from fastapi_dhltrack.schemas import LogAction, ShipmentSnapshot, TrackedShipment
from fastapi_dhltrack.throttle import RequestThrottle
from fastapi_dhltrack.validation import Invalid, parse_shipment_blob

logger = logging.getLogger(__name__)

_SEPARATORS = re.compile(r"[\s,]+")


@dataclass
class AddResult:
    added: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)


@dataclass
class RefreshResult:
    updated_count: int = 0
    failed: dict[str, str] = field(default_factory=dict)


def parse_tracking_input(raw: str) -> list[str]:
    """Split on whitespace and commas, keeping the first of any repeats."""
    parts = (part.strip() for part in _SEPARATORS.split(raw))
    return list(dict.fromkeys(part for part in parts if part))


def merge_snapshot(
    existing: TrackedShipment, fresh: ShipmentSnapshot
) -> TrackedShipment:
    """Replace the remote snapshot, keep local annotations verbatim."""
    return existing.model_copy(update={"snapshot": fresh})


class ShipmentTracker:
    def __init__(
        self,
        *,
        client: TrackingClient,
        shipment_store: ShipmentStore,
        log_store: ActivityLogStore,
        config: TrackerConfig | None = None,
        throttle: RequestThrottle | None = None,
        writer: BackgroundWriter | None = None,
    ) -> None:
        self.config = config or TrackerConfig()
        self.client = client
        self.shipment_store = shipment_store
        self.throttle = throttle or RequestThrottle(
            self.config.request_interval_seconds
        )
        self.writer = writer or BackgroundWriter()
        self.activity = ActivityLog(log_store, self.writer)
        self._shipments: list[TrackedShipment] = []
        self._delete_listeners: list[Callable[[str], None]] = []

    # -- state ------------------------------------------------------------

    @property
    def shipments(self) -> list[TrackedShipment]:
        return list(self._shipments)

    def get(self, shipment_id: str) -> TrackedShipment:
        return self._shipments[self._require(shipment_id)]

    def on_delete(self, callback: Callable[[str], None]) -> None:
        """Register ``callback(shipment_id)`` to run after a delete."""
        self._delete_listeners.append(callback)

    async def load(self) -> None:
        """Seed the collection and the log from storage."""
        try:
            rows = await self.shipment_store.list_all(
                limit=self.config.shipment_list_limit
            )
        except Exception:
            logger.exception("Failed to load shipments from storage")
            rows = []

        shipments = []
        for row in rows:
            parsed = parse_shipment_blob(row.tracking_number, row.shipment_data)
            if isinstance(parsed, Invalid):
                logger.warning(
                    "Skipping stored shipment %s: %s",
                    row.tracking_number,
                    parsed.reason,
                )
                continue
            shipments.append(parsed.value)
        self._shipments = shipments

        try:
            entries = await self.activity.store.list_recent(
                limit=self.config.log_list_limit
            )
        except Exception:
            logger.exception("Failed to load activity log from storage")
            entries = []
        self.activity.replace_all(entries)
        logger.info(
            "Loaded %d shipments and %d log entries",
            len(shipments),
            len(entries),
        )

    async def drain(self) -> None:
        await self.writer.drain()

    # -- remote reconciliation --------------------------------------------

    async def add_shipments(self, raw: str) -> AddResult:
        """Track every new number in ``raw``, one remote call at a time."""
        requested = parse_tracking_input(raw)
        if not requested:
            raise EmptyTrackingInputError()

        tracked = {shipment.id for shipment in self._shipments}
        pending = [number for number in requested if number not in tracked]
        if not pending:
            raise AlreadyTrackedError(requested)

        result = AddResult(
            skipped=[number for number in requested if number in tracked]
        )
        for number in pending:
            snapshot = await self._fetch(number, result.failed)
            if snapshot is None:
                continue
            if self._position(number) is not None:
                # Inserted by a concurrent batch while we were waiting.
                result.skipped.append(number)
                continue

            shipment = TrackedShipment(id=number, snapshot=snapshot)
            self._shipments.insert(0, shipment)
            self.activity.append(
                LogAction.ADD_SHIPMENT, f"Added new shipment {number}", number
            )
            self._save(shipment)
            result.added.append(number)

        logger.info(
            "Added %d shipments (%d skipped, %d failed)",
            len(result.added),
            len(result.skipped),
            len(result.failed),
        )
        return result

    async def refresh_all(self) -> RefreshResult:
        """Re-fetch every tracked shipment, one remote call at a time."""
        result = RefreshResult()
        shipment_ids = [shipment.id for shipment in self._shipments]
        if not shipment_ids:
            return result

        for shipment_id in shipment_ids:
            snapshot = await self._fetch(shipment_id, result.failed)
            if snapshot is None:
                continue
            index = self._position(shipment_id)
            if index is None:
                logger.info(
                    "Shipment %s was deleted during refresh", shipment_id
                )
                continue

            existing = self._shipments[index]
            if snapshot.status.status_code != existing.status_code:
                self.activity.append(
                    LogAction.UPDATE_STATUS,
                    f"Status changed to {snapshot.status.description}",
                    shipment_id,
                )
            updated = merge_snapshot(existing, snapshot)
            self._shipments[index] = updated
            self._save(updated)
            result.updated_count += 1

        self.activity.append(
            LogAction.BULK_UPDATE,
            f"Refreshed status for {result.updated_count} shipments",
        )
        if result.failed:
            logger.warning(
                "Refresh failed for %d of %d shipments",
                len(result.failed),
                len(shipment_ids),
            )
        return result

    # -- local annotations ------------------------------------------------

    def add_assignee(self, shipment_id: str, name: str) -> TrackedShipment:
        index = self._require(shipment_id)
        shipment = self._shipments[index]
        name = name.strip()
        if not name or name in shipment.assignees:
            return shipment

        updated = shipment.model_copy(
            update={"assignees": (*shipment.assignees, name)}
        )
        self._shipments[index] = updated
        self.activity.append(
            LogAction.ADD_PIC, f"Assigned PIC: {name}", shipment_id
        )
        self._save(updated)
        return updated

    def remove_assignee(self, shipment_id: str, name: str) -> TrackedShipment:
        index = self._require(shipment_id)
        # Logged whether or not the name is assigned.
        self.activity.append(
            LogAction.REMOVE_PIC, f"Removed PIC: {name}", shipment_id
        )
        shipment = self._shipments[index]
        assignees = list(shipment.assignees)
        if name in assignees:
            assignees.remove(name)

        updated = shipment.model_copy(update={"assignees": tuple(assignees)})
        self._shipments[index] = updated
        self._save(updated)
        return updated

    def toggle_collected(self, shipment_id: str) -> TrackedShipment:
        index = self._require(shipment_id)
        shipment = self._shipments[index]
        collected = not shipment.collected

        if collected:
            self.activity.append(
                LogAction.MARK_COLLECTED, "Marked as collected", shipment_id
            )
        else:
            self.activity.append(
                LogAction.MARK_UNCOLLECTED,
                "Reverted collection status",
                shipment_id,
            )
        updated = shipment.model_copy(
            update={
                "collected": collected,
                "collected_at": datetime.now(tz=UTC) if collected else None,
            }
        )
        self._shipments[index] = updated
        self._save(updated)
        return updated

    def delete_shipment(self, shipment_id: str) -> None:
        index = self._require(shipment_id)
        self.activity.append(
            LogAction.DELETE_SHIPMENT,
            f"Deleted shipment {shipment_id}",
            shipment_id,
        )
        del self._shipments[index]
        self.writer.submit(
            self.shipment_store.delete(shipment_id),
            description=f"delete shipment {shipment_id}",
        )
        for callback in self._delete_listeners:
            try:
                callback(shipment_id)
            except Exception:
                logger.exception(
                    "Delete listener failed for shipment %s", shipment_id
                )

    # -- helpers ----------------------------------------------------------

    async def _fetch(
        self, tracking_id: str, failed: dict[str, str]
    ) -> ShipmentSnapshot | None:
        """Fetch through the throttle, recording failures in ``failed``."""
        try:
            async with self.throttle.slot():
                return await self.client.fetch(tracking_id)
        except TrackingError as exc:
            logger.warning(
                "Tracking %s failed (%s): %s", tracking_id, exc.kind, exc
            )
            failed[tracking_id] = str(exc)
        except Exception:
            logger.exception("Unexpected error while tracking %s", tracking_id)
            failed[tracking_id] = "Unexpected error while tracking."
        return None

    def _save(self, shipment: TrackedShipment) -> None:
        self.writer.submit(
            self.shipment_store.upsert(shipment),
            description=f"save shipment {shipment.id}",
        )

    def _position(self, shipment_id: str) -> int | None:
        for index, shipment in enumerate(self._shipments):
            if shipment.id == shipment_id:
                return index
        return None

    def _require(self, shipment_id: str) -> int:
        index = self._position(shipment_id)
        if index is None:
            raise ShipmentNotFoundError(shipment_id)
        return index
