"""SQLAlchemy shipment store."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fastapi_dhltrack.contrib.sqlalchemy.models import ShipmentModel
from fastapi_dhltrack.protocols import ShipmentRow
from fastapi_dhltrack.schemas import TrackedShipment
from fastapi_dhltrack.validation import serialize_shipment

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def upsert_statement(
    session: AsyncSession,
    model: type,
    key: str,
    values: dict[str, Any],
    **update_only: Any,
):
    """Build an ``INSERT ... ON CONFLICT (key) DO UPDATE`` for the bound dialect.

    Overlapping writes for the same key resolve to whichever runs last.
    """
    dialect = session.bind.dialect.name
    try:
        insert = _DIALECT_INSERTS[dialect]
    except KeyError:
        raise NotImplementedError(
            f"Upsert is not supported for dialect {dialect!r}"
        ) from None
    stmt = insert(model).values(**values)
    updates = {
        name: value for name, value in values.items() if name != key
    }
    return stmt.on_conflict_do_update(
        index_elements=[key], set_={**updates, **update_only}
    )


class SQLAlchemyShipmentStore:
    """Shipment store backed by SQLAlchemy async sessions."""

    def __init__(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        self.session_factory = session_factory

    async def list_all(self, limit: int = 100) -> list[ShipmentRow]:
        """Most recently created shipments first."""
        async with self.session_factory() as session:
            result = await session.execute(
                select(ShipmentModel)
                .order_by(
                    ShipmentModel.created_at.desc(),
                    ShipmentModel.tracking_number,
                )
                .limit(limit)
            )
            return [
                ShipmentRow(
                    tracking_number=model.tracking_number,
                    shipment_data=model.shipment_data,
                    status=model.status,
                    origin=model.origin,
                    destination=model.destination,
                )
                for model in result.scalars().all()
            ]

    async def upsert(self, shipment: TrackedShipment) -> None:
        snapshot = shipment.snapshot
        values = {
            "tracking_number": shipment.id,
            "status": snapshot.status.description or "Unknown",
            "origin": snapshot.origin.address.address_locality or "Unknown",
            "destination": (
                snapshot.destination.address.address_locality or "Unknown"
            ),
            "shipment_data": serialize_shipment(shipment),
        }
        async with self.session_factory() as session:
            # ON CONFLICT DO UPDATE skips Column.onupdate.
            await session.execute(
                upsert_statement(
                    session,
                    ShipmentModel,
                    "tracking_number",
                    values,
                    updated_at=datetime.now(tz=UTC),
                )
            )
            await session.commit()

    async def delete(self, tracking_number: str) -> None:
        async with self.session_factory() as session:
            await session.execute(
                delete(ShipmentModel).where(
                    ShipmentModel.tracking_number == tracking_number
                )
            )
            await session.commit()
