"""SQLAlchemy activity log store."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fastapi_dhltrack.contrib.sqlalchemy.models import ActivityLogModel
from fastapi_dhltrack.contrib.sqlalchemy.repository import upsert_statement
from fastapi_dhltrack.schemas import LogAction, LogEntry


class SQLAlchemyActivityLogStore:
    """Persist activity log entries in a SQLAlchemy table."""

    def __init__(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        self.session_factory = session_factory

    async def list_recent(self, limit: int = 100) -> list[LogEntry]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(ActivityLogModel)
                .order_by(ActivityLogModel.timestamp.desc())
                .limit(limit)
            )
            return [
                LogEntry(
                    id=model.log_id,
                    timestamp=_aware(model.timestamp),
                    action=LogAction(model.action),
                    description=model.description,
                    related_shipment_id=model.related_shipment_id,
                )
                for model in result.scalars().all()
            ]

    async def upsert(self, entry: LogEntry) -> None:
        """Insert or overwrite by log id, so redelivery never duplicates."""
        values = {
            "log_id": entry.id,
            "timestamp": entry.timestamp,
            "action": str(entry.action),
            "description": entry.description,
            "related_shipment_id": entry.related_shipment_id,
        }
        async with self.session_factory() as session:
            await session.execute(
                upsert_statement(session, ActivityLogModel, "log_id", values)
            )
            await session.commit()


def _aware(value: datetime) -> datetime:
    # SQLite drops tzinfo on read; stored values are UTC.
    return value if value.tzinfo else value.replace(tzinfo=UTC)

