"""SQLAlchemy shipment and activity log models."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _now() -> datetime:
    return datetime.now(tz=UTC)


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""


class ShipmentModel(Base):
    """Tracked shipment stored as an opaque JSON blob.

    ``status``, ``origin`` and ``destination`` are denormalized copies
    kept for ad hoc queries; ``shipment_data`` is authoritative.
    """

    __tablename__ = "dhltrack_shipments"

    tracking_number: Mapped[str] = mapped_column(String(64), primary_key=True)
    status: Mapped[str] = mapped_column(String(255), default="Unknown")
    origin: Mapped[str] = mapped_column(String(255), default="Unknown")
    destination: Mapped[str] = mapped_column(String(255), default="Unknown")
    shipment_data: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_now, onupdate=_now
    )


class ActivityLogModel(Base):
    """Activity log entry."""

    __tablename__ = "dhltrack_activity_logs"

    log_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), index=True
    )
    action: Mapped[str] = mapped_column(String(32))
    description: Mapped[str] = mapped_column(Text)
    related_shipment_id: Mapped[str | None] = mapped_column(
        String(64), nullable=True
    )
