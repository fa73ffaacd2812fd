"""Vehicle and vehicle type models."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Numeric, String, TIMESTAMP, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from washtrack.database import Base

if TYPE_CHECKING:
    from washtrack.models.client import Client


class VehicleType(Base):
    """Vehicle category carrying the standard per-wash rate."""

    __tablename__ = "vehicle_types"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    type_name: Mapped[str] = mapped_column(String(100), unique=True)
    rate_per_wash: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now()
    )

    def __repr__(self):
        return f"<VehicleType(type_name='{self.type_name}')>"


class Vehicle(Base):
    """A client vehicle that work entries are logged against."""

    __tablename__ = "vehicles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    vehicle_number: Mapped[str] = mapped_column(String(100), index=True)
    client_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("clients.id", ondelete="SET NULL"), index=True
    )
    vehicle_type_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("vehicle_types.id", ondelete="SET NULL")
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, server_default="true")
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now()
    )

    client: Mapped[Client | None] = relationship("Client")
    vehicle_type: Mapped[VehicleType | None] = relationship("VehicleType")

    def __repr__(self):
        return f"<Vehicle(vehicle_number='{self.vehicle_number}')>"
