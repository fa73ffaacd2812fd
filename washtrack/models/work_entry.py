"""Work entry model: one unit of logged work against a vehicle."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    Date,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    TIMESTAMP,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from washtrack.database import Base

if TYPE_CHECKING:
    from washtrack.models.client import Location
    from washtrack.models.employee import Employee
    from washtrack.models.vehicle import Vehicle


class WorkEntry(Base):
    """A logged piece of work; the root record of every report row."""

    __tablename__ = "work_entries"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    work_date: Mapped[date] = mapped_column(Date, index=True)

    vehicle_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("vehicles.id", ondelete="RESTRICT"), index=True
    )
    location_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("locations.id", ondelete="SET NULL"), index=True
    )
    employee_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("employees.id", ondelete="SET NULL"), index=True
    )

    quantity: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("1"))
    duration_minutes: Mapped[int | None] = mapped_column(Integer)
    rate_override: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    final_amount: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))

    damage_reported: Mapped[bool] = mapped_column(Boolean, default=False)
    damage_description: Mapped[str | None] = mapped_column(Text)
    customer_po_number: Mapped[str | None] = mapped_column(String(100))
    notes: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now()
    )

    vehicle: Mapped[Vehicle] = relationship("Vehicle")
    location: Mapped[Location | None] = relationship("Location")
    employee: Mapped[Employee | None] = relationship("Employee")

    def __repr__(self):
        return f"<WorkEntry(work_date='{self.work_date}', vehicle_id='{self.vehicle_id}')>"
