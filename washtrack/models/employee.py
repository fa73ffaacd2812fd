"""Employee model for staff who log work."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, String, TIMESTAMP, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column
from washtrack.database import Base


class Employee(Base):
    """Staff member who performs and logs work entries."""

    __tablename__ = "employees"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # Display name and the company-issued employee number ("Employee ID" in reports)
    name: Mapped[str] = mapped_column(String(255))
    employee_code: Mapped[str | None] = mapped_column(String(50), unique=True, index=True)

    email: Mapped[str | None] = mapped_column(String(255), index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, server_default="true")

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now()
    )

    def __repr__(self):
        return f"<Employee(name='{self.name}', employee_code='{self.employee_code}')>"
