"""Report template model for persisted report configurations."""

import uuid
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Integer,
    String,
    Text,
    TIMESTAMP,
    Uuid,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from washtrack.database import Base


class ReportTemplate(Base):
    """A named, reusable report configuration.

    ``config`` holds the serialized configuration blob owned exclusively by
    this row; ``report_type`` is duplicated out of it for listing and filtering.
    """

    __tablename__ = "report_templates"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    template_name = Column(String(200), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    report_type = Column(String(50), nullable=False, index=True)
    config = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=False)
    created_by = Column(Uuid, nullable=True)
    is_system_template = Column(Boolean, nullable=False, default=False, server_default="false")
    use_count = Column(Integer, nullable=False, default=0, server_default="0")
    last_used_at = Column(TIMESTAMP(timezone=True), nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<ReportTemplate(name='{self.template_name}', type='{self.report_type}')>"
