"""Health check schemas."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


class ComponentHealth(BaseModel):
    """Status of one dependency of the report service."""

    status: Literal["healthy", "unhealthy"]
    message: str
    details: dict[str, Any] = Field(default_factory=dict)


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["ok", "degraded"]
    version: str
    components: dict[str, ComponentHealth]
    timestamp: datetime
