"""Error response schemas."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    code: str = Field(..., description="Error code, e.g. VALIDATION_ERROR")
    message: str = Field(..., description="Human-readable message")
    details: Optional[dict[str, Any]] = Field(None, description="Structured context")


class ErrorResponse(BaseModel):
    """Envelope returned for every failed request."""

    error: ErrorDetail
    request_id: Optional[str] = None
    timestamp: datetime
