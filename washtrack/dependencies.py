"""FastAPI dependency injection providers."""

from typing import Annotated, Optional
from uuid import UUID

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from washtrack.database import get_db
from washtrack.exceptions import ValidationError
from washtrack.factories.service_factories import get_report_service, get_template_service
from washtrack.reporting.session import ReportSessionRegistry, report_sessions
from washtrack.repositories.report_template_repository import ReportTemplateRepository
from washtrack.services.report_service import ReportService
from washtrack.services.template_service import TemplateService
from washtrack.utils.logger import get_logger

log = get_logger(__name__)


# Type aliases for cleaner router signatures
DbSession = Annotated[AsyncSession, Depends(get_db)]


# Service dependencies
def get_report_service_dep(db: DbSession) -> ReportService:
    """Get ReportService with database session."""
    return get_report_service(db)


def get_template_service_dep(db: DbSession) -> TemplateService:
    """Get TemplateService with database session."""
    return get_template_service(db)


ReportServiceDep = Annotated[ReportService, Depends(get_report_service_dep)]
TemplateServiceDep = Annotated[TemplateService, Depends(get_template_service_dep)]


# Repository dependencies (request-scoped)
def get_template_repository(db: DbSession) -> ReportTemplateRepository:
    """Get ReportTemplateRepository with database session."""
    return ReportTemplateRepository(db)


TemplateRepoDep = Annotated[ReportTemplateRepository, Depends(get_template_repository)]


# ============================================================================
# Preview Sessions
# ============================================================================


def get_report_sessions() -> ReportSessionRegistry:
    """Get the process-wide preview session registry."""
    return report_sessions


ReportSessionsDep = Annotated[ReportSessionRegistry, Depends(get_report_sessions)]


# ============================================================================
# Acting User
# ============================================================================


async def get_current_user_id(
    x_user_id: Annotated[Optional[str], Header(alias="X-User-Id")] = None,
) -> Optional[UUID]:
    """Acting user's id, supplied by the authenticating gateway."""
    if not x_user_id:
        return None
    try:
        return UUID(x_user_id)
    except ValueError:
        log.warning("invalid user id header", value=x_user_id)
        raise ValidationError("X-User-Id", "Invalid user id header") from None


CurrentUserId = Annotated[Optional[UUID], Depends(get_current_user_id)]
