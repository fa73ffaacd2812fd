"""Health check router."""

from datetime import datetime, timezone

from fastapi import APIRouter

from washtrack.dependencies import TemplateRepoDep
from washtrack.reporting.columns import registry
from washtrack.schemas.health import ComponentHealth, HealthResponse
from washtrack.utils.logger import get_logger

router = APIRouter()
log = get_logger(__name__)

API_VERSION = "0.1.0"


@router.get("/health", response_model=HealthResponse)
async def health_check(template_repo: TemplateRepoDep) -> HealthResponse:
    """
    Health check for the report service.

    Checks:
    - Database connectivity (template count)
    - Column registry loaded

    Returns:
        HealthResponse with status and component details
    """
    components = {}
    overall_status = "ok"

    try:
        templates_count = await template_repo.count()
        components["database"] = ComponentHealth(
            status="healthy",
            message="Connected",
            details={"templates_count": templates_count},
        )
    except Exception as e:
        log.error("health check failed", component="database", error=str(e))
        components["database"] = ComponentHealth(status="unhealthy", message="Service unavailable")
        overall_status = "degraded"

    components["column_registry"] = ComponentHealth(
        status="healthy",
        message="Loaded",
        details={"columns": len(registry)},
    )

    return HealthResponse(
        status=overall_status,
        version=API_VERSION,
        components=components,
        timestamp=datetime.now(timezone.utc),
    )
