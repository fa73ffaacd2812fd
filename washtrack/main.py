"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from washtrack.config import get_settings
from washtrack.database import engine, init_db

# Import middleware
from washtrack.middleware import logging_middleware, register_exception_handlers

# Import routers
from washtrack.routers import health, report_templates, reports
from washtrack.utils.logger import configure_logging, get_logger

settings = get_settings()

# Configure logging early
configure_logging(log_level=settings.log_level, debug=settings.debug)
log = get_logger(__name__)

API_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    log.info("starting application", debug=settings.debug, log_level=settings.log_level)
    await init_db()
    log.info("database initialized")

    yield

    log.info("shutting down application")
    await engine.dispose()
    log.info("database connections closed")


app = FastAPI(
    title="WashTrack Reports API",
    description="Report builder over wash work entries: preview, summaries, Excel export and templates",
    version=API_VERSION,
    lifespan=lifespan,
)

# Register exception handlers first
register_exception_handlers(app)

# CORS middleware (must be first in middleware stack)
_cors_origins = settings.get_cors_origins_list()
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins or ["*"],
    allow_credentials=bool(_cors_origins),
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "X-Request-ID", "X-Row-Count"],
)

# Request logging middleware
app.middleware("http")(logging_middleware)

# Register routers
app.include_router(health.router, prefix="/api/v1", tags=["Health"])
app.include_router(reports.router, prefix="/api/v1")
app.include_router(report_templates.router, prefix="/api/v1")


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "WashTrack Reports API",
        "version": API_VERSION,
        "features": [
            "Configurable work-entry reports",
            "Live preview with single-flight sessions",
            "Summary rows (sums, counts, averages)",
            "Excel export",
            "Saved report templates",
        ],
        "endpoints": {
            "health": "/api/v1/health",
            "reports": "/api/v1/reports",
            "report_templates": "/api/v1/report-templates",
        },
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "washtrack.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
