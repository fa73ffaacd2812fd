"""API routers."""

from washtrack.routers import health, report_templates, reports

__all__ = ["health", "reports", "report_templates"]
