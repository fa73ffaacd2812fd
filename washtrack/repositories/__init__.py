"""Repository layer for data access."""

from washtrack.repositories.report_data_repository import ReportDataRepository
from washtrack.repositories.report_template_repository import ReportTemplateRepository

__all__ = [
    "ReportDataRepository",
    "ReportTemplateRepository",
]
