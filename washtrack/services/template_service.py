"""Service for saving, loading and running report templates."""

from dataclasses import dataclass
from datetime import date
from typing import Any, Optional
from uuid import UUID

from washtrack.exceptions import ConflictError, ForbiddenError, ResourceNotFoundError, ValidationError
from washtrack.models.report_template import ReportTemplate
from washtrack.reporting.configuration import ReportConfiguration, validate_configuration
from washtrack.reporting.filters import FilterOperator, set_filter
from washtrack.reporting.templates import DriftPolicy, TemplateCodec
from washtrack.repositories.report_template_repository import ReportTemplateRepository
from washtrack.services.report_service import ExportFile, ReportService
from washtrack.utils.logger import get_logger

log = get_logger(__name__)

DATE_FIELD = "work_date"


@dataclass(frozen=True)
class LoadedTemplate:
    """A stored template with its reconciled configuration.

    ``dropped_columns`` and ``dropped_filters`` are only populated under the
    ``warn`` drift policy.
    """

    template: ReportTemplate
    config: ReportConfiguration
    dropped_columns: tuple[str, ...] = ()
    dropped_filters: tuple[str, ...] = ()


@dataclass(frozen=True)
class TemplateRun:
    loaded: LoadedTemplate
    export: ExportFile
    saved_as: Optional[ReportTemplate] = None


class TemplateService:
    """Template persistence on top of ``ReportTemplateRepository``."""

    def __init__(
        self,
        repository: ReportTemplateRepository,
        codec: TemplateCodec,
        report_service: Optional[ReportService] = None,
    ):
        self.repository = repository
        self.codec = codec
        self.report_service = report_service

    async def save(
        self,
        config: ReportConfiguration,
        name: str,
        description: Optional[str] = None,
        author_id: Optional[UUID] = None,
        is_system_template: bool = False,
    ) -> ReportTemplate:
        """
        Persist ``config`` under a unique name.

        Raises:
            ValidationError: Blank name or no columns selected
            ConflictError: Name already taken
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("template_name", "Template name is required")
        if not config.columns:
            raise ValidationError("columns", "Select at least one column")
        validate_configuration(config, self.codec.registry)

        if await self.repository.get_by_name(name) is not None:
            raise ConflictError(
                f"A template named '{name}' already exists", details={"template_name": name}
            )

        template = await self.repository.create(
            template_name=name,
            description=(description or "").strip() or None,
            report_type=config.report_type.value,
            config=self.codec.encode(config),
            created_by=author_id,
            is_system_template=is_system_template,
        )
        log.info(
            "template saved",
            template_id=str(template.id),
            report_type=config.report_type.value,
            columns=len(config.columns),
            filters=len(config.filters),
        )
        return template

    async def load(self, template_id: UUID) -> LoadedTemplate:
        """
        Restore a template's configuration and record the use.

        Raises:
            ResourceNotFoundError: Unknown template id
            InvalidConfigurationError: Drift under the strict policy
        """
        template = await self._get(template_id)
        decoded = self.codec.decode(template.config, template.report_type)
        await self.repository.mark_used(template)

        surface = self.codec.policy is DriftPolicy.WARN
        return LoadedTemplate(
            template=template,
            config=decoded.config,
            dropped_columns=decoded.dropped_columns if surface else (),
            dropped_filters=decoded.dropped_filters if surface else (),
        )

    async def get(self, template_id: UUID) -> ReportTemplate:
        """Fetch template metadata without counting it as a use."""
        return await self._get(template_id)

    async def list_templates(self, report_type: Optional[str] = None) -> list[ReportTemplate]:
        return await self.repository.list_templates(report_type=report_type)

    async def delete(self, template_id: UUID) -> None:
        """Delete a user template; system templates are protected."""
        template = await self._get(template_id)
        if template.is_system_template:
            raise ForbiddenError(
                "System templates cannot be deleted", details={"template_id": str(template_id)}
            )
        await self.repository.delete(template)

    async def run(
        self,
        template_id: UUID,
        *,
        date_range: Optional[Any] = None,
        include_summary_row: bool = False,
        save_as: Optional[str] = None,
        author_id: Optional[UUID] = None,
        today: Optional[date] = None,
    ) -> TemplateRun:
        """
        Export a saved template, optionally overriding its date range.

        Args:
            template_id: Template to run
            date_range: ``[from, to]`` pair or a relative range name applied
                to the work date
            include_summary_row: Append the summary row to the workbook
            save_as: Also save the (possibly overridden) configuration as a
                new template with this name
            author_id: Author recorded on the new template
            today: Reference day for relative ranges and the file name
        """
        if self.report_service is None:
            raise RuntimeError("TemplateService.run requires a ReportService")

        loaded = await self.load(template_id)
        config = loaded.config
        if date_range is not None:
            config = set_filter(
                config, DATE_FIELD, FilterOperator.BETWEEN, date_range, self.codec.registry
            )

        saved = None
        if save_as:
            saved = await self.save(
                config,
                save_as,
                description=loaded.template.description,
                author_id=author_id,
            )

        export = await self.report_service.export(
            config,
            include_summary_row=include_summary_row,
            template_name=loaded.template.template_name,
            today=today,
        )
        return TemplateRun(loaded=loaded, export=export, saved_as=saved)

    async def _get(self, template_id: UUID) -> ReportTemplate:
        template = await self.repository.get_by_id(template_id)
        if template is None:
            raise ResourceNotFoundError("ReportTemplate", str(template_id))
        return template
