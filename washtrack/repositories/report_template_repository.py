"""Repository for ReportTemplate model operations."""

from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from washtrack.exceptions import ConflictError
from washtrack.models.report_template import ReportTemplate
from washtrack.utils.logger import get_logger

log = get_logger(__name__)


class ReportTemplateRepository:
    """Repository for ReportTemplate CRUD operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        template_name: str,
        report_type: str,
        config: dict[str, Any],
        description: Optional[str] = None,
        created_by: Optional[UUID] = None,
        is_system_template: bool = False,
    ) -> ReportTemplate:
        """
        Create a new template.

        Caller is responsible for committing the transaction.

        Raises:
            ConflictError: If a template with the same name exists
        """
        template = ReportTemplate(
            template_name=template_name,
            description=description,
            report_type=report_type,
            config=config,
            created_by=created_by,
            is_system_template=is_system_template,
            use_count=0,
        )
        try:
            async with self.session.begin_nested():
                self.session.add(template)
                await self.session.flush()
        except IntegrityError as e:
            log.warning("template name conflict", template_name=template_name)
            raise ConflictError(
                f"A template named '{template_name}' already exists",
                details={"template_name": template_name},
            ) from e
        await self.session.refresh(template)
        log.debug("template created", template_id=str(template.id), report_type=report_type)
        return template

    async def get_by_id(self, template_id: UUID) -> Optional[ReportTemplate]:
        """Get template by ID."""
        result = await self.session.execute(
            select(ReportTemplate).where(ReportTemplate.id == template_id)
        )
        return result.scalar_one_or_none()

    async def get_by_name(self, template_name: str) -> Optional[ReportTemplate]:
        """Get template by its unique name."""
        result = await self.session.execute(
            select(ReportTemplate).where(ReportTemplate.template_name == template_name)
        )
        return result.scalar_one_or_none()

    async def list_templates(self, report_type: Optional[str] = None) -> list[ReportTemplate]:
        """List templates, system templates first, then by name."""
        stmt = select(ReportTemplate)
        if report_type is not None:
            stmt = stmt.where(ReportTemplate.report_type == report_type)
        stmt = stmt.order_by(
            ReportTemplate.is_system_template.desc(), ReportTemplate.template_name.asc()
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count(self) -> int:
        """Get total template count."""
        result = await self.session.execute(select(func.count()).select_from(ReportTemplate))
        return result.scalar_one()

    async def mark_used(self, template: ReportTemplate) -> ReportTemplate:
        """Increment the use counter and stamp the last-used time."""
        template.use_count = (template.use_count or 0) + 1
        template.last_used_at = datetime.now(timezone.utc)
        await self.session.flush()
        log.debug("template used", template_id=str(template.id), use_count=template.use_count)
        return template

    async def delete(self, template: ReportTemplate) -> None:
        """Delete a template."""
        await self.session.delete(template)
        await self.session.flush()
        log.info("template deleted", template_id=str(template.id))
