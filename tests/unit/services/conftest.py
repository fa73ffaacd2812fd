"""Shared pytest fixtures for service tests."""

import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock

import pytest

from washtrack.models.report_template import ReportTemplate
from washtrack.reporting.rows import ReportResult


@pytest.fixture
def mock_executor():
    """Create a mock ReportExecutor returning an empty result."""
    from washtrack.reporting.columns import registry

    executor = AsyncMock()
    executor.registry = registry
    executor.max_rows = 100_000
    executor.execute = AsyncMock(return_value=ReportResult(columns=(), rows=(), config_version=0))
    executor.count = AsyncMock(return_value=0)
    return executor


@pytest.fixture
def mock_exporter():
    """Create a mock ExcelExporter."""
    exporter = Mock()
    exporter.render = Mock(return_value=b"xlsx-bytes")
    return exporter


@pytest.fixture
def mock_template_repository():
    """Create a mock ReportTemplateRepository."""
    repo = AsyncMock()
    repo.get_by_id = AsyncMock(return_value=None)
    repo.get_by_name = AsyncMock(return_value=None)
    repo.list_templates = AsyncMock(return_value=[])
    repo.mark_used = AsyncMock()
    repo.delete = AsyncMock()

    async def create(**kwargs):
        return ReportTemplate(id=uuid.uuid4(), use_count=0, **kwargs)

    repo.create = AsyncMock(side_effect=create)
    return repo


@pytest.fixture
def make_template():
    """Factory fixture for stored ReportTemplate rows."""

    def _make(config, template_name="Weekly Acme", is_system_template=False, **overrides):
        template = ReportTemplate(
            id=uuid.uuid4(),
            template_name=template_name,
            description=overrides.pop("description", None),
            report_type=config.get("report_type", "work_entries"),
            config=config,
            is_system_template=is_system_template,
            use_count=overrides.pop("use_count", 0),
            created_at=datetime.now(timezone.utc),
        )
        for key, value in overrides.items():
            setattr(template, key, value)
        return template

    return _make
