"""Shared pytest fixtures for router tests."""

import uuid
from contextlib import ExitStack, asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator
from unittest.mock import AsyncMock, Mock, patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession

from washtrack.models.report_template import ReportTemplate
from washtrack.reporting.session import ReportSessionRegistry


# Mock database before starting the app to avoid connection issues
@pytest.fixture(autouse=True)
def mock_database_init():
    """Mock database initialization for all router tests."""
    with ExitStack() as stack:
        stack.enter_context(patch("washtrack.main.init_db", new_callable=AsyncMock))
        mock_engine = stack.enter_context(patch("washtrack.main.engine"))
        mock_engine.dispose = AsyncMock()
        yield


@pytest.fixture
def mock_db_session():
    """Create a mock AsyncSession for router tests."""
    session = AsyncMock(spec=AsyncSession)

    mock_result = Mock()
    mock_result.scalar_one_or_none = Mock(return_value=None)
    mock_result.scalar_one = Mock(return_value=0)
    mock_result.scalars = Mock(return_value=Mock(all=Mock(return_value=[])))
    mock_result.mappings = Mock(return_value=Mock(all=Mock(return_value=[])))

    session.execute = AsyncMock(return_value=mock_result)
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.add = Mock()
    session.delete = AsyncMock()
    session.close = AsyncMock()

    @asynccontextmanager
    async def begin_nested():
        yield

    session.begin_nested = begin_nested

    return session


@pytest.fixture
def mock_report_service():
    """Create a mock ReportService."""
    service = AsyncMock()
    service.preview = AsyncMock()
    service.preview_in_session = AsyncMock()
    service.summary = AsyncMock()
    service.export = AsyncMock()
    return service


@pytest.fixture
def mock_template_service():
    """Create a mock TemplateService."""
    service = AsyncMock()
    service.list_templates = AsyncMock(return_value=[])
    service.save = AsyncMock()
    service.load = AsyncMock()
    service.delete = AsyncMock()
    service.run = AsyncMock()
    return service


@pytest.fixture
def mock_template_repo():
    """Create a mock ReportTemplateRepository."""
    repo = AsyncMock()
    repo.count = AsyncMock(return_value=0)
    return repo


@pytest.fixture
def report_sessions():
    """Fresh preview session registry per test."""
    return ReportSessionRegistry()


@pytest.fixture
def client(
    mock_db_session,
    mock_report_service,
    mock_template_service,
    mock_template_repo,
    report_sessions,
):
    """Create TestClient with all dependencies overridden."""
    from washtrack.database import get_db
    from washtrack.dependencies import (
        get_report_service_dep,
        get_report_sessions,
        get_template_repository,
        get_template_service_dep,
    )
    from washtrack.main import app

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield mock_db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_report_service_dep] = lambda: mock_report_service
    app.dependency_overrides[get_template_service_dep] = lambda: mock_template_service
    app.dependency_overrides[get_template_repository] = lambda: mock_template_repo
    app.dependency_overrides[get_report_sessions] = lambda: report_sessions

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# Sample data fixtures


@pytest.fixture
def sample_template():
    """Factory fixture for stored ReportTemplate rows."""

    def _make(template_name="Weekly Acme", report_type="client_billing", is_system_template=False):
        return ReportTemplate(
            id=uuid.uuid4(),
            template_name=template_name,
            description="Acme vehicles, this week",
            report_type=report_type,
            config={},
            created_by=None,
            is_system_template=is_system_template,
            use_count=3,
            last_used_at=None,
            created_at=datetime.now(timezone.utc),
            updated_at=datetime.now(timezone.utc),
        )

    return _make
