"""Shared pytest fixtures."""

# Clear settings cache before any imports to prevent stale values
from washtrack.config import get_settings

get_settings.cache_clear()

import pytest
import uuid
from contextlib import asynccontextmanager
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, Mock

from washtrack.reporting.columns import registry
from washtrack.reporting.rows import Cell, ResultRow


# Database mocking fixtures


@pytest.fixture
def mock_async_session():
    """Create a mock AsyncSession for repository tests."""
    session = AsyncMock()

    mock_result = Mock()
    mock_result.scalar_one_or_none = Mock(return_value=None)
    mock_result.scalar_one = Mock(return_value=0)
    mock_result.scalars = Mock(return_value=Mock(all=Mock(return_value=[])))
    mock_result.mappings = Mock(return_value=Mock(all=Mock(return_value=[])))
    mock_result.rowcount = 0

    session.execute = AsyncMock(return_value=mock_result)
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.add = Mock()
    session.delete = AsyncMock()

    @asynccontextmanager
    async def begin_nested():
        yield

    session.begin_nested = begin_nested

    return session


@pytest.fixture
def sample_uuid():
    """Return a sample UUID string."""
    return str(uuid.uuid4())


# Report row fixtures


def make_row(record_id=None, **values) -> ResultRow:
    """Build a ResultRow from column id keyword arguments, in argument order."""
    cells = [Cell.from_raw(registry.get(cid), value) for cid, value in values.items()]
    return ResultRow(cells, record_id=record_id or str(uuid.uuid4()))


@pytest.fixture
def row_factory():
    """Factory fixture for building ResultRow objects."""
    return make_row


@pytest.fixture
def sample_rows():
    """Three billing rows with mixed nulls."""
    return [
        make_row(
            work_date=date(2024, 1, 3),
            vehicle_number="TRK-001",
            client_name="Acme Logistics",
            total_revenue=Decimal("125.50"),
            quantity=Decimal("2"),
        ),
        make_row(
            work_date=date(2024, 1, 2),
            vehicle_number="TRK-002",
            client_name=None,
            total_revenue=None,
            quantity=Decimal("1"),
        ),
        make_row(
            work_date=date(2024, 1, 1),
            vehicle_number="VAN-010",
            client_name="Blue Fleet",
            total_revenue=Decimal("80"),
            quantity=Decimal("1.5"),
        ),
    ]
