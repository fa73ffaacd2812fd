"""Repository running report statements against the work-entry tables."""

from typing import Any, Sequence

from sqlalchemy import RowMapping, Select
from sqlalchemy.ext.asyncio import AsyncSession

from washtrack.utils.logger import get_logger

log = get_logger(__name__)


class ReportDataRepository:
    """Read-only access used by the report executor."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def fetch_rows(self, stmt: Select) -> Sequence[RowMapping]:
        """Execute a row query and return its rows as label-keyed mappings."""
        result = await self.session.execute(stmt)
        rows = result.mappings().all()
        log.debug("report rows fetched", count=len(rows))
        return rows

    async def count(self, stmt: Select) -> int:
        """Execute a ``COUNT`` query."""
        result = await self.session.execute(stmt)
        value: Any = result.scalar_one()
        return int(value or 0)
