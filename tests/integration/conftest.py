"""Integration test configuration with an in-memory SQLite database."""

import uuid
from datetime import date
from decimal import Decimal
from typing import AsyncGenerator

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from washtrack.database import Base
from washtrack.models import Client, Employee, Location, Vehicle, VehicleType, WorkEntry

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def pytest_collection_modifyitems(items):
    """Apply integration marker to all tests in this directory."""
    for item in items:
        if "/integration/" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


@pytest.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh in-memory database with all tables."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite manages transactions itself; let SQLAlchemy emit BEGIN so
    # SAVEPOINTs (begin_nested) behave
    @event.listens_for(engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Database session; everything is discarded with the engine."""
    async with AsyncSession(test_engine, expire_on_commit=False) as session:
        yield session


# =============================================================================
# Sample Data Fixtures
# =============================================================================


@pytest.fixture
async def seeded(db_session: AsyncSession) -> dict:
    """
    Five work entries: three in the first week of January 2024, two outside it.

    TRK-001 belongs to Acme, VAN-010 to Blue Fleet and TRK-002 has no client.
    The 2024-01-05 entry has no location.
    """
    acme = Client(id=uuid.uuid4(), client_name="Acme Logistics")
    blue = Client(id=uuid.uuid4(), client_name="Blue Fleet")
    depot = Location(id=uuid.uuid4(), name="North Depot")
    truck = VehicleType(id=uuid.uuid4(), type_name="Truck", rate_per_wash=Decimal("45.00"))
    van = VehicleType(id=uuid.uuid4(), type_name="Van", rate_per_wash=Decimal("30.00"))
    dana = Employee(id=uuid.uuid4(), name="Dana Ortiz", employee_code="E-100")

    trk1 = Vehicle(id=uuid.uuid4(), vehicle_number="TRK-001", client=acme, vehicle_type=truck)
    trk2 = Vehicle(id=uuid.uuid4(), vehicle_number="TRK-002", client=None, vehicle_type=truck)
    van10 = Vehicle(id=uuid.uuid4(), vehicle_number="VAN-010", client=blue, vehicle_type=van)

    def entry(day, vehicle, amount, location=depot, **extra):
        return WorkEntry(
            id=uuid.uuid4(),
            work_date=day,
            vehicle=vehicle,
            location=location,
            employee=dana,
            quantity=Decimal("1"),
            final_amount=amount,
            **extra,
        )

    entries = [
        entry(date(2024, 1, 2), trk1, Decimal("10.00"), duration_minutes=30),
        entry(date(2024, 1, 5), van10, Decimal("20.00"), location=None),
        entry(date(2024, 1, 7), trk2, None),
        entry(date(2023, 12, 31), trk1, Decimal("30.00")),
        entry(date(2024, 1, 8), van10, Decimal("40.00")),
    ]
    db_session.add_all([acme, blue, depot, truck, van, dana, trk1, trk2, van10, *entries])
    await db_session.commit()

    return {
        "clients": {"acme": acme, "blue": blue},
        "location": depot,
        "employee": dana,
        "vehicles": {"TRK-001": trk1, "TRK-002": trk2, "VAN-010": van10},
        "entries": entries,
    }
