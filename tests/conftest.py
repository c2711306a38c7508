import os
import tempfile
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import NullPool

from src.application.services.parking_service import ParkingService
from src.application.services.payment_service import PaymentService
from src.application.services.report_service import ReportService
from src.application.services.space_service import SpaceService
from src.application.services.vehicle_service import VehicleService
from src.domain.common import Role
from src.domain.entities import Identity
from src.infrastructure.persistence.models.models import Base, ParkingSpace
from src.infrastructure.persistence.unit_of_work import SQLAlchemyUnitOfWork


@pytest.fixture(scope="function")
async def test_db():
    """Create a test database for each test function."""
    # Create a temporary file for the test database
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as tmp_file:
        test_db_path = tmp_file.name

    # Create async engine with NullPool to avoid connection issues
    test_db_url = f"sqlite+aiosqlite:///{test_db_path}"
    engine = create_async_engine(
        test_db_url,
        poolclass=NullPool,
        echo=False
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    # Create session factory
    async_session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False
    )

    # Yield the session factory
    yield async_session_maker

    # Cleanup
    await engine.dispose()
    os.unlink(test_db_path)


@pytest.fixture
async def db_session(test_db):
    """Create a database session for a test."""
    async with test_db() as session:
        yield session
        await session.rollback()


@pytest.fixture
def uow(db_session):
    return SQLAlchemyUnitOfWork(db_session)


@pytest.fixture
async def init_parking_spaces(test_db):
    """Two floors of five spaces; space x-05 is under maintenance, x-02 is electric."""
    spaces = []
    async with test_db() as session:
        for floor in range(1, 3):
            for space_index in range(1, 6):
                space = ParkingSpace(
                    number=f"{floor}-{space_index:02d}",
                    floor=str(floor),
                    space_type="electric" if space_index == 2 else "standard",
                    status="maintenance" if space_index == 5 else "available",
                    hourly_rate=Decimal("7.50") if space_index == 2 else Decimal("5.00"),
                )
                spaces.append(space)
                session.add(space)
        await session.commit()
    return spaces


@pytest.fixture
def admin():
    return Identity(user_id="admin-1", role=Role.ADMIN)


@pytest.fixture
def attendant():
    return Identity(user_id="user-1", role=Role.USER)


@pytest.fixture
def parking_service(uow):
    return ParkingService(uow)


@pytest.fixture
def payment_service(uow):
    return PaymentService(uow)


@pytest.fixture
def vehicle_service(uow):
    return VehicleService(uow)


@pytest.fixture
def space_service(uow):
    return SpaceService(uow)


@pytest.fixture
def report_service(uow):
    return ReportService(uow)
