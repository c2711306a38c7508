import os
from decimal import Decimal

from loguru import logger
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import Session

from src.config.settings_env import settings
from src.domain.common import SpaceType
from src.infrastructure.persistence.models.models import Base, ParkingSpace
from src.infrastructure.persistence.unit_of_work import SQLAlchemyUnitOfWork

DATABASE_URL = settings.DATABASE_URL
ASYNC_DATABASE_URL = settings.ASYNC_DATABASE_URL

# Ensure we're using absolute paths for SQLite files
if DATABASE_URL.startswith("sqlite:///./"):
    db_path = os.path.abspath(DATABASE_URL.removeprefix("sqlite:///"))
    DATABASE_URL = f"sqlite:///{db_path}"
    ASYNC_DATABASE_URL = f"sqlite+aiosqlite:///{db_path}"

# Sync engine for initialization
engine = create_engine(DATABASE_URL, connect_args={
                       "check_same_thread": False} if "sqlite" in DATABASE_URL else {})

# Async engine for application
async_engine = create_async_engine(ASYNC_DATABASE_URL, echo=False)
AsyncSessionLocal = async_sessionmaker(
    async_engine, class_=AsyncSession, expire_on_commit=False)


async def get_async_db():
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def get_unit_of_work():
    async for session in get_async_db():
        yield SQLAlchemyUnitOfWork(session)


def seed_space_type(space_index: int) -> SpaceType:
    if space_index <= 2:
        return SpaceType.HANDICAPPED
    if space_index <= 4:
        return SpaceType.ELECTRIC
    if space_index <= 6:
        return SpaceType.RESERVED
    return SpaceType.STANDARD


def init_db(bind=None, floors: int | None = None, spaces_per_floor: int | None = None) -> int:
    """Create tables and seed the space inventory on an empty database.

    Returns the number of spaces created.
    """
    bind = bind or engine
    floors = floors or settings.PARKING_FLOORS
    spaces_per_floor = spaces_per_floor or settings.SPACES_PER_FLOOR

    logger.info(f"Initializing database at: {bind.url}")
    Base.metadata.create_all(bind=bind, checkfirst=True)

    with Session(bind) as session:
        if session.query(ParkingSpace).count() > 0:
            return 0

        for floor in range(1, floors + 1):
            for space_index in range(1, spaces_per_floor + 1):
                space_type = seed_space_type(space_index)
                rate = Decimal("7.50") if space_type == SpaceType.ELECTRIC else settings.DEFAULT_HOURLY_RATE
                session.add(ParkingSpace(
                    number=f"{floor}-{space_index:02d}",
                    floor=str(floor),
                    space_type=space_type.value,
                    status="available",
                    hourly_rate=rate,
                ))
        session.commit()

    created = floors * spaces_per_floor
    logger.info(f"Created {created} parking spaces")
    return created
