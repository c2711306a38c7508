from typing import Awaitable, Callable, TypeVar

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError, OperationalError, InterfaceError
from sqlalchemy.ext.asyncio import AsyncSession

from src.application.repositories import AbstractUnitOfWork
from src.config.settings_env import settings
from src.domain.exceptions import StorageFailure
from src.infrastructure.persistence.sqlalchemy_repositories import (
    SQLAlchemyVehicleRepository,
    SQLAlchemyParkingSpaceRepository,
    SQLAlchemyParkingRecordRepository,
    SQLAlchemyPaymentRepository,
)

T = TypeVar("T")

TRANSIENT_ERRORS = (OperationalError, InterfaceError)


class SQLAlchemyUnitOfWork(AbstractUnitOfWork):
    def __init__(self, session: AsyncSession, read_attempts: int | None = None):
        self.session = session
        self.read_attempts = read_attempts or settings.READ_RETRY_ATTEMPTS
        self.vehicles = SQLAlchemyVehicleRepository(session)
        self.spaces = SQLAlchemyParkingSpaceRepository(session)
        self.records = SQLAlchemyParkingRecordRepository(session)
        self.payments = SQLAlchemyPaymentRepository(session)

    async def commit(self):
        try:
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.error(f"Commit failed: {exc}")
            raise StorageFailure("Storage transaction failed") from exc

    async def rollback(self):
        await self.session.rollback()

    def translate_error(self, exc: BaseException) -> None:
        if isinstance(exc, SQLAlchemyError):
            logger.error(f"Storage error, transaction rolled back: {exc}")
            raise StorageFailure("Storage operation failed") from exc

    async def run_read(self, operation: Callable[[], Awaitable[T]]) -> T:
        for attempt in range(1, self.read_attempts + 1):
            try:
                result = await operation()
                await self.session.commit()
                return result
            except TRANSIENT_ERRORS as exc:
                await self.session.rollback()
                if attempt >= self.read_attempts:
                    logger.error(f"Read failed after {attempt} attempts: {exc}")
                    raise StorageFailure("Storage read failed") from exc
                logger.warning(f"Transient storage error on read (attempt {attempt}), retrying: {exc}")
            except SQLAlchemyError as exc:
                await self.session.rollback()
                raise StorageFailure("Storage read failed") from exc
