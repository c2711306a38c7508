from abc import ABC, abstractmethod
from typing import Awaitable, Callable, TypeVar

from src.application.repositories.abstract_repositories import (
    AbstractVehicleRepository,
    AbstractParkingSpaceRepository,
    AbstractParkingRecordRepository,
    AbstractPaymentRepository,
)

T = TypeVar("T")


class DuplicateKeyError(Exception):
    """A unique constraint rejected an insert."""


class AbstractUnitOfWork(ABC):
    """One storage transaction spanning every repository.

    ``async with uow:`` commits when the block finishes and rolls back when
    it raises. Storage errors leave the block as StorageFailure.
    """

    vehicles: AbstractVehicleRepository
    spaces: AbstractParkingSpaceRepository
    records: AbstractParkingRecordRepository
    payments: AbstractPaymentRepository

    async def __aenter__(self) -> "AbstractUnitOfWork":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            await self.commit()
        else:
            await self.rollback()
            self.translate_error(exc_val)

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass

    def translate_error(self, exc: BaseException) -> None:
        """Hook to re-raise storage errors under a domain type."""
        return None

    @abstractmethod
    async def run_read(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run an idempotent read, retrying on transient storage errors."""
        pass
