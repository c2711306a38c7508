from .abstract_repositories import (
    AbstractVehicleRepository,
    AbstractParkingSpaceRepository,
    AbstractParkingRecordRepository,
    AbstractPaymentRepository,
)
from .unit_of_work import AbstractUnitOfWork, DuplicateKeyError

__all__ = [
    "AbstractVehicleRepository",
    "AbstractParkingSpaceRepository",
    "AbstractParkingRecordRepository",
    "AbstractPaymentRepository",
    "AbstractUnitOfWork",
    "DuplicateKeyError",
]
