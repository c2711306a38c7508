from .sqlalchemy_repositories import (
    SQLAlchemyVehicleRepository,
    SQLAlchemyParkingSpaceRepository,
    SQLAlchemyParkingRecordRepository,
    SQLAlchemyPaymentRepository,
)

__all__ = [
    "SQLAlchemyVehicleRepository",
    "SQLAlchemyParkingSpaceRepository",
    "SQLAlchemyParkingRecordRepository",
    "SQLAlchemyPaymentRepository",
]
