from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from src.domain.common import PaymentMethod
from src.domain.entities import Vehicle, ParkingSpace, ParkingRecord, Payment


class AbstractVehicleRepository(ABC):
    @abstractmethod
    async def get_by_license_plate(self, license_plate: str) -> Optional[Vehicle]:
        pass

    @abstractmethod
    async def get_by_id(self, vehicle_id: int) -> Optional[Vehicle]:
        pass

    @abstractmethod
    async def add(self, vehicle: Vehicle) -> Vehicle:
        """Insert a vehicle.

        Raises DuplicateKeyError when the plate already exists; the
        surrounding transaction stays usable.
        """
        pass

    @abstractmethod
    async def update(self, vehicle: Vehicle) -> Vehicle:
        pass

    @abstractmethod
    async def delete(self, vehicle_id: int) -> None:
        pass

    @abstractmethod
    async def list(self, owner_id: Optional[str] = None) -> List[Vehicle]:
        pass

    @abstractmethod
    async def search_by_plate(self, fragment: str) -> List[Vehicle]:
        pass


class AbstractParkingSpaceRepository(ABC):
    @abstractmethod
    async def get_by_id(self, space_id: int) -> Optional[ParkingSpace]:
        pass

    @abstractmethod
    async def get_by_number(self, number: str) -> Optional[ParkingSpace]:
        pass

    @abstractmethod
    async def add(self, space: ParkingSpace) -> ParkingSpace:
        pass

    @abstractmethod
    async def get_all(self) -> List[ParkingSpace]:
        pass

    @abstractmethod
    async def occupy_if_available(self, space_id: int) -> bool:
        """Flip the space from available to occupied.

        Returns False when the space was not available at write time.
        """
        pass

    @abstractmethod
    async def set_current_vehicle(self, space_id: int, vehicle_id: int) -> None:
        pass

    @abstractmethod
    async def release(self, space_id: int) -> None:
        pass


class AbstractParkingRecordRepository(ABC):
    @abstractmethod
    async def get_by_id(self, record_id: int) -> Optional[ParkingRecord]:
        pass

    @abstractmethod
    async def add(self, record: ParkingRecord) -> ParkingRecord:
        pass

    @abstractmethod
    async def close(self, record: ParkingRecord) -> bool:
        """Persist exit fields, only if the record is still open."""
        pass

    @abstractmethod
    async def mark_paid_if_pending(self, record_id: int, method: PaymentMethod, receipt_number: str) -> bool:
        pass

    @abstractmethod
    async def set_receipt_number(self, record_id: int, receipt_number: str) -> None:
        pass

    @abstractmethod
    async def reset_payment(self, record_id: int) -> bool:
        pass

    @abstractmethod
    async def get_active_record_by_vehicle(self, vehicle_id: int) -> Optional[ParkingRecord]:
        pass

    @abstractmethod
    async def get_active_records(self) -> List[ParkingRecord]:
        pass

    @abstractmethod
    async def count_by_vehicle(self, vehicle_id: int) -> int:
        pass


class AbstractPaymentRepository(ABC):
    @abstractmethod
    async def get_by_id(self, payment_id: int) -> Optional[Payment]:
        pass

    @abstractmethod
    async def add(self, payment: Payment) -> Payment:
        pass

    @abstractmethod
    async def void_if_active(self, payment_id: int, void_date: datetime, reason: str, void_by: str) -> bool:
        pass

    @abstractmethod
    async def list(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        include_voided: bool = True,
    ) -> List[Payment]:
        pass
