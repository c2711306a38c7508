from datetime import datetime
from decimal import Decimal
from typing import Optional, List, Dict

from src.domain.common import (
    VehicleType, SpaceType, SpaceStatus, PaymentStatus, PaymentMethod, Role, TENDER_METHODS
)


class Vehicle:
    def __init__(
        self,
        license_plate: str,
        vehicle_type: VehicleType = VehicleType.CAR,
        brand: Optional[str] = None,
        model: Optional[str] = None,
        color: Optional[str] = None,
        owner_id: Optional[str] = None,
        id: Optional[int] = None,
        created_at: Optional[datetime] = None,
    ):
        self.id = id
        self.license_plate = license_plate
        self.vehicle_type = vehicle_type
        self.brand = brand
        self.model = model
        self.color = color
        self.owner_id = owner_id
        self.created_at = created_at


class ParkingSpace:
    def __init__(
        self,
        number: str,
        floor: str,
        space_type: SpaceType = SpaceType.STANDARD,
        hourly_rate: Optional[Decimal] = None,
        status: SpaceStatus = SpaceStatus.AVAILABLE,
        current_vehicle_id: Optional[int] = None,
        id: Optional[int] = None,
        current_vehicle: Optional[Vehicle] = None,
    ):
        self.id = id
        self.number = number
        self.floor = floor
        self.space_type = space_type
        self.hourly_rate = hourly_rate
        self.status = status
        self.current_vehicle_id = current_vehicle_id
        self.current_vehicle = current_vehicle

    @property
    def is_occupied(self) -> bool:
        return self.status == SpaceStatus.OCCUPIED


class ParkingRecord:
    """One vehicle's stay in one space, from entry to exit."""

    def __init__(
        self,
        vehicle_id: int,
        parking_space_id: int,
        entry_time: datetime,
        id: Optional[int] = None,
        exit_time: Optional[datetime] = None,
        duration: int = 0,
        amount: Decimal = Decimal("0.00"),
        payment_status: PaymentStatus = PaymentStatus.PENDING,
        payment_method: PaymentMethod = PaymentMethod.NONE,
        receipt_number: Optional[str] = None,
        vehicle: Optional[Vehicle] = None,
        parking_space: Optional[ParkingSpace] = None,
    ):
        self.id = id
        self.vehicle_id = vehicle_id
        self.parking_space_id = parking_space_id
        self.entry_time = entry_time
        self.exit_time = exit_time
        self.duration = duration
        self.amount = amount
        self.payment_status = payment_status
        self.payment_method = payment_method
        self.receipt_number = receipt_number
        self.vehicle = vehicle
        self.parking_space = parking_space

    @property
    def is_open(self) -> bool:
        return self.exit_time is None


class Payment:
    def __init__(
        self,
        parking_record_id: int,
        amount: Decimal,
        payment_method: PaymentMethod,
        payment_date: datetime,
        receipt_number: str,
        processed_by: str,
        transaction_id: Optional[str] = None,
        notes: str = "",
        void_status: bool = False,
        void_date: Optional[datetime] = None,
        void_reason: Optional[str] = None,
        void_by: Optional[str] = None,
        id: Optional[int] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
        parking_record: Optional[ParkingRecord] = None,
    ):
        self.id = id
        self.parking_record_id = parking_record_id
        self.amount = amount
        self.payment_method = payment_method
        self.payment_date = payment_date
        self.receipt_number = receipt_number
        self.processed_by = processed_by
        self.transaction_id = transaction_id
        self.notes = notes
        self.void_status = void_status
        self.void_date = void_date
        self.void_reason = void_reason
        self.void_by = void_by
        self.created_at = created_at
        self.updated_at = updated_at
        self.parking_record = parking_record

    @property
    def status(self) -> str:
        return "voided" if self.void_status else "active"


class MethodTotal:
    def __init__(self, count: int = 0, amount: Decimal = Decimal("0.00")):
        self.count = count
        self.amount = amount


class DailyReport:
    def __init__(self, date, payments: List[Payment]):
        self.date = date
        self.payments = payments
        self.payment_methods: Dict[str, MethodTotal] = {
            method.value: MethodTotal() for method in TENDER_METHODS
        }
        self.total_transactions = 0
        self.total_amount = Decimal("0.00")

        for payment in payments:
            method = PaymentMethod(payment.payment_method).value
            bucket = self.payment_methods.setdefault(method, MethodTotal())
            bucket.count += 1
            bucket.amount += payment.amount
            self.total_transactions += 1
            self.total_amount += payment.amount


class Identity:
    """Acting user as resolved by the authentication layer."""

    def __init__(self, user_id: str, role: Role = Role.USER):
        self.user_id = user_id
        self.role = role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
