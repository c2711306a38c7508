from pydantic import BaseModel, Field, field_validator, ConfigDict
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, List
from src.domain.common import VehicleType, SpaceType, SpaceStatus, PaymentStatus, PaymentMethod


def _upper_plate(v: str) -> str:
    return v.upper().strip()


class VehicleBase(BaseModel):
    license_plate: str = Field(..., min_length=1, max_length=20)
    vehicle_type: VehicleType = VehicleType.CAR
    brand: Optional[str] = Field(default=None, max_length=50)
    model: Optional[str] = Field(default=None, max_length=50)
    color: Optional[str] = Field(default=None, max_length=50)

    @field_validator('license_plate')
    def validate_license_plate(cls, v):  # pylint: disable=no-self-argument
        v = _upper_plate(v)
        if not v:
            raise ValueError("license plate cannot be blank")
        return v


class VehicleCreate(VehicleBase):
    pass


class VehicleUpdate(BaseModel):
    license_plate: Optional[str] = Field(default=None, min_length=1, max_length=20)
    vehicle_type: Optional[VehicleType] = None
    brand: Optional[str] = Field(default=None, max_length=50)
    model: Optional[str] = Field(default=None, max_length=50)
    color: Optional[str] = Field(default=None, max_length=50)

    @field_validator('license_plate')
    def validate_license_plate(cls, v):  # pylint: disable=no-self-argument
        return _upper_plate(v) if v is not None else v


class VehicleResponse(VehicleBase):
    id: int
    owner_id: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class VehicleSummary(BaseModel):
    id: int
    license_plate: str
    vehicle_type: VehicleType

    model_config = ConfigDict(from_attributes=True)


class SpaceSummary(BaseModel):
    id: int
    number: str
    floor: str

    model_config = ConfigDict(from_attributes=True)


class ParkingSpaceBase(BaseModel):
    number: str = Field(..., min_length=1, max_length=20)
    floor: str = Field(..., min_length=1, max_length=10)
    space_type: SpaceType = SpaceType.STANDARD
    hourly_rate: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)


class ParkingSpaceCreate(ParkingSpaceBase):
    pass


class ParkingSpaceResponse(ParkingSpaceBase):
    id: int
    status: SpaceStatus
    current_vehicle_id: Optional[int] = None
    current_vehicle: Optional[VehicleSummary] = None

    model_config = ConfigDict(from_attributes=True)


class VehicleEntry(BaseModel):
    parking_space_id: int
    license_plate: str = Field(..., min_length=1, max_length=20)
    vehicle_type: Optional[VehicleType] = VehicleType.CAR
    brand: Optional[str] = Field(default=None, max_length=50)
    model: Optional[str] = Field(default=None, max_length=50)
    color: Optional[str] = Field(default=None, max_length=50)

    @field_validator('license_plate')
    def validate_license_plate(cls, v):  # pylint: disable=no-self-argument
        v = _upper_plate(v)
        if not v:
            raise ValueError("license plate cannot be blank")
        return v


class VehicleExit(BaseModel):
    parking_record_id: int
    payment_method: Optional[PaymentMethod] = None

    @field_validator('payment_method')
    def validate_payment_method(cls, v):  # pylint: disable=no-self-argument
        if v == PaymentMethod.NONE:
            raise ValueError("payment method must be cash, card or app")
        return v


class ParkingRecordResponse(BaseModel):
    id: int
    vehicle_id: int
    parking_space_id: int
    entry_time: datetime
    exit_time: Optional[datetime] = None
    duration: int
    amount: Decimal
    payment_status: PaymentStatus
    payment_method: PaymentMethod
    receipt_number: Optional[str] = None

    @field_validator('entry_time', 'exit_time')
    @classmethod
    def make_datetime_aware(cls, dt: datetime) -> datetime:
        if dt is None:
            return dt
        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt

    model_config = ConfigDict(from_attributes=True)


class RecordSummary(BaseModel):
    """Session a payment settles, with its vehicle and space."""
    id: int
    entry_time: datetime
    exit_time: Optional[datetime] = None
    duration: int
    amount: Decimal
    payment_status: PaymentStatus
    vehicle: Optional[VehicleSummary] = None
    parking_space: Optional[SpaceSummary] = None

    model_config = ConfigDict(from_attributes=True)


class EntryResponse(BaseModel):
    message: str = "Vehicle entry registered"
    parking_record: ParkingRecordResponse
    vehicle: VehicleResponse
    parking_space: ParkingSpaceResponse


class ExitResponse(BaseModel):
    message: str = "Vehicle exit registered"
    parking_record: ParkingRecordResponse


class FloorStatus(BaseModel):
    floor: str
    total: int
    occupied: int
    available: int


class ParkingStatus(BaseModel):
    total_spaces: int
    occupied_spaces: int
    available_spaces: int
    occupancy_rate: float
    floors: List[FloorStatus]
