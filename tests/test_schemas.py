from datetime import datetime, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from src.infrastructure.api.schemas.parking import (
    VehicleBase,
    VehicleCreate,
    VehicleUpdate,
    VehicleResponse,
    ParkingSpaceCreate,
    VehicleEntry,
    VehicleExit,
    ParkingRecordResponse,
)
from src.infrastructure.api.schemas.payments import PaymentCreate, PaymentResponse
from src.domain.common import SpaceType, PaymentStatus, PaymentMethod, VehicleType
from src.domain.entities import ParkingRecord, Payment


def test_space_type_enum():
    assert SpaceType.STANDARD == "standard"
    assert SpaceType.ELECTRIC == "electric"


def test_payment_status_enum():
    assert PaymentStatus.PENDING == "pending"
    assert PaymentStatus.PAID == "paid"
    assert PaymentStatus.WAIVED == "waived"


def test_vehicle_base_valid():
    vehicle = VehicleBase(license_plate="abc-123", color="red", brand="honda")
    assert vehicle.license_plate == "ABC-123"
    assert vehicle.vehicle_type == VehicleType.CAR


def test_vehicle_base_license_plate_validation():
    with pytest.raises(ValidationError):
        VehicleBase(license_plate="")
    with pytest.raises(ValidationError):
        VehicleBase(license_plate="   ")
    with pytest.raises(ValidationError):
        VehicleBase(license_plate="a" * 21)


def test_vehicle_create_rejects_unknown_type():
    with pytest.raises(ValidationError):
        VehicleCreate(license_plate="xyz-789", vehicle_type="bus")


def test_vehicle_update_partial():
    update = VehicleUpdate(color="black")
    assert update.model_dump(exclude_unset=True) == {"color": "black"}
    assert VehicleUpdate(license_plate=" new-1 ").license_plate == "NEW-1"


def test_vehicle_response_valid():
    now = datetime.now(timezone.utc)
    vehicle_response = VehicleResponse(id=1, license_plate="def-456", owner_id="user-1", created_at=now)
    assert vehicle_response.license_plate == "DEF-456"
    assert vehicle_response.created_at == now


def test_parking_space_create_rate():
    space = ParkingSpaceCreate(number="1-01", floor="1", hourly_rate="7.50")
    assert space.hourly_rate == Decimal("7.50")
    with pytest.raises(ValidationError):
        ParkingSpaceCreate(number="1-01", floor="1", hourly_rate="-1")
    with pytest.raises(ValidationError):
        ParkingSpaceCreate(number="1-01", floor="1", hourly_rate="1.234")


def test_vehicle_entry():
    entry = VehicleEntry(parking_space_id=3, license_plate=" ab 12 ")
    assert entry.license_plate == "AB 12"
    assert entry.vehicle_type == VehicleType.CAR


def test_vehicle_exit_payment_method():
    assert VehicleExit(parking_record_id=1).payment_method is None
    assert VehicleExit(parking_record_id=1, payment_method="app").payment_method == PaymentMethod.APP
    with pytest.raises(ValidationError):
        VehicleExit(parking_record_id=1, payment_method="none")
    with pytest.raises(ValidationError):
        VehicleExit(parking_record_id=1, payment_method="cheque")


def test_parking_record_response_from_entity():
    record = ParkingRecord(
        vehicle_id=1,
        parking_space_id=2,
        entry_time=datetime(2024, 5, 1, 10, 0),
        id=3,
        exit_time=datetime(2024, 5, 1, 11, 1, tzinfo=timezone.utc),
        duration=61,
        amount=Decimal("10.00"),
    )
    response = ParkingRecordResponse.model_validate(record)

    assert response.entry_time.tzinfo == timezone.utc
    assert response.payment_status == PaymentStatus.PENDING
    assert response.model_dump(mode="json")["amount"] == "10.00"


def test_payment_create_rejects_none_method():
    with pytest.raises(ValidationError):
        PaymentCreate(parking_record_id=1, amount="5.00", payment_method="none")
    with pytest.raises(ValidationError):
        PaymentCreate(parking_record_id=1, amount="-5.00", payment_method="cash")


def test_payment_response_status():
    payment = Payment(1, Decimal("5.00"), PaymentMethod.CASH, datetime.now(timezone.utc), "PAY-1-AA", "user-1",
                      void_status=True, id=9)
    response = PaymentResponse.model_validate(payment)
    assert response.status == "voided"
    assert response.void_status is True
