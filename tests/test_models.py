import pytest
from datetime import datetime, timezone
from decimal import Decimal
from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker
from src.infrastructure.persistence.models.models import Base, Vehicle, ParkingSpace, ParkingRecord, Payment


@pytest.fixture(scope="function")
def db_session():
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    Session = sessionmaker(bind=engine)
    session = Session()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)


def test_vehicle_model(db_session):
    vehicle = Vehicle(license_plate="TEST123", color="red", brand="Toyota")
    db_session.add(vehicle)
    db_session.commit()
    db_session.refresh(vehicle)

    assert vehicle.id is not None
    assert vehicle.vehicle_type == "car"
    assert vehicle.owner_id is None
    assert isinstance(vehicle.created_at, datetime)
    assert vehicle.created_at.tzinfo == timezone.utc


def test_vehicle_plate_is_unique(db_session):
    db_session.add(Vehicle(license_plate="SAME1"))
    db_session.commit()

    db_session.add(Vehicle(license_plate="SAME1"))
    with pytest.raises(IntegrityError):
        db_session.commit()


def test_parking_space_model_defaults(db_session):
    space = ParkingSpace(number="A1", floor="1")
    db_session.add(space)
    db_session.commit()
    db_session.refresh(space)

    assert space.id is not None
    assert space.space_type == "standard"
    assert space.status == "available"
    assert space.hourly_rate == Decimal("5.00")
    assert space.current_vehicle_id is None


def test_parking_record_model(db_session):
    vehicle = Vehicle(license_plate="TEST456")
    space = ParkingSpace(number="B2", floor="2")
    db_session.add_all([vehicle, space])
    db_session.commit()

    entry_time = datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)
    record = ParkingRecord(vehicle_id=vehicle.id, parking_space_id=space.id, entry_time=entry_time)
    db_session.add(record)
    db_session.commit()
    db_session.refresh(record)

    assert record.entry_time == entry_time
    assert record.exit_time is None
    assert record.duration == 0
    assert record.amount == Decimal("0.00")
    assert record.payment_status == "pending"
    assert record.payment_method == "none"
    assert record.vehicle.license_plate == "TEST456"
    assert record.parking_space.number == "B2"


def test_payment_model(db_session):
    vehicle = Vehicle(license_plate="PAYM1")
    space = ParkingSpace(number="C3", floor="3")
    db_session.add_all([vehicle, space])
    db_session.commit()
    record = ParkingRecord(vehicle_id=vehicle.id, parking_space_id=space.id,
                           entry_time=datetime.now(timezone.utc), amount=Decimal("12.50"))
    db_session.add(record)
    db_session.commit()

    payment = Payment(parking_record_id=record.id, amount=Decimal("12.50"), payment_method="cash",
                      receipt_number="PAY-1-0000AAAA", processed_by="user-1")
    db_session.add(payment)
    db_session.commit()
    db_session.refresh(payment)

    assert payment.amount == Decimal("12.50")
    assert payment.void_status is False
    assert payment.notes == ""
    assert payment.payment_date.tzinfo == timezone.utc
    assert record.payments == [payment]


def test_payment_receipt_is_unique(db_session):
    vehicle = Vehicle(license_plate="RCPT1")
    space = ParkingSpace(number="D4", floor="4")
    db_session.add_all([vehicle, space])
    db_session.commit()
    record = ParkingRecord(vehicle_id=vehicle.id, parking_space_id=space.id, entry_time=datetime.now(timezone.utc))
    db_session.add(record)
    db_session.commit()

    for _ in range(2):
        db_session.add(Payment(parking_record_id=record.id, amount=Decimal("1.00"), payment_method="card",
                               receipt_number="PAY-1-DUPLICATE", processed_by="user-1"))
    with pytest.raises(IntegrityError):
        db_session.commit()
