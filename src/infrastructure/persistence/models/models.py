from decimal import Decimal

from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, Index
from sqlalchemy.orm import declarative_base, relationship

from src.shared.custom_types import UTCDateTime, Money
from src.shared.utils import utcnow

Base = declarative_base()


class Vehicle(Base):
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, index=True)
    license_plate = Column(String, unique=True, index=True, nullable=False)
    vehicle_type = Column(String, nullable=False, default="car")  # car, motorcycle, truck
    brand = Column(String, nullable=True)
    model = Column(String, nullable=True)
    color = Column(String, nullable=True)
    owner_id = Column(String, nullable=True, index=True)
    created_at = Column(UTCDateTime, default=utcnow)

    parking_records = relationship("ParkingRecord", back_populates="vehicle")


class ParkingSpace(Base):
    __tablename__ = "parking_spaces"

    id = Column(Integer, primary_key=True, index=True)
    number = Column(String, unique=True, index=True, nullable=False)
    floor = Column(String, nullable=False)
    space_type = Column(String, nullable=False, default="standard")  # standard, handicapped, reserved, electric
    status = Column(String, nullable=False, default="available")  # available, occupied, maintenance, reserved
    current_vehicle_id = Column(Integer, ForeignKey("vehicles.id"), nullable=True)
    hourly_rate = Column(Money, nullable=True, default=Decimal("5.00"))

    current_vehicle = relationship("Vehicle")
    parking_records = relationship("ParkingRecord", back_populates="parking_space")


class ParkingRecord(Base):
    __tablename__ = "parking_records"

    id = Column(Integer, primary_key=True, index=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), nullable=False)
    parking_space_id = Column(Integer, ForeignKey("parking_spaces.id"), nullable=False)
    entry_time = Column(UTCDateTime, default=utcnow, nullable=False)
    exit_time = Column(UTCDateTime, nullable=True)
    duration = Column(Integer, nullable=False, default=0)  # minutes
    amount = Column(Money, nullable=False, default=Decimal("0.00"))
    payment_status = Column(String, nullable=False, default="pending")  # pending, paid, waived
    payment_method = Column(String, nullable=False, default="none")  # cash, card, app, none
    receipt_number = Column(String, nullable=True)

    vehicle = relationship("Vehicle", back_populates="parking_records")
    parking_space = relationship("ParkingSpace", back_populates="parking_records")
    payments = relationship("Payment", back_populates="parking_record")

    __table_args__ = (
        Index("ix_parking_records_open", "parking_space_id", "exit_time"),
    )


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    parking_record_id = Column(Integer, ForeignKey("parking_records.id"), nullable=False, index=True)
    amount = Column(Money, nullable=False)
    payment_method = Column(String, nullable=False)  # cash, card, app
    payment_date = Column(UTCDateTime, default=utcnow, nullable=False, index=True)
    transaction_id = Column(String, nullable=True)
    receipt_number = Column(String, unique=True, nullable=False)
    processed_by = Column(String, nullable=False)
    notes = Column(String, nullable=False, default="")
    void_status = Column(Boolean, nullable=False, default=False)
    void_date = Column(UTCDateTime, nullable=True)
    void_reason = Column(String, nullable=True)
    void_by = Column(String, nullable=True)
    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False)

    parking_record = relationship("ParkingRecord", back_populates="payments")
