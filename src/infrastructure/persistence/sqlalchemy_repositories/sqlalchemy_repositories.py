from datetime import datetime
from enum import Enum
from typing import List, Optional

from sqlalchemy import select, update, delete, func, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.application.repositories import (
    AbstractVehicleRepository,
    AbstractParkingSpaceRepository,
    AbstractParkingRecordRepository,
    AbstractPaymentRepository,
    DuplicateKeyError,
)
from src.domain.common import (
    VehicleType, SpaceType, SpaceStatus, PaymentStatus, PaymentMethod
)
from src.domain.entities import Vehicle, ParkingSpace, ParkingRecord, Payment
from src.infrastructure.persistence.models.models import (
    Vehicle as ORMVehicle,
    ParkingSpace as ORMParkingSpace,
    ParkingRecord as ORMParkingRecord,
    Payment as ORMPayment,
)


def _value(field):
    return field.value if isinstance(field, Enum) else field


def _to_vehicle(orm_vehicle: ORMVehicle) -> Vehicle:
    return Vehicle(
        id=orm_vehicle.id,
        license_plate=orm_vehicle.license_plate,
        vehicle_type=VehicleType(orm_vehicle.vehicle_type),
        brand=orm_vehicle.brand,
        model=orm_vehicle.model,
        color=orm_vehicle.color,
        owner_id=orm_vehicle.owner_id,
        created_at=orm_vehicle.created_at,
    )


def _to_space(orm_space: ORMParkingSpace, include_vehicle: bool = False) -> ParkingSpace:
    current_vehicle = None
    if include_vehicle and orm_space.current_vehicle is not None:
        current_vehicle = _to_vehicle(orm_space.current_vehicle)
    return ParkingSpace(
        id=orm_space.id,
        number=orm_space.number,
        floor=orm_space.floor,
        space_type=SpaceType(orm_space.space_type),
        hourly_rate=orm_space.hourly_rate,
        status=SpaceStatus(orm_space.status),
        current_vehicle_id=orm_space.current_vehicle_id,
        current_vehicle=current_vehicle,
    )


def _to_record(orm_record: ORMParkingRecord, include_refs: bool = False) -> ParkingRecord:
    record = ParkingRecord(
        id=orm_record.id,
        vehicle_id=orm_record.vehicle_id,
        parking_space_id=orm_record.parking_space_id,
        entry_time=orm_record.entry_time,
        exit_time=orm_record.exit_time,
        duration=orm_record.duration,
        amount=orm_record.amount,
        payment_status=PaymentStatus(orm_record.payment_status),
        payment_method=PaymentMethod(orm_record.payment_method),
        receipt_number=orm_record.receipt_number,
    )
    if include_refs:
        record.vehicle = _to_vehicle(orm_record.vehicle) if orm_record.vehicle else None
        record.parking_space = _to_space(orm_record.parking_space) if orm_record.parking_space else None
    return record


def _to_payment(orm_payment: ORMPayment, include_record: bool = False) -> Payment:
    payment = Payment(
        id=orm_payment.id,
        parking_record_id=orm_payment.parking_record_id,
        amount=orm_payment.amount,
        payment_method=PaymentMethod(orm_payment.payment_method),
        payment_date=orm_payment.payment_date,
        receipt_number=orm_payment.receipt_number,
        processed_by=orm_payment.processed_by,
        transaction_id=orm_payment.transaction_id,
        notes=orm_payment.notes,
        void_status=orm_payment.void_status,
        void_date=orm_payment.void_date,
        void_reason=orm_payment.void_reason,
        void_by=orm_payment.void_by,
        created_at=orm_payment.created_at,
        updated_at=orm_payment.updated_at,
    )
    if include_record and orm_payment.parking_record is not None:
        payment.parking_record = _to_record(orm_payment.parking_record, include_refs=True)
    return payment


class SQLAlchemyVehicleRepository(AbstractVehicleRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_license_plate(self, license_plate: str) -> Optional[Vehicle]:
        result = await self.session.execute(
            select(ORMVehicle).where(ORMVehicle.license_plate == license_plate.strip().upper())
        )
        orm_vehicle = result.scalars().first()
        return _to_vehicle(orm_vehicle) if orm_vehicle else None

    async def get_by_id(self, vehicle_id: int) -> Optional[Vehicle]:
        orm_vehicle = await self.session.get(ORMVehicle, vehicle_id)
        return _to_vehicle(orm_vehicle) if orm_vehicle else None

    async def add(self, vehicle: Vehicle) -> Vehicle:
        orm_vehicle = ORMVehicle(
            license_plate=vehicle.license_plate,
            vehicle_type=_value(vehicle.vehicle_type),
            brand=vehicle.brand,
            model=vehicle.model,
            color=vehicle.color,
            owner_id=vehicle.owner_id,
        )
        try:
            # Savepoint so a duplicate plate only undoes this insert
            async with self.session.begin_nested():
                self.session.add(orm_vehicle)
                await self.session.flush()
        except IntegrityError as exc:
            raise DuplicateKeyError(f"Vehicle {vehicle.license_plate} already exists") from exc
        await self.session.refresh(orm_vehicle)
        return _to_vehicle(orm_vehicle)

    async def update(self, vehicle: Vehicle) -> Vehicle:
        orm_vehicle = await self.session.get(ORMVehicle, vehicle.id)
        if orm_vehicle is None:
            raise ValueError(f"Vehicle with ID {vehicle.id} not found.")
        orm_vehicle.license_plate = vehicle.license_plate
        orm_vehicle.vehicle_type = _value(vehicle.vehicle_type)
        orm_vehicle.brand = vehicle.brand
        orm_vehicle.model = vehicle.model
        orm_vehicle.color = vehicle.color
        orm_vehicle.owner_id = vehicle.owner_id
        try:
            async with self.session.begin_nested():
                await self.session.flush()
        except IntegrityError as exc:
            raise DuplicateKeyError(f"Vehicle {vehicle.license_plate} already exists") from exc
        await self.session.refresh(orm_vehicle)
        return _to_vehicle(orm_vehicle)

    async def delete(self, vehicle_id: int) -> None:
        await self.session.execute(delete(ORMVehicle).where(ORMVehicle.id == vehicle_id))

    async def list(self, owner_id: Optional[str] = None) -> List[Vehicle]:
        query = select(ORMVehicle).order_by(ORMVehicle.license_plate)
        if owner_id is not None:
            query = query.where(ORMVehicle.owner_id == owner_id)
        result = await self.session.execute(query)
        return [_to_vehicle(v) for v in result.scalars().all()]

    async def search_by_plate(self, fragment: str) -> List[Vehicle]:
        # % and _ in the fragment match literally
        escaped = fragment.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        result = await self.session.execute(
            select(ORMVehicle)
            .where(ORMVehicle.license_plate.ilike(f"%{escaped}%", escape="\\"))
            .order_by(ORMVehicle.license_plate)
        )
        return [_to_vehicle(v) for v in result.scalars().all()]


class SQLAlchemyParkingSpaceRepository(AbstractParkingSpaceRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, space_id: int) -> Optional[ParkingSpace]:
        result = await self.session.execute(
            select(ORMParkingSpace).where(ORMParkingSpace.id == space_id)
            .execution_options(populate_existing=True)
        )
        orm_space = result.scalars().first()
        return _to_space(orm_space) if orm_space else None

    async def get_by_number(self, number: str) -> Optional[ParkingSpace]:
        result = await self.session.execute(
            select(ORMParkingSpace).where(ORMParkingSpace.number == number.strip())
            .execution_options(populate_existing=True)
        )
        orm_space = result.scalars().first()
        return _to_space(orm_space) if orm_space else None

    async def add(self, space: ParkingSpace) -> ParkingSpace:
        orm_space = ORMParkingSpace(
            number=space.number,
            floor=space.floor,
            space_type=_value(space.space_type),
            status=_value(space.status),
            hourly_rate=space.hourly_rate,
        )
        try:
            async with self.session.begin_nested():
                self.session.add(orm_space)
                await self.session.flush()
        except IntegrityError as exc:
            raise DuplicateKeyError(f"Parking space {space.number} already exists") from exc
        await self.session.refresh(orm_space)
        return _to_space(orm_space)

    async def get_all(self) -> List[ParkingSpace]:
        result = await self.session.execute(
            select(ORMParkingSpace).order_by(ORMParkingSpace.floor, ORMParkingSpace.number)
            .options(selectinload(ORMParkingSpace.current_vehicle))
            .execution_options(populate_existing=True)
        )
        return [_to_space(s, include_vehicle=True) for s in result.scalars().all()]

    async def occupy_if_available(self, space_id: int) -> bool:
        result = await self.session.execute(
            update(ORMParkingSpace)
            .where(
                and_(
                    ORMParkingSpace.id == space_id,
                    ORMParkingSpace.status == SpaceStatus.AVAILABLE.value,
                )
            )
            .values(status=SpaceStatus.OCCUPIED.value)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def set_current_vehicle(self, space_id: int, vehicle_id: int) -> None:
        await self.session.execute(
            update(ORMParkingSpace)
            .where(ORMParkingSpace.id == space_id)
            .values(current_vehicle_id=vehicle_id)
            .execution_options(synchronize_session=False)
        )

    async def release(self, space_id: int) -> None:
        await self.session.execute(
            update(ORMParkingSpace)
            .where(ORMParkingSpace.id == space_id)
            .values(status=SpaceStatus.AVAILABLE.value, current_vehicle_id=None)
            .execution_options(synchronize_session=False)
        )


class SQLAlchemyParkingRecordRepository(AbstractParkingRecordRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, record_id: int) -> Optional[ParkingRecord]:
        result = await self.session.execute(
            select(ORMParkingRecord).where(ORMParkingRecord.id == record_id)
            .execution_options(populate_existing=True)
        )
        orm_record = result.scalars().first()
        return _to_record(orm_record) if orm_record else None

    async def add(self, record: ParkingRecord) -> ParkingRecord:
        orm_record = ORMParkingRecord(
            vehicle_id=record.vehicle_id,
            parking_space_id=record.parking_space_id,
            entry_time=record.entry_time,
        )
        self.session.add(orm_record)
        await self.session.flush()
        await self.session.refresh(orm_record)
        return _to_record(orm_record)

    async def close(self, record: ParkingRecord) -> bool:
        result = await self.session.execute(
            update(ORMParkingRecord)
            .where(
                and_(
                    ORMParkingRecord.id == record.id,
                    ORMParkingRecord.exit_time.is_(None),
                )
            )
            .values(
                exit_time=record.exit_time,
                duration=record.duration,
                amount=record.amount,
                payment_status=_value(record.payment_status),
                payment_method=_value(record.payment_method),
                receipt_number=record.receipt_number,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def mark_paid_if_pending(self, record_id: int, method: PaymentMethod, receipt_number: str) -> bool:
        result = await self.session.execute(
            update(ORMParkingRecord)
            .where(
                and_(
                    ORMParkingRecord.id == record_id,
                    ORMParkingRecord.exit_time.is_not(None),
                    ORMParkingRecord.payment_status == PaymentStatus.PENDING.value,
                )
            )
            .values(
                payment_status=PaymentStatus.PAID.value,
                payment_method=_value(method),
                receipt_number=receipt_number,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def set_receipt_number(self, record_id: int, receipt_number: str) -> None:
        await self.session.execute(
            update(ORMParkingRecord)
            .where(ORMParkingRecord.id == record_id)
            .values(receipt_number=receipt_number)
            .execution_options(synchronize_session=False)
        )

    async def reset_payment(self, record_id: int) -> bool:
        result = await self.session.execute(
            update(ORMParkingRecord)
            .where(ORMParkingRecord.id == record_id)
            .values(
                payment_status=PaymentStatus.PENDING.value,
                payment_method=PaymentMethod.NONE.value,
                receipt_number=None,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def get_active_record_by_vehicle(self, vehicle_id: int) -> Optional[ParkingRecord]:
        result = await self.session.execute(
            select(ORMParkingRecord).where(
                and_(
                    ORMParkingRecord.vehicle_id == vehicle_id,
                    ORMParkingRecord.exit_time.is_(None)
                )
            ).order_by(ORMParkingRecord.entry_time.desc())
            .execution_options(populate_existing=True)
        )
        orm_record = result.scalars().first()
        return _to_record(orm_record) if orm_record else None

    async def get_active_records(self) -> List[ParkingRecord]:
        result = await self.session.execute(
            select(ORMParkingRecord)
            .where(ORMParkingRecord.exit_time.is_(None))
            .order_by(ORMParkingRecord.entry_time.desc(), ORMParkingRecord.id.desc())
            .execution_options(populate_existing=True)
        )
        return [_to_record(r) for r in result.scalars().all()]

    async def count_by_vehicle(self, vehicle_id: int) -> int:
        result = await self.session.execute(
            select(func.count(ORMParkingRecord.id)).where(ORMParkingRecord.vehicle_id == vehicle_id)
        )
        return result.scalar() or 0


def _record_details():
    """Eager-load the paid record with its vehicle and space."""
    record = selectinload(ORMPayment.parking_record)
    return (
        record.selectinload(ORMParkingRecord.vehicle),
        record.selectinload(ORMParkingRecord.parking_space),
    )


class SQLAlchemyPaymentRepository(AbstractPaymentRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, payment_id: int) -> Optional[Payment]:
        result = await self.session.execute(
            select(ORMPayment).where(ORMPayment.id == payment_id)
            .options(*_record_details())
            .execution_options(populate_existing=True)
        )
        orm_payment = result.scalars().first()
        return _to_payment(orm_payment, include_record=True) if orm_payment else None

    async def add(self, payment: Payment) -> Payment:
        orm_payment = ORMPayment(
            parking_record_id=payment.parking_record_id,
            amount=payment.amount,
            payment_method=_value(payment.payment_method),
            payment_date=payment.payment_date,
            transaction_id=payment.transaction_id,
            receipt_number=payment.receipt_number,
            processed_by=payment.processed_by,
            notes=payment.notes,
        )
        try:
            async with self.session.begin_nested():
                self.session.add(orm_payment)
                await self.session.flush()
        except IntegrityError as exc:
            raise DuplicateKeyError(f"Receipt {payment.receipt_number} already exists") from exc
        await self.session.refresh(orm_payment)
        return _to_payment(orm_payment)

    async def void_if_active(self, payment_id: int, void_date: datetime, reason: str, void_by: str) -> bool:
        result = await self.session.execute(
            update(ORMPayment)
            .where(
                and_(
                    ORMPayment.id == payment_id,
                    ORMPayment.void_status == False,  # noqa: E712
                )
            )
            .values(
                void_status=True,
                void_date=void_date,
                void_reason=reason,
                void_by=void_by,
                updated_at=void_date,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def list(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        include_voided: bool = True,
    ) -> List[Payment]:
        conditions = []
        if start is not None:
            conditions.append(ORMPayment.payment_date >= start)
        if end is not None:
            conditions.append(ORMPayment.payment_date <= end)
        if not include_voided:
            conditions.append(ORMPayment.void_status == False)  # noqa: E712

        query = (
            select(ORMPayment)
            .options(*_record_details())
            .order_by(ORMPayment.payment_date, ORMPayment.id)
            .execution_options(populate_existing=True)
        )
        if conditions:
            query = query.where(and_(*conditions))
        result = await self.session.execute(query)
        return [_to_payment(p, include_record=True) for p in result.scalars().all()]
