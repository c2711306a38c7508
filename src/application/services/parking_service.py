from typing import Optional, List, Tuple

from loguru import logger as default_logger

from src.application.repositories import AbstractUnitOfWork
from src.application.services.vehicle_service import VehicleService
from src.config.settings_env import settings
from src.domain.billing import compute_duration_minutes, compute_amount
from src.domain.common import SpaceStatus, PaymentStatus, PaymentMethod, TENDER_METHODS
from src.domain.entities import Vehicle, ParkingSpace, ParkingRecord
from src.domain.exceptions import NotFoundError, ConflictError, InvalidError
from src.shared.utils import utcnow, generate_receipt_number


def parse_tender_method(value) -> PaymentMethod:
    try:
        method = PaymentMethod(value)
    except ValueError:
        raise InvalidError(f"Unknown payment method: {value}") from None
    if method not in TENDER_METHODS:
        raise InvalidError(f"Payment method must be one of: {', '.join(m.value for m in TENDER_METHODS)}")
    return method


class ParkingService:
    """Opens and closes parking sessions.

    Every operation is a single unit of work: the space reservation, vehicle
    registration and session insert of an entry either all land or none do,
    and likewise the session close and space release of an exit.
    """

    def __init__(self, uow: AbstractUnitOfWork, logger=None):
        self.uow = uow
        self.logger = logger or default_logger.bind(component="session_ledger")
        self.vehicle_registry = VehicleService(uow, logger=self.logger)

    async def register_vehicle_entry(
        self,
        parking_space_id: int,
        license_plate: str,
        vehicle_type=None,
        brand: Optional[str] = None,
        model: Optional[str] = None,
        color: Optional[str] = None,
    ) -> Tuple[ParkingRecord, Vehicle, ParkingSpace]:
        async with self.uow:
            space = await self.uow.spaces.get_by_id(parking_space_id)
            if space is None:
                raise NotFoundError(f"Parking space {parking_space_id} not found")
            if space.status != SpaceStatus.AVAILABLE:
                raise ConflictError(f"Parking space {space.number} is not available")

            # Conditional update decides between concurrent entries
            if not await self.uow.spaces.occupy_if_available(space.id):
                raise ConflictError(f"Parking space {space.number} is not available")

            vehicle = await self.vehicle_registry.resolve_or_create(
                license_plate,
                vehicle_type=vehicle_type,
                brand=brand,
                model=model,
                color=color,
            )
            if await self.uow.records.get_active_record_by_vehicle(vehicle.id):
                raise ConflictError(f"Vehicle {vehicle.license_plate} is already in the parking")

            record = await self.uow.records.add(ParkingRecord(
                vehicle_id=vehicle.id,
                parking_space_id=space.id,
                entry_time=utcnow(),
            ))
            await self.uow.spaces.set_current_vehicle(space.id, vehicle.id)

            space = await self.uow.spaces.get_by_id(space.id)

        self.logger.info(f"Vehicle {vehicle.license_plate} entered at space {space.number} (record {record.id})")
        return record, vehicle, space

    async def register_vehicle_exit(self, record_id: int, payment_method=None) -> ParkingRecord:
        method = parse_tender_method(payment_method) if payment_method is not None else None

        async with self.uow:
            record = await self.uow.records.get_by_id(record_id)
            if record is None:
                raise NotFoundError(f"Parking record {record_id} not found")
            if record.exit_time is not None:
                raise ConflictError(f"Vehicle for record {record_id} has already exited")

            space = await self.uow.spaces.get_by_id(record.parking_space_id)
            hourly_rate = space.hourly_rate if space else None

            record.exit_time = utcnow()
            record.duration = compute_duration_minutes(record.entry_time, record.exit_time)
            record.amount = compute_amount(record.duration, hourly_rate, settings.DEFAULT_HOURLY_RATE)

            if method is not None:
                record.payment_status = PaymentStatus.PAID
                record.payment_method = method
                record.receipt_number = generate_receipt_number(settings.SESSION_RECEIPT_PREFIX)

            if not await self.uow.records.close(record):
                raise ConflictError(f"Vehicle for record {record_id} has already exited")

            if space is not None:
                await self.uow.spaces.release(space.id)
            else:
                self.logger.warning(f"Space {record.parking_space_id} of record {record_id} no longer exists")

        self.logger.info(
            f"Record {record_id} closed after {record.duration} min. Amount: {record.amount}"
            + (f" paid by {method.value}" if method else "")
        )
        return record

    async def get_record(self, record_id: int) -> ParkingRecord:
        record = await self.uow.run_read(lambda: self.uow.records.get_by_id(record_id))
        if record is None:
            raise NotFoundError(f"Parking record {record_id} not found")
        return record

    async def get_active_sessions(self) -> List[ParkingRecord]:
        return await self.uow.run_read(self.uow.records.get_active_records)
