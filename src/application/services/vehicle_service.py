from typing import Optional, List, Dict

from loguru import logger as default_logger

from src.application.repositories import AbstractUnitOfWork, DuplicateKeyError
from src.domain.common import VehicleType
from src.domain.entities import Vehicle, Identity
from src.domain.exceptions import NotFoundError, ConflictError, InvalidError, ForbiddenError

UPDATABLE_FIELDS = ("license_plate", "vehicle_type", "brand", "model", "color")
# A null in an update clears the field, except for these
REQUIRED_FIELDS = ("license_plate", "vehicle_type")


def normalize_plate(license_plate: str) -> str:
    plate = (license_plate or "").strip().upper()
    if not plate:
        raise InvalidError("License plate is required")
    return plate


def parse_vehicle_type(value) -> VehicleType:
    if value is None:
        return VehicleType.CAR
    try:
        return VehicleType(value)
    except ValueError:
        raise InvalidError(f"Unknown vehicle type: {value}") from None


class VehicleService:
    def __init__(self, uow: AbstractUnitOfWork, logger=None):
        self.uow = uow
        self.logger = logger or default_logger.bind(component="vehicle_registry")

    async def resolve_or_create(
        self,
        license_plate: str,
        vehicle_type=None,
        brand: Optional[str] = None,
        model: Optional[str] = None,
        color: Optional[str] = None,
    ) -> Vehicle:
        """Find a vehicle by plate or register it on first sighting.

        Must run inside an open unit of work. A concurrent insert of the same
        plate is resolved by looking the plate up once more.
        """
        plate = normalize_plate(license_plate)
        vehicle = await self.uow.vehicles.get_by_license_plate(plate)
        if vehicle:
            return vehicle

        try:
            vehicle = await self.uow.vehicles.add(Vehicle(
                license_plate=plate,
                vehicle_type=parse_vehicle_type(vehicle_type),
                brand=brand,
                model=model,
                color=color,
            ))
        except DuplicateKeyError:
            self.logger.info(f"Vehicle {plate} was registered concurrently, reloading")
            vehicle = await self.uow.vehicles.get_by_license_plate(plate)
            if vehicle is None:
                raise ConflictError(f"Vehicle {plate} could not be registered") from None
            return vehicle

        self.logger.info(f"Registered vehicle {plate} on first sighting")
        return vehicle

    def _check_access(self, vehicle: Vehicle, identity: Identity, action: str):
        if identity.is_admin or vehicle.owner_id is None:
            return
        if vehicle.owner_id != identity.user_id:
            raise ForbiddenError(f"Not authorized to {action} this vehicle")

    async def _get_owned(self, vehicle_id: int, identity: Identity, action: str) -> Vehicle:
        vehicle = await self.uow.vehicles.get_by_id(vehicle_id)
        if vehicle is None:
            raise NotFoundError(f"Vehicle {vehicle_id} not found")
        self._check_access(vehicle, identity, action)
        return vehicle

    async def list_vehicles(self, identity: Identity) -> List[Vehicle]:
        owner_id = None if identity.is_admin else identity.user_id
        return await self.uow.run_read(lambda: self.uow.vehicles.list(owner_id=owner_id))

    async def get_vehicle(self, vehicle_id: int, identity: Identity) -> Vehicle:
        return await self.uow.run_read(lambda: self._get_owned(vehicle_id, identity, "view"))

    async def create_vehicle(
        self,
        identity: Identity,
        license_plate: str,
        vehicle_type=None,
        brand: Optional[str] = None,
        model: Optional[str] = None,
        color: Optional[str] = None,
    ) -> Vehicle:
        plate = normalize_plate(license_plate)
        async with self.uow:
            if await self.uow.vehicles.get_by_license_plate(plate):
                raise ConflictError(f"A vehicle with plate {plate} already exists")
            try:
                vehicle = await self.uow.vehicles.add(Vehicle(
                    license_plate=plate,
                    vehicle_type=parse_vehicle_type(vehicle_type),
                    brand=brand,
                    model=model,
                    color=color,
                    owner_id=identity.user_id,
                ))
            except DuplicateKeyError:
                raise ConflictError(f"A vehicle with plate {plate} already exists") from None

        self.logger.info(f"Vehicle {plate} created by {identity.user_id}")
        return vehicle

    async def update_vehicle(self, vehicle_id: int, identity: Identity, changes: Dict) -> Vehicle:
        async with self.uow:
            vehicle = await self._get_owned(vehicle_id, identity, "update")

            for field in UPDATABLE_FIELDS:
                if field not in changes:
                    continue
                value = changes[field]
                if value is None and field in REQUIRED_FIELDS:
                    continue
                if field == "license_plate":
                    value = normalize_plate(value)
                    if value != vehicle.license_plate and await self.uow.vehicles.get_by_license_plate(value):
                        raise ConflictError(f"A vehicle with plate {value} already exists")
                elif field == "vehicle_type":
                    value = parse_vehicle_type(value)
                setattr(vehicle, field, value)

            try:
                vehicle = await self.uow.vehicles.update(vehicle)
            except DuplicateKeyError:
                raise ConflictError(f"A vehicle with plate {vehicle.license_plate} already exists") from None

        return vehicle

    async def delete_vehicle(self, vehicle_id: int, identity: Identity) -> None:
        async with self.uow:
            vehicle = await self._get_owned(vehicle_id, identity, "delete")
            if await self.uow.records.count_by_vehicle(vehicle.id):
                raise ConflictError(f"Vehicle {vehicle.license_plate} has parking records and cannot be deleted")
            await self.uow.vehicles.delete(vehicle.id)

        self.logger.info(f"Vehicle {vehicle.license_plate} deleted by {identity.user_id}")

    async def search_by_plate(self, fragment: str) -> List[Vehicle]:
        return await self.uow.run_read(lambda: self.uow.vehicles.search_by_plate(fragment))
