from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional

from loguru import logger as default_logger

from src.application.repositories import AbstractUnitOfWork, DuplicateKeyError
from src.config.settings_env import settings
from src.domain.billing import round2
from src.domain.common import SpaceType, SpaceStatus
from src.domain.entities import ParkingSpace
from src.domain.exceptions import ConflictError, InvalidError


class SpaceService:
    def __init__(self, uow: AbstractUnitOfWork, logger=None):
        self.uow = uow
        self.logger = logger or default_logger.bind(component="space_registry")

    async def list_spaces(self) -> List[ParkingSpace]:
        return await self.uow.run_read(self.uow.spaces.get_all)

    async def create_space(
        self,
        number: str,
        floor: str,
        space_type=SpaceType.STANDARD,
        hourly_rate: Optional[Decimal] = None,
    ) -> ParkingSpace:
        number = (number or "").strip()
        floor = (str(floor) if floor is not None else "").strip()
        if not number or not floor:
            raise InvalidError("Space number and floor are required")
        try:
            space_type = SpaceType(space_type or SpaceType.STANDARD)
        except ValueError:
            raise InvalidError(f"Unknown space type: {space_type}") from None
        try:
            rate = settings.DEFAULT_HOURLY_RATE if hourly_rate is None else round2(hourly_rate)
        except InvalidOperation:
            raise InvalidError(f"Invalid hourly rate: {hourly_rate}") from None
        if rate < 0:
            raise InvalidError("Hourly rate cannot be negative")

        async with self.uow:
            if await self.uow.spaces.get_by_number(number):
                raise ConflictError(f"Parking space {number} already exists")
            try:
                space = await self.uow.spaces.add(ParkingSpace(
                    number=number,
                    floor=floor,
                    space_type=space_type,
                    hourly_rate=rate,
                    status=SpaceStatus.AVAILABLE,
                ))
            except DuplicateKeyError:
                raise ConflictError(f"Parking space {number} already exists") from None

        self.logger.info(f"Parking space {number} created on floor {floor} at {rate}/h")
        return space

    async def get_parking_status(self) -> Dict:
        all_spaces = await self.list_spaces()
        total_spaces = len(all_spaces)

        occupied_spaces = len([space for space in all_spaces if space.is_occupied])
        available_spaces = len([space for space in all_spaces if space.status == SpaceStatus.AVAILABLE])

        # Floor breakdown
        floor_stats = {}
        for space in all_spaces:
            if space.floor not in floor_stats:
                floor_stats[space.floor] = {"total": 0, "occupied": 0, "available": 0}
            floor_stats[space.floor]["total"] += 1
            if space.is_occupied:
                floor_stats[space.floor]["occupied"] += 1
            elif space.status == SpaceStatus.AVAILABLE:
                floor_stats[space.floor]["available"] += 1

        floors = []
        for floor in sorted(floor_stats.keys()):
            stats = floor_stats[floor]
            floors.append({
                "floor": floor,
                "total": stats["total"],
                "occupied": stats["occupied"],
                "available": stats["available"]
            })

        occupancy_rate = (occupied_spaces / total_spaces * 100) if total_spaces > 0 else 0

        return {
            "total_spaces": total_spaces,
            "occupied_spaces": occupied_spaces,
            "available_spaces": available_spaces,
            "occupancy_rate": round(occupancy_rate, 2),
            "floors": floors
        }
