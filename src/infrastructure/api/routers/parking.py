from fastapi import APIRouter, Depends, status
from typing import List

from src.application.repositories import AbstractUnitOfWork
from src.application.services.parking_service import ParkingService
from src.application.services.space_service import SpaceService
from src.domain.entities import Identity
from src.infrastructure.api.dependencies import get_current_identity, require_admin, get_unit_of_work
from src.infrastructure.api.schemas.parking import (
    VehicleEntry, VehicleExit, VehicleResponse, ParkingStatus,
    ParkingSpaceCreate, ParkingSpaceResponse,
    ParkingRecordResponse, EntryResponse, ExitResponse,
)

router = APIRouter(prefix="/api/parking", tags=["parking"])


@router.get("/spaces", response_model=List[ParkingSpaceResponse])
async def get_parking_spaces(
    identity: Identity = Depends(get_current_identity),
    uow: AbstractUnitOfWork = Depends(get_unit_of_work),
):
    service = SpaceService(uow)
    return await service.list_spaces()


@router.post("/spaces", response_model=ParkingSpaceResponse, status_code=status.HTTP_201_CREATED)
async def create_parking_space(
    space_data: ParkingSpaceCreate,
    identity: Identity = Depends(require_admin),
    uow: AbstractUnitOfWork = Depends(get_unit_of_work),
):
    service = SpaceService(uow)
    return await service.create_space(
        number=space_data.number,
        floor=space_data.floor,
        space_type=space_data.space_type,
        hourly_rate=space_data.hourly_rate,
    )


@router.get("/status", response_model=ParkingStatus)
async def get_parking_status(
    identity: Identity = Depends(get_current_identity),
    uow: AbstractUnitOfWork = Depends(get_unit_of_work),
):
    service = SpaceService(uow)
    return await service.get_parking_status()


@router.post("/entry", response_model=EntryResponse, status_code=status.HTTP_201_CREATED)
async def vehicle_entry(
    entry_data: VehicleEntry,
    identity: Identity = Depends(get_current_identity),
    uow: AbstractUnitOfWork = Depends(get_unit_of_work),
):
    service = ParkingService(uow)
    record, vehicle, space = await service.register_vehicle_entry(
        parking_space_id=entry_data.parking_space_id,
        license_plate=entry_data.license_plate,
        vehicle_type=entry_data.vehicle_type,
        brand=entry_data.brand,
        model=entry_data.model,
        color=entry_data.color,
    )
    return EntryResponse(
        parking_record=ParkingRecordResponse.model_validate(record),
        vehicle=VehicleResponse.model_validate(vehicle),
        parking_space=ParkingSpaceResponse.model_validate(space),
    )


@router.post("/exit", response_model=ExitResponse)
async def vehicle_exit(
    exit_data: VehicleExit,
    identity: Identity = Depends(get_current_identity),
    uow: AbstractUnitOfWork = Depends(get_unit_of_work),
):
    service = ParkingService(uow)
    record = await service.register_vehicle_exit(exit_data.parking_record_id, exit_data.payment_method)
    return ExitResponse(parking_record=ParkingRecordResponse.model_validate(record))


@router.get("/sessions/active", response_model=List[ParkingRecordResponse])
async def get_active_sessions(
    identity: Identity = Depends(get_current_identity),
    uow: AbstractUnitOfWork = Depends(get_unit_of_work),
):
    service = ParkingService(uow)
    return await service.get_active_sessions()


@router.get("/sessions/{record_id}", response_model=ParkingRecordResponse)
async def get_session(
    record_id: int,
    identity: Identity = Depends(get_current_identity),
    uow: AbstractUnitOfWork = Depends(get_unit_of_work),
):
    service = ParkingService(uow)
    return await service.get_record(record_id)
