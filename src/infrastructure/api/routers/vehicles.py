from fastapi import APIRouter, Depends, status
from typing import List

from src.application.repositories import AbstractUnitOfWork
from src.application.services.vehicle_service import VehicleService
from src.domain.entities import Identity
from src.infrastructure.api.dependencies import get_current_identity, get_unit_of_work
from src.infrastructure.api.schemas.parking import VehicleCreate, VehicleUpdate, VehicleResponse

router = APIRouter(prefix="/api/vehicles", tags=["vehicles"])


@router.get("", response_model=List[VehicleResponse])
async def list_vehicles(
    identity: Identity = Depends(get_current_identity),
    uow: AbstractUnitOfWork = Depends(get_unit_of_work),
):
    return await VehicleService(uow).list_vehicles(identity)


@router.post("", response_model=VehicleResponse, status_code=status.HTTP_201_CREATED)
async def create_vehicle(
    vehicle_data: VehicleCreate,
    identity: Identity = Depends(get_current_identity),
    uow: AbstractUnitOfWork = Depends(get_unit_of_work),
):
    return await VehicleService(uow).create_vehicle(
        identity,
        license_plate=vehicle_data.license_plate,
        vehicle_type=vehicle_data.vehicle_type,
        brand=vehicle_data.brand,
        model=vehicle_data.model,
        color=vehicle_data.color,
    )


@router.get("/search/{license_plate}", response_model=List[VehicleResponse])
async def search_vehicles(
    license_plate: str,
    identity: Identity = Depends(get_current_identity),
    uow: AbstractUnitOfWork = Depends(get_unit_of_work),
):
    return await VehicleService(uow).search_by_plate(license_plate)


@router.get("/{vehicle_id}", response_model=VehicleResponse)
async def get_vehicle(
    vehicle_id: int,
    identity: Identity = Depends(get_current_identity),
    uow: AbstractUnitOfWork = Depends(get_unit_of_work),
):
    return await VehicleService(uow).get_vehicle(vehicle_id, identity)


@router.put("/{vehicle_id}", response_model=VehicleResponse)
async def update_vehicle(
    vehicle_id: int,
    vehicle_data: VehicleUpdate,
    identity: Identity = Depends(get_current_identity),
    uow: AbstractUnitOfWork = Depends(get_unit_of_work),
):
    changes = vehicle_data.model_dump(exclude_unset=True)
    return await VehicleService(uow).update_vehicle(vehicle_id, identity, changes)


@router.delete("/{vehicle_id}")
async def delete_vehicle(
    vehicle_id: int,
    identity: Identity = Depends(get_current_identity),
    uow: AbstractUnitOfWork = Depends(get_unit_of_work),
):
    await VehicleService(uow).delete_vehicle(vehicle_id, identity)
    return {"message": "Vehicle deleted"}
