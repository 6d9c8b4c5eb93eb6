import uuid

from fastapi import APIRouter, Depends, Response, status

from app.dependencies import get_current_owner, get_vehicle_service
from app.models.user import User
from app.schemas.vehicle import VehicleCreateRequest, VehicleResponse
from app.services.vehicle_service import VehicleService

router = APIRouter()


@router.post("", response_model=VehicleResponse, status_code=status.HTTP_201_CREATED)
async def add_vehicle(
    body: VehicleCreateRequest,
    owner: User = Depends(get_current_owner),
    service: VehicleService = Depends(get_vehicle_service),
):
    return await service.add_vehicle(owner.id, body)


@router.get("", response_model=list[VehicleResponse])
async def list_my_vehicles(
    owner: User = Depends(get_current_owner),
    service: VehicleService = Depends(get_vehicle_service),
):
    return await service.get_my_vehicles(owner.id)


@router.delete("/{vehicle_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_vehicle(
    vehicle_id: uuid.UUID,
    owner: User = Depends(get_current_owner),
    service: VehicleService = Depends(get_vehicle_service),
):
    await service.delete_vehicle(vehicle_id, owner.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
