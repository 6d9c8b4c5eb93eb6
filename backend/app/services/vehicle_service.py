"""Vehicle registry for owners."""

import uuid
from datetime import datetime, timezone

import structlog

from app.exceptions import ConflictError, ValidationError, VehicleNotFoundOrForbiddenError
from app.models.vehicle import Vehicle
from app.repositories.vehicle_repository import VehicleRepository
from app.schemas.vehicle import VehicleCreateRequest

logger = structlog.get_logger()

MIN_VEHICLE_YEAR = 1900


class VehicleService:
    def __init__(self, vehicles: VehicleRepository):
        self.vehicles = vehicles

    async def add_vehicle(self, owner_id: uuid.UUID, data: VehicleCreateRequest) -> Vehicle:
        max_year = datetime.now(timezone.utc).year + 1
        if not MIN_VEHICLE_YEAR <= data.year <= max_year:
            raise ValidationError(f"Year must be between {MIN_VEHICLE_YEAR} and {max_year}")

        vehicle = await self.vehicles.create(
            owner_id,
            make=data.make,
            model=data.model,
            year=data.year,
            license_plate=data.license_plate.upper(),
        )
        logger.info("vehicle_added", vehicle_id=str(vehicle.id), owner_id=str(owner_id))
        return vehicle

    async def get_my_vehicles(self, owner_id: uuid.UUID) -> list[Vehicle]:
        return await self.vehicles.list_by_owner(owner_id)

    async def delete_vehicle(self, vehicle_id: uuid.UUID, owner_id: uuid.UUID) -> None:
        """Delete an owner's vehicle. Vehicles with booking history are kept."""
        vehicle = await self.vehicles.get_by_id(vehicle_id)
        if vehicle is None or vehicle.owner_id != owner_id:
            raise VehicleNotFoundOrForbiddenError()
        if await self.vehicles.count_bookings(vehicle.id) > 0:
            raise ConflictError("Vehicle has bookings and cannot be deleted")

        await self.vehicles.delete(vehicle)
        logger.info("vehicle_deleted", vehicle_id=str(vehicle_id), owner_id=str(owner_id))
