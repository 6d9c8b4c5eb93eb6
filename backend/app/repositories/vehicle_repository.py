"""Vehicle repository."""

import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.booking import Booking
from app.models.vehicle import Vehicle


class VehicleRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, owner_id: uuid.UUID, *, make: str, model: str, year: int, license_plate: str) -> Vehicle:
        vehicle = Vehicle(
            owner_id=owner_id,
            make=make,
            model=model,
            year=year,
            license_plate=license_plate,
        )
        self.db.add(vehicle)
        await self.db.flush()
        await self.db.refresh(vehicle)
        return vehicle

    async def get_by_id(self, vehicle_id: uuid.UUID) -> Vehicle | None:
        result = await self.db.execute(select(Vehicle).where(Vehicle.id == vehicle_id))
        return result.scalar_one_or_none()

    async def list_by_owner(self, owner_id: uuid.UUID) -> list[Vehicle]:
        result = await self.db.execute(
            select(Vehicle)
            .where(Vehicle.owner_id == owner_id)
            .order_by(Vehicle.created_at.desc())
        )
        return list(result.scalars().all())

    async def count_bookings(self, vehicle_id: uuid.UUID) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(Booking).where(Booking.vehicle_id == vehicle_id)
        )
        return result.scalar_one()

    async def delete(self, vehicle: Vehicle) -> None:
        await self.db.delete(vehicle)
        await self.db.flush()
