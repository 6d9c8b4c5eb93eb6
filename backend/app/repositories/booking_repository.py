"""Booking repository."""

import uuid
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.booking import Booking
from app.models.enums import BookingStatus
from app.models.vehicle import Vehicle


def _with_details(query):
    return query.options(
        selectinload(Booking.vehicle).selectinload(Vehicle.owner),
        selectinload(Booking.provider),
    )


class BookingRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        *,
        vehicle_id: uuid.UUID,
        provider_id: uuid.UUID,
        description: str,
        service_date: datetime,
    ) -> Booking:
        booking = Booking(
            vehicle_id=vehicle_id,
            provider_id=provider_id,
            description=description,
            service_date=service_date,
            status=BookingStatus.PENDING,
        )
        self.db.add(booking)
        await self.db.flush()
        await self.db.refresh(booking)
        return booking

    async def get_by_id(self, booking_id: uuid.UUID) -> Booking | None:
        result = await self.db.execute(select(Booking).where(Booking.id == booking_id))
        return result.scalar_one_or_none()

    async def get_with_details(self, booking_id: uuid.UUID) -> Booking | None:
        result = await self.db.execute(
            _with_details(select(Booking).where(Booking.id == booking_id)).execution_options(
                populate_existing=True
            )
        )
        return result.scalar_one_or_none()

    async def list_by_provider(self, provider_id: uuid.UUID) -> list[Booking]:
        result = await self.db.execute(
            _with_details(
                select(Booking)
                .where(Booking.provider_id == provider_id)
                .order_by(Booking.created_at.desc())
            )
        )
        return list(result.scalars().all())

    async def list_by_owner(self, owner_id: uuid.UUID) -> list[Booking]:
        result = await self.db.execute(
            _with_details(
                select(Booking)
                .join(Booking.vehicle)
                .where(Vehicle.owner_id == owner_id)
                .order_by(Booking.created_at.desc())
            )
        )
        return list(result.scalars().all())

    async def update_status(self, booking: Booking, status: BookingStatus) -> Booking:
        booking.status = status
        await self.db.flush()
        await self.db.refresh(booking)
        return booking
