"""Invoice repository."""

import uuid
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.booking import Booking
from app.models.enums import InvoiceStatus
from app.models.invoice import Invoice
from app.models.user import User
from app.models.vehicle import Vehicle


def _with_details(query):
    booking = selectinload(Invoice.booking)
    return query.options(
        booking.selectinload(Booking.vehicle),
        booking.selectinload(Booking.provider).selectinload(User.provider_profile),
    )


class InvoiceRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        *,
        booking_id: uuid.UUID,
        amount: Decimal,
        items: list[dict],
        status: InvoiceStatus = InvoiceStatus.UNPAID,
    ) -> Invoice:
        invoice = Invoice(booking_id=booking_id, amount=amount, items=items, status=status)
        # UNIQUE(booking_id) is the last word on duplicates; a violation only
        # rolls back this savepoint and surfaces as IntegrityError.
        async with self.db.begin_nested():
            self.db.add(invoice)
            await self.db.flush()
        await self.db.refresh(invoice)
        return invoice

    async def get_by_id(self, invoice_id: uuid.UUID) -> Invoice | None:
        result = await self.db.execute(_with_details(select(Invoice).where(Invoice.id == invoice_id)))
        return result.scalar_one_or_none()

    async def get_by_booking_id(self, booking_id: uuid.UUID) -> Invoice | None:
        result = await self.db.execute(select(Invoice).where(Invoice.booking_id == booking_id))
        return result.scalar_one_or_none()

    async def list_by_owner(self, owner_id: uuid.UUID) -> list[Invoice]:
        result = await self.db.execute(
            _with_details(
                select(Invoice)
                .join(Invoice.booking)
                .join(Booking.vehicle)
                .where(Vehicle.owner_id == owner_id)
                .order_by(Invoice.created_at.desc())
            )
        )
        return list(result.scalars().all())

    async def list_by_provider(self, provider_id: uuid.UUID) -> list[Invoice]:
        result = await self.db.execute(
            _with_details(
                select(Invoice)
                .join(Invoice.booking)
                .where(Booking.provider_id == provider_id)
                .order_by(Invoice.created_at.desc())
            )
        )
        return list(result.scalars().all())
