"""Invoice issuance for completed bookings."""

import uuid
from decimal import ROUND_HALF_UP, Decimal
from typing import assert_never

import structlog
from sqlalchemy.exc import IntegrityError

from app.exceptions import (
    AuthorizationError,
    BookingNotCompletedError,
    DuplicateInvoiceError,
    NotFoundError,
)
from app.metrics import INVOICES_CREATED
from app.models.enums import BookingStatus, UserRole
from app.models.invoice import Invoice
from app.repositories.booking_repository import BookingRepository
from app.repositories.invoice_repository import InvoiceRepository
from app.schemas.invoice import (
    InvoiceBookingSummary,
    InvoiceCreateRequest,
    InvoiceItem,
    InvoiceProviderSummary,
    InvoiceResponse,
    InvoiceVehicleSummary,
    InvoiceWithDetailsResponse,
)

logger = structlog.get_logger()

_CENTS = Decimal("0.01")


def calculate_amount(items: tuple[InvoiceItem, ...]) -> Decimal:
    """Sum of price x quantity over the billed lines, rounded to cents."""
    total = sum((item.line_total for item in items), Decimal("0"))
    return total.quantize(_CENTS, rounding=ROUND_HALF_UP)


def invoice_with_details(invoice: Invoice) -> InvoiceWithDetailsResponse:
    base = InvoiceResponse.model_validate(invoice)
    booking = invoice.booking
    profile = booking.provider.provider_profile
    return InvoiceWithDetailsResponse(
        **base.model_dump(),
        booking=InvoiceBookingSummary(
            service_date=booking.service_date,
            description=booking.description,
            provider_id=booking.provider_id,
        ),
        vehicle=InvoiceVehicleSummary(
            make=booking.vehicle.make,
            model=booking.vehicle.model,
            license_plate=booking.vehicle.license_plate,
            owner_id=booking.vehicle.owner_id,
        ),
        provider=InvoiceProviderSummary(
            name=booking.provider.name,
            business_name=profile.business_name if profile else None,
        ),
    )


class InvoiceService:
    def __init__(self, invoices: InvoiceRepository, bookings: BookingRepository):
        self.invoices = invoices
        self.bookings = bookings

    async def create_invoice(self, provider_id: uuid.UUID, data: InvoiceCreateRequest) -> Invoice:
        """Issue the single invoice of a COMPLETED booking.

        Checks run in a fixed order: booking exists, booking is COMPLETED,
        caller is the booking's provider, no invoice exists yet. Items are
        stored as given; the amount is derived from them.
        """
        booking = await self.bookings.get_with_details(data.booking_id)
        if booking is None:
            raise NotFoundError("Booking")
        if BookingStatus(booking.status) != BookingStatus.COMPLETED:
            raise BookingNotCompletedError()
        if booking.provider_id != provider_id:
            raise AuthorizationError("You can only invoice your own bookings")
        if await self.invoices.get_by_booking_id(booking.id) is not None:
            raise DuplicateInvoiceError()

        amount = calculate_amount(data.items)
        try:
            invoice = await self.invoices.create(
                booking_id=booking.id,
                amount=amount,
                items=[item.model_dump(mode="json") for item in data.items],
            )
        except IntegrityError:
            # Another request invoiced the booking between the check and the insert
            logger.info("invoice_race_condition", booking_id=str(booking.id))
            raise DuplicateInvoiceError()
        INVOICES_CREATED.inc()
        logger.info(
            "invoice_created",
            invoice_id=str(invoice.id),
            booking_id=str(booking.id),
            owner_id=str(booking.vehicle.owner_id),
            amount=str(amount),
            item_count=len(data.items),
        )
        return invoice

    async def get_invoices_by_role(self, user_id: uuid.UUID, role: UserRole) -> list[InvoiceWithDetailsResponse]:
        match role:
            case UserRole.OWNER:
                invoices = await self.invoices.list_by_owner(user_id)
            case UserRole.PROVIDER:
                invoices = await self.invoices.list_by_provider(user_id)
            case _:
                assert_never(role)
        return [invoice_with_details(i) for i in invoices]

    async def get_invoice(self, invoice_id: uuid.UUID, user_id: uuid.UUID) -> InvoiceWithDetailsResponse:
        invoice = await self.invoices.get_by_id(invoice_id)
        if invoice is None:
            raise NotFoundError("Invoice")
        booking = invoice.booking
        if user_id not in (booking.provider_id, booking.vehicle.owner_id):
            raise AuthorizationError("You don't have access to this invoice")
        return invoice_with_details(invoice)
