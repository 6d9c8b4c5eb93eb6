"""Booking lifecycle: creation by owners, status changes by providers."""

import uuid

import structlog

from app.exceptions import (
    AuthorizationError,
    InvalidProviderError,
    NotFoundError,
    VehicleNotFoundOrForbiddenError,
)
from app.metrics import BOOKING_STATUS_TRANSITIONS, BOOKINGS_CREATED
from app.models.booking import Booking
from app.models.enums import BookingStatus, UserRole
from app.repositories.booking_repository import BookingRepository
from app.repositories.user_repository import UserRepository
from app.repositories.vehicle_repository import VehicleRepository
from app.schemas.booking import (
    BookingCreateRequest,
    BookingProviderSummary,
    BookingResponse,
    BookingVehicleSummary,
    BookingWithDetailsResponse,
)
from app.utils.booking_state import validate_transition

logger = structlog.get_logger()


def booking_with_details(booking: Booking) -> BookingWithDetailsResponse:
    """Build the detailed view; vehicle, owner and provider must be eager-loaded."""
    base = BookingResponse.model_validate(booking)
    return BookingWithDetailsResponse(
        **base.model_dump(),
        vehicle=BookingVehicleSummary(
            make=booking.vehicle.make,
            model=booking.vehicle.model,
            license_plate=booking.vehicle.license_plate,
            owner_name=booking.vehicle.owner.name,
        ),
        provider=BookingProviderSummary(
            name=booking.provider.name,
            email=booking.provider.email,
        ),
    )


class BookingService:
    def __init__(
        self,
        bookings: BookingRepository,
        vehicles: VehicleRepository,
        users: UserRepository,
    ):
        self.bookings = bookings
        self.vehicles = vehicles
        self.users = users

    async def create_booking(self, owner_id: uuid.UUID, data: BookingCreateRequest) -> Booking:
        """Create a PENDING booking for one of the owner's vehicles.

        The vehicle must belong to ``owner_id`` and ``provider_id`` must be a
        PROVIDER user. Both checks run before anything is written.
        """
        vehicle = await self.vehicles.get_by_id(data.vehicle_id)
        if vehicle is None or vehicle.owner_id != owner_id:
            raise VehicleNotFoundOrForbiddenError()

        provider = await self.users.get_by_id(data.provider_id)
        if provider is None or UserRole(provider.role) != UserRole.PROVIDER:
            raise InvalidProviderError()

        booking = await self.bookings.create(
            vehicle_id=vehicle.id,
            provider_id=provider.id,
            description=data.description,
            service_date=data.service_date,
        )
        BOOKINGS_CREATED.inc()
        logger.info(
            "booking_created",
            booking_id=str(booking.id),
            vehicle_id=str(vehicle.id),
            provider_id=str(provider.id),
        )
        return booking

    async def update_booking_status(
        self,
        booking_id: uuid.UUID,
        provider_id: uuid.UUID,
        new_status: BookingStatus,
    ) -> Booking:
        booking = await self.bookings.get_by_id(booking_id)
        if booking is None:
            raise NotFoundError("Booking")
        if booking.provider_id != provider_id:
            raise AuthorizationError("You can only update your own bookings")

        current = BookingStatus(booking.status)
        validate_transition(current, new_status)

        booking = await self.bookings.update_status(booking, new_status)
        BOOKING_STATUS_TRANSITIONS.labels(from_status=current.value, to_status=new_status.value).inc()
        logger.info(
            "booking_status_updated",
            booking_id=str(booking.id),
            from_status=current.value,
            to_status=new_status.value,
        )
        return booking

    async def get_owner_bookings(self, owner_id: uuid.UUID) -> list[BookingWithDetailsResponse]:
        bookings = await self.bookings.list_by_owner(owner_id)
        return [booking_with_details(b) for b in bookings]

    async def get_provider_bookings(self, provider_id: uuid.UUID) -> list[BookingWithDetailsResponse]:
        bookings = await self.bookings.list_by_provider(provider_id)
        return [booking_with_details(b) for b in bookings]
