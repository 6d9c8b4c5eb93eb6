import uuid

from fastapi import APIRouter, Depends, Request, status

from app.dependencies import get_booking_service, get_current_owner, get_current_provider
from app.models.user import User
from app.schemas.booking import (
    BookingCreateRequest,
    BookingResponse,
    BookingStatusUpdateRequest,
    BookingWithDetailsResponse,
)
from app.services.booking_service import BookingService
from app.utils.rate_limit import LIST_RATE_LIMIT, limiter

router = APIRouter()


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("10/minute")
async def create_booking(
    request: Request,
    body: BookingCreateRequest,
    owner: User = Depends(get_current_owner),
    service: BookingService = Depends(get_booking_service),
):
    """Book a service for one of the caller's vehicles. Starts as PENDING."""
    return await service.create_booking(owner.id, body)


@router.get("/owner", response_model=list[BookingWithDetailsResponse])
@limiter.limit(LIST_RATE_LIMIT)
async def list_owner_bookings(
    request: Request,
    owner: User = Depends(get_current_owner),
    service: BookingService = Depends(get_booking_service),
):
    return await service.get_owner_bookings(owner.id)


@router.get("/provider", response_model=list[BookingWithDetailsResponse])
@limiter.limit(LIST_RATE_LIMIT)
async def list_provider_bookings(
    request: Request,
    provider: User = Depends(get_current_provider),
    service: BookingService = Depends(get_booking_service),
):
    return await service.get_provider_bookings(provider.id)


@router.patch("/{booking_id}/status", response_model=BookingResponse)
@limiter.limit("30/minute")
async def update_booking_status(
    request: Request,
    booking_id: uuid.UUID,
    body: BookingStatusUpdateRequest,
    provider: User = Depends(get_current_provider),
    service: BookingService = Depends(get_booking_service),
):
    """Move a booking along its lifecycle. Only the assigned provider may do this."""
    return await service.update_booking_status(booking_id, provider.id, body.status)
