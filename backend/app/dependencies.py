from datetime import timezone

import structlog
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.service import decode_access_token
from app.database import get_db
from app.exceptions import AuthenticationError, AuthorizationError
from app.models.enums import UserRole
from app.models.user import User
from app.repositories.booking_repository import BookingRepository
from app.repositories.invoice_repository import InvoiceRepository
from app.repositories.provider_repository import ProviderRepository
from app.repositories.user_repository import UserRepository
from app.repositories.vehicle_repository import VehicleRepository
from app.services.account_service import AccountService
from app.services.booking_service import BookingService
from app.services.invoice_service import InvoiceService
from app.services.provider_service import ProviderProfileService
from app.services.vehicle_service import VehicleService

logger = structlog.get_logger()
# auto_error=False so a missing header is reported as 401 in our error format
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the bearer token to a user, or raise AuthenticationError."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Authentication required")

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise AuthenticationError("Invalid authentication token")

    user = await UserRepository(db).get_by_id(payload.user_id)
    if user is None:
        raise AuthenticationError("User not found")

    # Tokens issued before the last password change are revoked.
    # iat has second precision, so compare at that precision.
    if user.password_changed_at and payload.issued_at:
        changed_at = user.password_changed_at
        if changed_at.tzinfo is None:
            changed_at = changed_at.replace(tzinfo=timezone.utc)
        if payload.issued_at < changed_at.replace(microsecond=0):
            logger.info("token_invalidated_by_password_change", user_id=str(user.id))
            raise AuthenticationError("Token invalidated by password change")

    return user


async def get_current_owner(user: User = Depends(get_current_user)) -> User:
    if UserRole(user.role) != UserRole.OWNER:
        raise AuthorizationError("Only vehicle owners can access this resource")
    return user


async def get_current_provider(user: User = Depends(get_current_user)) -> User:
    if UserRole(user.role) != UserRole.PROVIDER:
        raise AuthorizationError("Only service providers can access this resource")
    return user


def get_account_service(db: AsyncSession = Depends(get_db)) -> AccountService:
    return AccountService(db, UserRepository(db), ProviderRepository(db))


def get_booking_service(db: AsyncSession = Depends(get_db)) -> BookingService:
    return BookingService(BookingRepository(db), VehicleRepository(db), UserRepository(db))


def get_invoice_service(db: AsyncSession = Depends(get_db)) -> InvoiceService:
    return InvoiceService(InvoiceRepository(db), BookingRepository(db))


def get_provider_service(db: AsyncSession = Depends(get_db)) -> ProviderProfileService:
    return ProviderProfileService(ProviderRepository(db))


def get_vehicle_service(db: AsyncSession = Depends(get_db)) -> VehicleService:
    return VehicleService(VehicleRepository(db))
