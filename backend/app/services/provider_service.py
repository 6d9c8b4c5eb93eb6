"""Provider business profile and service menu management."""

import uuid

import structlog

from app.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.models.provider_profile import ProviderProfile
from app.models.provider_service import ProviderService
from app.repositories.provider_repository import ProviderRepository
from app.schemas.provider import (
    ProviderDetailsResponse,
    ProviderProfileResponse,
    ProviderProfileUpdateRequest,
    ProviderServiceResponse,
    ServiceItemCreateRequest,
)

logger = structlog.get_logger()


def _details(profile: ProviderProfile) -> ProviderDetailsResponse:
    return ProviderDetailsResponse(
        profile=ProviderProfileResponse.model_validate(profile),
        services=[ProviderServiceResponse.model_validate(s) for s in profile.services],
    )


class ProviderProfileService:
    def __init__(self, providers: ProviderRepository):
        self.providers = providers

    async def update_profile(self, user_id: uuid.UUID, data: ProviderProfileUpdateRequest) -> ProviderProfile:
        """Create or update the caller's business profile with the fields provided."""
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if not changes:
            raise ValidationError("At least one profile field must be provided")

        profile = await self.providers.get_by_user_id(user_id)
        if profile is not None:
            profile = await self.providers.update_profile(profile, changes)
            logger.info("provider_profile_updated", user_id=str(user_id), fields=sorted(changes))
            return profile

        if "business_name" not in changes or "category" not in changes:
            raise ValidationError("business_name and category are required to create a profile")
        profile = await self.providers.create_profile(user_id=user_id, **changes)
        logger.info("provider_profile_created", user_id=str(user_id), profile_id=str(profile.id))
        return profile

    async def add_service_to_menu(self, user_id: uuid.UUID, data: ServiceItemCreateRequest) -> ProviderService:
        profile = await self.providers.get_by_user_id(user_id)
        if profile is None:
            raise NotFoundError("Provider profile")
        if data.price < 0:
            raise ValidationError("Price must not be negative")

        service = await self.providers.add_service_item(
            profile.id,
            name=data.name.strip(),
            price=data.price,
            description=data.description,
        )
        logger.info("provider_service_added", profile_id=str(profile.id), service_id=str(service.id))
        return service

    async def remove_service_from_menu(self, user_id: uuid.UUID, service_id: uuid.UUID) -> None:
        service = await self.providers.get_service_item(service_id)
        if service is None:
            raise NotFoundError("Service")
        profile = await self.providers.get_by_user_id(user_id)
        if profile is None or service.profile_id != profile.id:
            raise AuthorizationError("You can only remove services from your own menu")

        await self.providers.remove_service_item(service)
        logger.info("provider_service_removed", profile_id=str(profile.id), service_id=str(service_id))

    async def get_provider_details(self, user_id: uuid.UUID) -> ProviderDetailsResponse:
        profile = await self.providers.get_by_user_id(user_id, with_services=True)
        if profile is None:
            raise NotFoundError("Provider profile")
        return _details(profile)

    async def get_provider_details_by_id(self, profile_id: uuid.UUID) -> ProviderDetailsResponse:
        profile = await self.providers.get_by_id(profile_id, with_services=True)
        if profile is None:
            raise NotFoundError("Provider profile")
        return _details(profile)
