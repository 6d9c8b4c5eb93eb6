import uuid

from fastapi import APIRouter, Depends, Request, Response, status

from app.dependencies import get_current_provider, get_provider_service
from app.models.user import User
from app.schemas.provider import (
    ProviderDetailsResponse,
    ProviderProfileResponse,
    ProviderProfileUpdateRequest,
    ProviderServiceResponse,
    ServiceItemCreateRequest,
)
from app.services.provider_service import ProviderProfileService
from app.utils.rate_limit import LIST_RATE_LIMIT, limiter

router = APIRouter()


@router.put("/profile", response_model=ProviderProfileResponse)
async def update_profile(
    body: ProviderProfileUpdateRequest,
    provider: User = Depends(get_current_provider),
    service: ProviderProfileService = Depends(get_provider_service),
):
    """Create or update the caller's business profile."""
    return await service.update_profile(provider.id, body)


@router.post("/services", response_model=ProviderServiceResponse, status_code=status.HTTP_201_CREATED)
async def add_service(
    body: ServiceItemCreateRequest,
    provider: User = Depends(get_current_provider),
    service: ProviderProfileService = Depends(get_provider_service),
):
    return await service.add_service_to_menu(provider.id, body)


@router.delete("/services/{service_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_service(
    service_id: uuid.UUID,
    provider: User = Depends(get_current_provider),
    service: ProviderProfileService = Depends(get_provider_service),
):
    await service.remove_service_from_menu(provider.id, service_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Must be registered before /{profile_id}
@router.get("/me", response_model=ProviderDetailsResponse)
async def get_my_details(
    provider: User = Depends(get_current_provider),
    service: ProviderProfileService = Depends(get_provider_service),
):
    return await service.get_provider_details(provider.id)


@router.get("/{profile_id}", response_model=ProviderDetailsResponse)
@limiter.limit(LIST_RATE_LIMIT)
async def get_provider_details(
    request: Request,
    profile_id: uuid.UUID,
    service: ProviderProfileService = Depends(get_provider_service),
):
    """Public provider page: business profile and service menu."""
    return await service.get_provider_details_by_id(profile_id)
