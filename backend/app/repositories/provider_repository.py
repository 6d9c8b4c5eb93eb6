"""Provider profile and service menu repository."""

import uuid
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.enums import ServiceCategory
from app.models.provider_profile import ProviderProfile
from app.models.provider_service import ProviderService


class ProviderRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_profile(
        self,
        *,
        user_id: uuid.UUID,
        business_name: str,
        category: ServiceCategory,
        street_address: str | None = None,
        district: str | None = None,
        city: str | None = None,
        business_description: str | None = None,
        registration_number: str | None = None,
    ) -> ProviderProfile:
        profile = ProviderProfile(
            user_id=user_id,
            business_name=business_name,
            category=category,
            street_address=street_address or "",
            district=district or "",
            city=city or "",
            business_description=business_description,
            registration_number=registration_number,
        )
        self.db.add(profile)
        await self.db.flush()
        await self.db.refresh(profile)
        return profile

    async def get_by_user_id(self, user_id: uuid.UUID, *, with_services: bool = False) -> ProviderProfile | None:
        query = select(ProviderProfile).where(ProviderProfile.user_id == user_id)
        if with_services:
            query = query.options(selectinload(ProviderProfile.services)).execution_options(
                populate_existing=True
            )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_by_id(self, profile_id: uuid.UUID, *, with_services: bool = False) -> ProviderProfile | None:
        query = select(ProviderProfile).where(ProviderProfile.id == profile_id)
        if with_services:
            query = query.options(selectinload(ProviderProfile.services)).execution_options(
                populate_existing=True
            )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def update_profile(self, profile: ProviderProfile, changes: dict) -> ProviderProfile:
        for field, value in changes.items():
            setattr(profile, field, value)
        await self.db.flush()
        await self.db.refresh(profile)
        return profile

    async def add_service_item(
        self,
        profile_id: uuid.UUID,
        *,
        name: str,
        price: Decimal,
        description: str | None = None,
    ) -> ProviderService:
        service = ProviderService(
            profile_id=profile_id,
            name=name,
            price=price,
            description=description,
        )
        self.db.add(service)
        await self.db.flush()
        await self.db.refresh(service)
        return service

    async def get_service_item(self, service_id: uuid.UUID) -> ProviderService | None:
        result = await self.db.execute(
            select(ProviderService).where(ProviderService.id == service_id)
        )
        return result.scalar_one_or_none()

    async def remove_service_item(self, service: ProviderService) -> None:
        await self.db.delete(service)
        await self.db.flush()
