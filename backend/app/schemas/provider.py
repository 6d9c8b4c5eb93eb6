import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from app.models.enums import ServiceCategory


class ProviderProfileUpdateRequest(BaseModel):
    business_name: str | None = Field(None, min_length=2, max_length=150)
    category: ServiceCategory | None = None
    street_address: str | None = Field(None, max_length=255)
    district: str | None = Field(None, max_length=100)
    city: str | None = Field(None, max_length=100)
    business_description: str | None = Field(None, max_length=2000)
    registration_number: str | None = Field(None, max_length=50)


class ServiceItemCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=150)
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    description: str | None = Field(None, max_length=1000)


class ProviderServiceResponse(BaseModel):
    id: uuid.UUID
    profile_id: uuid.UUID
    name: str
    price: Decimal
    description: str | None = None
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class ProviderProfileResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    business_name: str
    category: ServiceCategory
    street_address: str
    district: str
    city: str
    business_description: str | None = None
    registration_number: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class ProviderDetailsResponse(BaseModel):
    profile: ProviderProfileResponse
    services: list[ProviderServiceResponse]
