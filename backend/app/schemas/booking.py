import uuid
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from app.models.enums import BookingStatus


class BookingCreateRequest(BaseModel):
    vehicle_id: uuid.UUID
    provider_id: uuid.UUID
    description: str = Field(min_length=1, max_length=2000)
    service_date: datetime

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class BookingStatusUpdateRequest(BaseModel):
    status: BookingStatus


class BookingResponse(BaseModel):
    id: uuid.UUID
    vehicle_id: uuid.UUID
    provider_id: uuid.UUID
    description: str
    service_date: datetime
    status: BookingStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class BookingVehicleSummary(BaseModel):
    make: str
    model: str
    license_plate: str
    owner_name: str | None = None


class BookingProviderSummary(BaseModel):
    name: str
    email: str


class BookingWithDetailsResponse(BookingResponse):
    vehicle: BookingVehicleSummary | None = None
    provider: BookingProviderSummary | None = None
