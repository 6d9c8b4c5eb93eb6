import uuid
from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class VehicleCreateRequest(BaseModel):
    make: str = Field(min_length=1, max_length=100)
    model: str = Field(min_length=1, max_length=100)
    year: int = Field(ge=1900)
    license_plate: str = Field(min_length=1, max_length=20)

    @field_validator("year")
    @classmethod
    def validate_year(cls, v: int) -> int:
        max_year = datetime.now().year + 1
        if v > max_year:
            raise ValueError(f"year must be at most {max_year}")
        return v

    @field_validator("make", "model")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("license_plate")
    @classmethod
    def normalize_plate(cls, v: str) -> str:
        v = " ".join(v.split()).upper()
        if not v:
            raise ValueError("must not be blank")
        return v


class VehicleResponse(BaseModel):
    id: uuid.UUID
    owner_id: uuid.UUID
    make: str
    model: str
    year: int
    license_plate: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}
