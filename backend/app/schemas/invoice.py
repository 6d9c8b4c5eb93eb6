import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from app.models.enums import InvoiceStatus


class InvoiceItem(BaseModel):
    """Immutable snapshot of one billed line: name, unit price and quantity at billing time.

    Stored exactly as submitted. In JSON the price is written as a number,
    so the persisted snapshot matches what the caller sent.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, max_length=150)
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    quantity: int = Field(ge=1, le=10000)

    @field_validator("name")
    @classmethod
    def reject_blank_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v

    @field_validator("price", mode="before")
    @classmethod
    def price_from_float(cls, v):
        if isinstance(v, float):
            return Decimal(str(v))
        return v

    @field_serializer("price", when_used="json")
    def serialize_price(self, v: Decimal) -> int | float:
        # At most two decimal places, so the float round-trips exactly
        return int(v) if v == v.to_integral_value() else float(v)

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


class InvoiceCreateRequest(BaseModel):
    booking_id: uuid.UUID
    items: tuple[InvoiceItem, ...] = Field(min_length=1, max_length=100)


class InvoiceResponse(BaseModel):
    id: uuid.UUID
    booking_id: uuid.UUID
    amount: Decimal
    status: InvoiceStatus
    items: tuple[InvoiceItem, ...]
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class InvoiceBookingSummary(BaseModel):
    service_date: datetime
    description: str
    provider_id: uuid.UUID


class InvoiceVehicleSummary(BaseModel):
    make: str
    model: str
    license_plate: str
    owner_id: uuid.UUID


class InvoiceProviderSummary(BaseModel):
    name: str
    business_name: str | None = None


class InvoiceWithDetailsResponse(InvoiceResponse):
    booking: InvoiceBookingSummary | None = None
    vehicle: InvoiceVehicleSummary | None = None
    provider: InvoiceProviderSummary | None = None
