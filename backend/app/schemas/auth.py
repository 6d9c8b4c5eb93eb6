import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.models.enums import ServiceCategory, UserRole

_PHONE_PATTERN = r"^\+?[0-9]{10,15}$"


def validate_password_complexity(password: str) -> str:
    """Validate password contains at least one uppercase, one lowercase, and one digit."""
    if not any(c.isupper() for c in password) or not any(c.islower() for c in password) or not any(c.isdigit() for c in password):
        raise ValueError("Password must contain at least one uppercase letter, one lowercase letter and one digit")
    return password


def _strip_required(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("must not be blank")
    return v


class RegisterRequest(BaseModel):
    """Customer signup. ``role`` is accepted for client compatibility but must be OWNER."""

    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    name: str = Field(min_length=2, max_length=100)
    role: UserRole = UserRole.OWNER
    phone: str | None = Field(None, pattern=_PHONE_PATTERN)
    district: str | None = Field(None, max_length=100)
    city: str | None = Field(None, max_length=100)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _strip_required(v)

    @field_validator("password")
    @classmethod
    def password_complexity(cls, v: str) -> str:
        return validate_password_complexity(v)


class BusinessRegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    name: str = Field(min_length=2, max_length=100)
    phone: str | None = Field(None, pattern=_PHONE_PATTERN)
    district: str | None = Field(None, max_length=100)
    city: str | None = Field(None, max_length=100)
    business_name: str = Field(min_length=2, max_length=150)
    category: ServiceCategory
    street_address: str | None = Field(None, max_length=255)
    business_description: str | None = Field(None, max_length=2000)
    registration_number: str | None = Field(None, max_length=50)

    @field_validator("name", "business_name")
    @classmethod
    def validate_required_text(cls, v: str) -> str:
        return _strip_required(v)

    @field_validator("password")
    @classmethod
    def password_complexity(cls, v: str) -> str:
        return validate_password_complexity(v)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class UserResponse(BaseModel):
    """Safe user projection: never carries the password hash or reset fields."""

    id: uuid.UUID
    email: str
    name: str
    role: UserRole
    phone: str | None = None
    district: str | None = None
    city: str | None = None
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class AuthResponse(BaseModel):
    token: str
    user: UserResponse


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ForgotPasswordResponse(BaseModel):
    message: str
    # Only populated outside production; in production the token is emailed.
    reset_token: str | None = None


class ResetPasswordRequest(BaseModel):
    token: str = Field(min_length=1, max_length=256)
    new_password: str = Field(min_length=8, max_length=128)

    @field_validator("new_password")
    @classmethod
    def password_complexity(cls, v: str) -> str:
        return validate_password_complexity(v)


class MessageResponse(BaseModel):
    message: str
