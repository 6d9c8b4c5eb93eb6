import asyncio
import hashlib
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import bcrypt as _bcrypt
import jwt

from app.config import settings
from app.models.enums import UserRole

# Bcrypt cost factor 12
_BCRYPT_ROUNDS = 12


@dataclass(frozen=True)
class AuthPayload:
    """Identity carried by a session token."""

    user_id: uuid.UUID
    email: str
    role: UserRole
    issued_at: datetime | None = None


def hash_password(password: str) -> str:
    """Hash a password using bcrypt. Synchronous, used in tests and fixtures."""
    salt = _bcrypt.gensalt(rounds=_BCRYPT_ROUNDS)
    return _bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


async def hash_password_async(password: str) -> str:
    """Async wrapper to avoid blocking the event loop (~300ms per call)."""
    return await asyncio.to_thread(hash_password, password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its bcrypt hash. Synchronous, used in tests and fixtures."""
    try:
        return _bcrypt.checkpw(
            plain_password.encode("utf-8"),
            hashed_password.encode("utf-8"),
        )
    except (ValueError, TypeError):
        return False


async def verify_password_async(plain_password: str, hashed_password: str) -> bool:
    return await asyncio.to_thread(verify_password, plain_password, hashed_password)


def create_access_token(user_id: uuid.UUID | str, email: str, role: UserRole) -> str:
    now = datetime.now(timezone.utc)
    expire = now + timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {
        "sub": str(user_id),
        "email": email,
        "role": UserRole(role).value,
        "exp": expire,
        "iat": now,
        "iss": settings.JWT_ISSUER,
        "type": "access",
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> AuthPayload | None:
    """Decode a session token, or return None if it is invalid, expired or not an access token."""
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            issuer=settings.JWT_ISSUER,
            options={"verify_iss": True},
        )
    except jwt.PyJWTError:
        return None

    if payload.get("type") != "access":
        return None
    try:
        user_id = uuid.UUID(payload["sub"])
        role = UserRole(payload["role"])
        email = payload["email"]
    except (KeyError, ValueError, TypeError):
        return None

    iat = payload.get("iat")
    issued_at = datetime.fromtimestamp(iat, tz=timezone.utc) if iat else None
    return AuthPayload(user_id=user_id, email=email, role=role, issued_at=issued_at)


def generate_reset_token() -> str:
    """Random URL-safe token handed to the user; only its hash is persisted."""
    return secrets.token_urlsafe(32)


def hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
