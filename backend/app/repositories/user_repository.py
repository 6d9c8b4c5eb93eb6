"""User repository for database operations."""

import uuid
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import UserRole
from app.models.user import User


class UserRepository:
    """Repository for User database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, user_id: uuid.UUID) -> User | None:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> User | None:
        result = await self.db.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    async def get_by_reset_token_hash(self, token_hash: str, now: datetime) -> User | None:
        """Find the user owning an unexpired reset token hash."""
        result = await self.db.execute(
            select(User).where(
                User.reset_token_hash == token_hash,
                User.reset_token_expires_at.is_not(None),
                User.reset_token_expires_at > now,
            )
        )
        return result.scalar_one_or_none()

    async def create(
        self,
        *,
        email: str,
        password_hash: str,
        name: str,
        role: UserRole,
        phone: str | None = None,
        district: str | None = None,
        city: str | None = None,
    ) -> User:
        user = User(
            email=email.lower(),
            password_hash=password_hash,
            name=name,
            role=role,
            phone=phone,
            district=district,
            city=city,
        )
        self.db.add(user)
        await self.db.flush()
        await self.db.refresh(user)
        return user

    async def set_reset_token(self, user: User, token_hash: str, expires_at: datetime) -> None:
        user.reset_token_hash = token_hash
        user.reset_token_expires_at = expires_at
        await self.db.flush()

    async def update_password(self, user: User, password_hash: str, changed_at: datetime) -> None:
        """Store a new password hash and clear any pending reset token."""
        user.password_hash = password_hash
        user.password_changed_at = changed_at
        user.reset_token_hash = None
        user.reset_token_expires_at = None
        await self.db.flush()
