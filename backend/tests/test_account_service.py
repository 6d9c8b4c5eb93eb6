"""Service-level tests for account provisioning."""

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import (
    AuthenticationError,
    DuplicateEmailError,
    InvalidOrExpiredTokenError,
    TooManyAttemptsError,
    ValidationError,
)
from app.models.enums import ServiceCategory, UserRole
from app.models.provider_profile import ProviderProfile
from app.models.user import User
from app.repositories.provider_repository import ProviderRepository
from app.repositories.user_repository import UserRepository
from app.schemas.auth import BusinessRegisterRequest, LoginRequest, RegisterRequest
from app.services.account_service import FORGOT_PASSWORD_MESSAGE, AccountService
from tests.conftest import TEST_PASSWORD


def _service(db: AsyncSession) -> AccountService:
    return AccountService(db, UserRepository(db), ProviderRepository(db))


def _business(email: str = "biz@test.com") -> BusinessRegisterRequest:
    return BusinessRegisterRequest(
        email=email,
        password="Secret1234",
        name="Biz Owner",
        business_name="Shine Detailing",
        category=ServiceCategory.DETAILER,
        district="Kandy",
        city="Kandy",
    )


@pytest.mark.asyncio
async def test_register_business_is_atomic(db: AsyncSession):
    """A failing profile insert must leave no orphaned PROVIDER user behind."""
    service = _service(db)

    with patch.object(
        ProviderRepository,
        "create_profile",
        AsyncMock(side_effect=RuntimeError("profile insert failed")),
    ):
        with pytest.raises(RuntimeError):
            await service.register_business(_business())

    assert await UserRepository(db).get_by_email("biz@test.com") is None
    users = (await db.execute(select(func.count()).select_from(User))).scalar_one()
    profiles = (await db.execute(select(func.count()).select_from(ProviderProfile))).scalar_one()
    assert users == 0
    assert profiles == 0


@pytest.mark.asyncio
async def test_register_business_profile_conflict_is_not_duplicate_email(db: AsyncSession):
    """A constraint failure on the profile row must surface as itself, not as a taken email."""
    service = _service(db)
    profile_conflict = IntegrityError("INSERT INTO provider_profiles", {}, Exception("UNIQUE constraint failed"))

    with patch.object(ProviderRepository, "create_profile", AsyncMock(side_effect=profile_conflict)):
        with pytest.raises(IntegrityError):
            await service.register_business(_business())

    users = (await db.execute(select(func.count()).select_from(User))).scalar_one()
    assert users == 0


@pytest.mark.asyncio
async def test_register_business_success(db: AsyncSession):
    result = await _service(db).register_business(_business())

    assert UserRole(result.user.role) == UserRole.PROVIDER
    profile = await ProviderRepository(db).get_by_user_id(result.user.id)
    assert profile is not None
    assert profile.business_name == "Shine Detailing"
    assert profile.district == "Kandy"
    assert result.token


@pytest.mark.asyncio
async def test_register_business_duplicate(db: AsyncSession, owner_user: User):
    with pytest.raises(DuplicateEmailError):
        await _service(db).register_business(_business(owner_user.email))


@pytest.mark.asyncio
async def test_register_forces_owner(db: AsyncSession):
    result = await _service(db).register(
        RegisterRequest(email="someone@test.com", password="Secret1234", name="Some One")
    )
    assert UserRole(result.user.role) == UserRole.OWNER


@pytest.mark.asyncio
async def test_register_refuses_provider_role(db: AsyncSession):
    with pytest.raises(ValidationError):
        await _service(db).register(
            RegisterRequest(email="p@test.com", password="Secret1234", name="Pro", role=UserRole.PROVIDER)
        )
    assert await UserRepository(db).get_by_email("p@test.com") is None


@pytest.mark.asyncio
async def test_login_unknown_email_checks_dummy_hash(db: AsyncSession):
    with patch("app.services.account_service.verify_password_async", AsyncMock(return_value=False)) as verify:
        with pytest.raises(AuthenticationError):
            await _service(db).login(LoginRequest(email="ghost@test.com", password="whatever"))
    verify.assert_awaited_once()


@pytest.mark.asyncio
async def test_login_locked_out(db: AsyncSession, owner_user: User):
    with patch("app.services.account_service.is_locked_out", AsyncMock(return_value=True)):
        with pytest.raises(TooManyAttemptsError):
            await _service(db).login(LoginRequest(email=owner_user.email, password=TEST_PASSWORD))


@pytest.mark.asyncio
async def test_forgot_password_unknown_email_stores_nothing(db: AsyncSession, owner_user: User):
    result = await _service(db).forgot_password("ghost@test.com")

    assert result.message == FORGOT_PASSWORD_MESSAGE
    assert result.reset_token is None
    await db.refresh(owner_user)
    assert owner_user.reset_token_hash is None


@pytest.mark.asyncio
async def test_reset_password_with_wrong_token(db: AsyncSession, owner_user: User):
    service = _service(db)
    await service.forgot_password(owner_user.email)

    with pytest.raises(InvalidOrExpiredTokenError):
        await service.reset_password("not-the-token", "NewPass123")
