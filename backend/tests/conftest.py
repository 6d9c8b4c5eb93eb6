import os
import uuid
from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone
from decimal import Decimal

os.environ.setdefault("JWT_SECRET", "test-secret-for-unit-tests-minimum-32-chars")
os.environ["RESEND_API_KEY"] = ""  # Never send real email from tests

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.auth import lockout
from app.auth.service import create_access_token, hash_password
from app.database import Base, get_db
from app.main import app
from app.models.booking import Booking
from app.models.enums import BookingStatus, ServiceCategory, UserRole
from app.models.provider_profile import ProviderProfile
from app.models.user import User
from app.models.vehicle import Vehicle

# Use SQLite for tests (in-memory)
TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

engine = create_async_engine(TEST_DB_URL, echo=False)
test_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

TEST_PASSWORD = "Password123"


@pytest_asyncio.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with test_session() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    # Reset rate limiter storage between tests to avoid 429 errors
    from app.utils.rate_limit import limiter
    limiter.reset()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def local_login_lockout(monkeypatch):
    """Keep the lockout counters in process memory and start every test clean."""

    async def _no_redis():
        return None

    monkeypatch.setattr(lockout, "_get_redis_client", _no_redis)
    lockout.reset_local_attempts()
    yield
    lockout.reset_local_attempts()


async def _make_user(db: AsyncSession, email: str, role: UserRole, name: str) -> User:
    user = User(
        id=uuid.uuid4(),
        email=email,
        password_hash=hash_password(TEST_PASSWORD),
        name=name,
        role=role,
        phone="+94771234567",
        district="Colombo",
        city="Colombo",
    )
    db.add(user)
    await db.flush()
    return user


@pytest_asyncio.fixture
async def owner_user(db: AsyncSession) -> User:
    return await _make_user(db, "owner@test.com", UserRole.OWNER, "Owner One")


@pytest_asyncio.fixture
async def other_owner(db: AsyncSession) -> User:
    return await _make_user(db, "other-owner@test.com", UserRole.OWNER, "Owner Two")


@pytest_asyncio.fixture
async def provider_user(db: AsyncSession) -> User:
    return await _make_user(db, "provider@test.com", UserRole.PROVIDER, "Provider One")


@pytest_asyncio.fixture
async def other_provider(db: AsyncSession) -> User:
    return await _make_user(db, "other-provider@test.com", UserRole.PROVIDER, "Provider Two")


@pytest_asyncio.fixture
async def provider_profile(db: AsyncSession, provider_user: User) -> ProviderProfile:
    profile = ProviderProfile(
        id=uuid.uuid4(),
        user_id=provider_user.id,
        business_name="Colombo Auto Works",
        category=ServiceCategory.GARAGE,
        street_address="1 Galle Road",
        district="Colombo",
        city="Colombo",
    )
    db.add(profile)
    await db.flush()
    return profile


@pytest_asyncio.fixture
async def vehicle(db: AsyncSession, owner_user: User) -> Vehicle:
    v = Vehicle(
        id=uuid.uuid4(),
        owner_id=owner_user.id,
        make="Toyota",
        model="Axio",
        year=2016,
        license_plate="CAB-1234",
    )
    db.add(v)
    await db.flush()
    return v


async def make_booking(
    db: AsyncSession,
    vehicle: Vehicle,
    provider: User,
    status: BookingStatus = BookingStatus.PENDING,
) -> Booking:
    booking = Booking(
        id=uuid.uuid4(),
        vehicle_id=vehicle.id,
        provider_id=provider.id,
        description="Full service",
        service_date=datetime.now(timezone.utc) + timedelta(days=3),
        status=status,
    )
    db.add(booking)
    await db.flush()
    return booking


@pytest_asyncio.fixture
async def booking(db: AsyncSession, vehicle: Vehicle, provider_user: User, provider_profile: ProviderProfile) -> Booking:
    return await make_booking(db, vehicle, provider_user)


@pytest_asyncio.fixture
async def completed_booking(
    db: AsyncSession, vehicle: Vehicle, provider_user: User, provider_profile: ProviderProfile
) -> Booking:
    return await make_booking(db, vehicle, provider_user, BookingStatus.COMPLETED)


def token_for(user: User) -> str:
    return create_access_token(user.id, user.email, UserRole(user.role))


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def auth_for(user: User) -> dict[str, str]:
    return auth_header(token_for(user))


INVOICE_ITEMS = [
    {"name": "Engine oil", "price": 50, "quantity": 2},
    {"name": "Labour", "price": 10, "quantity": 1},
]
INVOICE_TOTAL = Decimal("110")
