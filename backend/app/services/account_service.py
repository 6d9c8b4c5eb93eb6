"""Account provisioning: signup, business signup, login and password reset."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.lockout import clear_attempts, is_locked_out, record_failed_attempt
from app.auth.service import (
    create_access_token,
    generate_reset_token,
    hash_password_async,
    hash_reset_token,
    verify_password_async,
)
from app.config import settings
from app.exceptions import (
    AuthenticationError,
    DuplicateEmailError,
    InvalidOrExpiredTokenError,
    TooManyAttemptsError,
    ValidationError,
)
from app.metrics import LOGIN_FAILURES, PASSWORD_RESETS, USERS_REGISTERED
from app.models.enums import UserRole
from app.models.user import User
from app.repositories.provider_repository import ProviderRepository
from app.repositories.user_repository import UserRepository
from app.schemas.auth import BusinessRegisterRequest, LoginRequest, RegisterRequest
from app.utils.log_mask import mask_email

logger = structlog.get_logger()

# bcrypt hash of a random string; verified against on unknown emails so that
# login takes the same time whether or not the account exists.
_DUMMY_HASH = "$2b$12$LJ3m4ys3Lg2UxMHFSKDcOedTqJtFHSfVLO7GRFXlI0Xp9jHQvaFYe"

FORGOT_PASSWORD_MESSAGE = "If an account exists with this email, a password reset link has been sent"


@dataclass
class AuthResult:
    token: str
    user: User


@dataclass
class PasswordResetRequestResult:
    message: str
    # Raw token for the caller to deliver; None when the email is unknown.
    reset_token: str | None = None
    email: str | None = None


class AccountService:
    def __init__(self, db: AsyncSession, users: UserRepository, providers: ProviderRepository):
        self.db = db
        self.users = users
        self.providers = providers

    async def register(self, data: RegisterRequest) -> AuthResult:
        """Customer signup. Providers must go through ``register_business``."""
        if data.role != UserRole.OWNER:
            raise ValidationError("Service providers must register through /api/auth/register-business")
        if await self.users.get_by_email(data.email) is not None:
            raise DuplicateEmailError()

        password_hash = await hash_password_async(data.password)
        try:
            async with self.db.begin_nested():
                user = await self.users.create(
                    email=data.email,
                    password_hash=password_hash,
                    name=data.name,
                    role=UserRole.OWNER,
                    phone=data.phone,
                    district=data.district,
                    city=data.city,
                )
        except IntegrityError:
            # Email taken between the lookup and the insert
            logger.info("registration_race_condition", email=mask_email(data.email))
            raise DuplicateEmailError()

        USERS_REGISTERED.labels(role=UserRole.OWNER.value).inc()
        logger.info("user_registered", user_id=str(user.id), role=UserRole.OWNER.value)
        return AuthResult(token=create_access_token(user.id, user.email, UserRole.OWNER), user=user)

    async def register_business(self, data: BusinessRegisterRequest) -> AuthResult:
        """Create a PROVIDER user together with its business profile.

        Both rows are written inside one savepoint: if the profile cannot be
        created the user row is rolled back with it.
        """
        if await self.users.get_by_email(data.email) is not None:
            raise DuplicateEmailError()

        password_hash = await hash_password_async(data.password)
        async with self.db.begin_nested():
            try:
                user = await self.users.create(
                    email=data.email,
                    password_hash=password_hash,
                    name=data.name,
                    role=UserRole.PROVIDER,
                    phone=data.phone,
                    district=data.district,
                    city=data.city,
                )
            except IntegrityError:
                # Only the users.email constraint maps to a duplicate signup
                logger.info("registration_race_condition", email=mask_email(data.email))
                raise DuplicateEmailError()
            profile = await self.providers.create_profile(
                user_id=user.id,
                business_name=data.business_name,
                category=data.category,
                street_address=data.street_address,
                district=data.district,
                city=data.city,
                business_description=data.business_description,
                registration_number=data.registration_number,
            )

        USERS_REGISTERED.labels(role=UserRole.PROVIDER.value).inc()
        logger.info(
            "business_registered",
            user_id=str(user.id),
            profile_id=str(profile.id),
            category=profile.category,
        )
        return AuthResult(token=create_access_token(user.id, user.email, UserRole.PROVIDER), user=user)

    async def login(self, data: LoginRequest) -> AuthResult:
        if await is_locked_out(data.email):
            LOGIN_FAILURES.labels(reason="locked_out").inc()
            logger.warning("login_locked_out", email=mask_email(data.email))
            raise TooManyAttemptsError()

        user = await self.users.get_by_email(data.email)
        if user is None:
            await verify_password_async(data.password, _DUMMY_HASH)
            await record_failed_attempt(data.email)
            LOGIN_FAILURES.labels(reason="unknown_email").inc()
            raise AuthenticationError("Invalid email or password")
        if not await verify_password_async(data.password, user.password_hash):
            await record_failed_attempt(data.email)
            LOGIN_FAILURES.labels(reason="bad_password").inc()
            raise AuthenticationError("Invalid email or password")

        await clear_attempts(data.email)
        logger.info("user_login", user_id=str(user.id))
        role = UserRole(user.role)
        return AuthResult(token=create_access_token(user.id, user.email, role), user=user)

    async def forgot_password(self, email: str) -> PasswordResetRequestResult:
        """Issue a reset token for a known email.

        The response message never reveals whether the account exists; for an
        unknown email nothing is stored and no token is returned.
        """
        user = await self.users.get_by_email(email)
        if user is None:
            logger.info("password_reset_unknown_email", email=mask_email(email))
            return PasswordResetRequestResult(message=FORGOT_PASSWORD_MESSAGE)

        token = generate_reset_token()
        expires_at = datetime.now(timezone.utc) + timedelta(minutes=settings.PASSWORD_RESET_TOKEN_EXPIRE_MINUTES)
        await self.users.set_reset_token(user, hash_reset_token(token), expires_at)

        PASSWORD_RESETS.labels(stage="requested").inc()
        logger.info("password_reset_requested", user_id=str(user.id))
        return PasswordResetRequestResult(message=FORGOT_PASSWORD_MESSAGE, reset_token=token, email=user.email)

    async def reset_password(self, token: str, new_password: str) -> None:
        now = datetime.now(timezone.utc)
        user = await self.users.get_by_reset_token_hash(hash_reset_token(token), now)
        if user is None:
            raise InvalidOrExpiredTokenError()

        password_hash = await hash_password_async(new_password)
        await self.users.update_password(user, password_hash, changed_at=now)

        PASSWORD_RESETS.labels(stage="completed").inc()
        logger.info("password_reset_completed", user_id=str(user.id))
