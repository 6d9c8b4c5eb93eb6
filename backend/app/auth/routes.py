import structlog
from fastapi import APIRouter, Depends, Request, Response, status

from app.config import settings
from app.dependencies import get_account_service, get_current_user
from app.models.user import User
from app.schemas.auth import (
    AuthResponse,
    BusinessRegisterRequest,
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    ResetPasswordRequest,
    UserResponse,
)
from app.services.account_service import AccountService, AuthResult
from app.services.email_service import send_password_reset_email
from app.utils.rate_limit import AUTH_RATE_LIMIT, limiter

logger = structlog.get_logger()
router = APIRouter()


def _auth_response(result: AuthResult) -> AuthResponse:
    return AuthResponse(token=result.token, user=UserResponse.model_validate(result.user))


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(AUTH_RATE_LIMIT)
async def register(
    request: Request,
    response: Response,
    body: RegisterRequest,
    service: AccountService = Depends(get_account_service),
):
    """Register a vehicle owner account."""
    # Token responses must not be cached by proxies
    response.headers["Cache-Control"] = "no-store"
    return _auth_response(await service.register(body))


@router.post("/register-business", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(AUTH_RATE_LIMIT)
async def register_business(
    request: Request,
    response: Response,
    body: BusinessRegisterRequest,
    service: AccountService = Depends(get_account_service),
):
    """Register a service provider together with its business profile."""
    response.headers["Cache-Control"] = "no-store"
    return _auth_response(await service.register_business(body))


@router.post("/login", response_model=AuthResponse)
@limiter.limit(AUTH_RATE_LIMIT)
async def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    service: AccountService = Depends(get_account_service),
):
    response.headers["Cache-Control"] = "no-store"
    return _auth_response(await service.login(body))


@router.get("/me", response_model=UserResponse)
async def get_me(user: User = Depends(get_current_user)):
    return user


@router.post("/forgot-password", response_model=ForgotPasswordResponse)
@limiter.limit(AUTH_RATE_LIMIT)
async def forgot_password(
    request: Request,
    body: ForgotPasswordRequest,
    service: AccountService = Depends(get_account_service),
):
    """Request a password reset. The response is identical whether or not the email is registered.

    In production the token is only delivered by email. Elsewhere it is also
    returned in the body so the flow can be exercised without a mail provider.
    """
    result = await service.forgot_password(body.email)
    if result.reset_token is None:
        return ForgotPasswordResponse(message=result.message)

    await send_password_reset_email(result.email, result.reset_token)
    if settings.is_production:
        return ForgotPasswordResponse(message=result.message)
    return ForgotPasswordResponse(message=result.message, reset_token=result.reset_token)


@router.post("/reset-password", response_model=MessageResponse)
@limiter.limit(AUTH_RATE_LIMIT)
async def reset_password(
    request: Request,
    body: ResetPasswordRequest,
    service: AccountService = Depends(get_account_service),
):
    await service.reset_password(body.token, body.new_password)
    return MessageResponse(message="Password reset successfully")
