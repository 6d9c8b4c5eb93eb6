"""Application exceptions.

Every error the services raise is an ``AppException``; ``app.main`` renders
them as ``{"error": detail}`` with the exception's status code.
"""

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base application exception."""

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "An unexpected error occurred",
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class ValidationError(AppException):
    def __init__(self, detail: str = "Validation failed") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class InvalidProviderError(ValidationError):
    def __init__(self, detail: str = "Invalid provider or user is not a provider") -> None:
        super().__init__(detail=detail)


class BookingNotCompletedError(ValidationError):
    def __init__(self, detail: str = "Invoice can only be created for completed bookings") -> None:
        super().__init__(detail=detail)


class InvalidOrExpiredTokenError(ValidationError):
    def __init__(self, detail: str = "Invalid or expired reset token") -> None:
        super().__init__(detail=detail)


class InvalidTransitionError(AppException):
    """Illegal booking status change."""

    def __init__(self, current: str, target: str) -> None:
        self.current = current
        self.target = target
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid status transition: {current} -> {target}",
        )


class AuthenticationError(AppException):
    def __init__(self, detail: str = "Authentication failed") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(AppException):
    def __init__(self, detail: str = "You don't have permission to access this resource") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFoundError(AppException):
    def __init__(self, resource: str = "Resource", detail: str | None = None) -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail or f"{resource} not found")


class VehicleNotFoundOrForbiddenError(NotFoundError):
    """Raised for both a missing vehicle and someone else's vehicle, so the two are indistinguishable."""

    def __init__(self) -> None:
        super().__init__(detail="Vehicle not found or not owned by you")


class ConflictError(AppException):
    def __init__(self, detail: str = "Conflict with the current state of the resource") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class DuplicateEmailError(ConflictError):
    def __init__(self) -> None:
        super().__init__(detail="User with this email already exists")


class DuplicateInvoiceError(ConflictError):
    def __init__(self) -> None:
        super().__init__(detail="Invoice already exists for this booking")


class TooManyAttemptsError(AppException):
    def __init__(self, detail: str = "Too many failed login attempts. Please try again later.") -> None:
        super().__init__(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=detail)
