"""Transactional email via the Resend API.

Without RESEND_API_KEY (development) sending is skipped with a warning and the
caller falls back to returning the token in the response.
"""

from html import escape

import httpx
import structlog

from app.config import settings
from app.utils.log_mask import mask_email

logger = structlog.get_logger()

RESEND_API_URL = "https://api.resend.com/emails"

_email_client: httpx.AsyncClient | None = None


def _get_email_client() -> httpx.AsyncClient:
    global _email_client
    if _email_client is None or _email_client.is_closed:
        _email_client = httpx.AsyncClient(
            timeout=httpx.Timeout(connect=5.0, read=10.0, write=5.0, pool=5.0),
        )
    return _email_client


async def close_email_client() -> None:
    global _email_client
    if _email_client is not None and not _email_client.is_closed:
        await _email_client.aclose()
    _email_client = None


async def send_password_reset_email(to_email: str, reset_token: str) -> bool:
    """Send the password reset link. Returns True only when Resend accepted it."""
    if not settings.RESEND_API_KEY:
        logger.warning(
            "resend_api_key_not_set",
            msg="RESEND_API_KEY not configured, skipping email send (dev mode)",
            email=mask_email(to_email),
        )
        return False

    reset_link = escape(f"{settings.FRONTEND_URL}/reset-password?token={reset_token}")
    expires_minutes = settings.PASSWORD_RESET_TOKEN_EXPIRE_MINUTES

    payload = {
        "from": settings.EMAIL_FROM,
        "to": [to_email],
        "subject": "Reset your password",
        "html": (
            "<h2>Password reset</h2>"
            "<p>We received a request to reset the password of your account.</p>"
            f'<p><a href="{reset_link}">Choose a new password</a></p>'
            f"<p>This link expires in {expires_minutes} minutes.</p>"
            "<p>If you did not ask for this, you can ignore this email.</p>"
        ),
    }

    try:
        response = await _get_email_client().post(
            RESEND_API_URL,
            json=payload,
            headers={
                "Authorization": f"Bearer {settings.RESEND_API_KEY}",
                "Content-Type": "application/json",
            },
        )
    except httpx.HTTPError as exc:
        logger.error("password_reset_email_error", email=mask_email(to_email), error=str(exc))
        return False

    if response.is_success:
        logger.info("password_reset_email_sent", email=mask_email(to_email))
        return True
    logger.error(
        "password_reset_email_failed",
        email=mask_email(to_email),
        status_code=response.status_code,
    )
    return False
