"""Outbound email through the Resend API (password reset links)."""

import html
import logging
from typing import TYPE_CHECKING, Any

import resend

from app.core.errors import DependencyError

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

RESET_SUBJECT = "Password reset token"


class MailNotConfiguredError(DependencyError):
    """Raised when mail is needed but RESEND_API_KEY is missing."""


def send_email(to: str, subject: str, html_body: str, settings: "Settings") -> dict[str, Any]:
    """
    Send one HTML email. Raises DependencyError when mail is not configured or
    the provider call fails; the detail is logged, not returned to callers.
    """
    if settings.RESEND_API_KEY is None:
        logger.error("Cannot send email: RESEND_API_KEY is not set")
        raise MailNotConfiguredError("Email could not be sent")
    resend.api_key = settings.RESEND_API_KEY.get_secret_value()
    params = {
        "from": settings.MAIL_FROM,
        "to": [to],
        "subject": subject,
        "html": html_body,
    }
    try:
        result = resend.Emails.send(params)
    except Exception as e:
        logger.exception("Resend API call failed for subject=%r: %s", subject, e)
        raise DependencyError("Email could not be sent") from e
    logger.info("Email sent: subject=%r id=%s", subject, (result or {}).get("id"))
    return result


def build_reset_url(plain_token: str, settings: "Settings") -> str:
    return f"{settings.FRONTEND_URL}/resetpassword/{plain_token}"


def reset_password_html(reset_url: str) -> str:
    safe_url = html.escape(reset_url, quote=True)
    return (
        "<p>You are receiving this email because you (or someone else) requested "
        "a password reset.</p>"
        f'<p><a href="{safe_url}">Reset your password</a></p>'
        "<p>This link expires in a few minutes. If you did not request it, ignore this email.</p>"
    )


def send_reset_email(to: str, plain_token: str, settings: "Settings") -> None:
    send_email(to, RESET_SUBJECT, reset_password_html(build_reset_url(plain_token, settings)), settings)
