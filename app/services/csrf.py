"""
Double-submit CSRF token.

The cookie carries a random value; the client receives "<value>.<hmac>" from
GET /auth/csrf-token and must echo it in a header on every state-changing request.
A header is accepted only when its HMAC checks out under CSRF_SECRET and its value
part equals the cookie.
"""

import hmac
import logging
import secrets
from typing import TYPE_CHECKING

from app.core.errors import CsrfTokenMismatch
from app.core.security import sign_value

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

CSRF_TOKEN_BYTES = 32
SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})


def _signature(value: str, settings: "Settings") -> str:
    return sign_value(value, settings.CSRF_SECRET.get_secret_value())


def issue_csrf_token(settings: "Settings") -> tuple[str, str]:
    """Return (cookie_value, header_token) for a new CSRF pair."""
    value = secrets.token_urlsafe(CSRF_TOKEN_BYTES)
    return value, f"{value}.{_signature(value, settings)}"


def validate_csrf(
    cookie_value: str | None,
    header_token: str | None,
    settings: "Settings",
) -> None:
    """Raise CsrfTokenMismatch unless header_token is a valid signed copy of cookie_value."""
    if not cookie_value or not header_token:
        raise CsrfTokenMismatch()
    value, sep, signature = header_token.rpartition(".")
    if not sep or not value:
        raise CsrfTokenMismatch()
    if not hmac.compare_digest(signature, _signature(value, settings)):
        raise CsrfTokenMismatch()
    if not hmac.compare_digest(value, cookie_value):
        raise CsrfTokenMismatch()


def requires_csrf(method: str) -> bool:
    return method.upper() not in SAFE_METHODS
