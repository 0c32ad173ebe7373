"""Resolve a request's identity token (Bearer header or cookie) to a principal, and role checks."""

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from app.core.errors import AuthenticationError
from app.core.security import decode_access_token
from app.models.user import User
from app.schemas.auth import CurrentUser

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

# Cookie/header values a client sends after logout; they mean "no token".
SENTINEL_TOKENS = frozenset({"none", "null", "undefined", ""})


def _usable(token: str | None) -> str | None:
    if token is None:
        return None
    token = token.strip()
    if token.lower() in SENTINEL_TOKENS:
        return None
    return token


def select_token(bearer_token: str | None, cookie_token: str | None) -> str | None:
    """Pick the token to verify: the Bearer header wins over the cookie; sentinels count as absent."""
    return _usable(bearer_token) or _usable(cookie_token)


def resolve(
    db: Session,
    settings: "Settings",
    bearer_token: str | None,
    cookie_token: str | None,
) -> CurrentUser:
    """
    Return the principal for the presented token.

    The role is re-read from the database; the token only names the user.
    Raises AuthenticationError with the same message for every failure.
    """
    token = select_token(bearer_token, cookie_token)
    if token is None:
        raise AuthenticationError()
    try:
        user_id = decode_access_token(token, settings)
    except AuthenticationError as e:
        logger.warning("Rejected identity token: %s", type(e).__name__)
        raise AuthenticationError() from e
    user = db.get(User, user_id)
    if user is None:
        logger.warning("Identity token for unknown user id=%s", user_id)
        raise AuthenticationError()
    return CurrentUser(id=user.id, name=user.name, email=user.email, role=user.role)


def authorize(principal: CurrentUser, allowed_roles: Iterable[str]) -> bool:
    """True when the principal's role is in allowed_roles."""
    return principal.role in set(allowed_roles)
