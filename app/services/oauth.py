"""
Google OAuth login: state nonce handling, code exchange, and linking the provider
identity to a local account (find-or-create).
"""

from __future__ import annotations

import hmac
import logging
import secrets
from collections.abc import MutableMapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode

import httpx
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import DependencyError, OAuthCsrfMismatch, OAuthNotConfigured, UnverifiedEmail
from app.core.security import generate_password, hash_password
from app.models.user import ROLE_USER, User

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"
GOOGLE_SCOPE = "openid email profile"

# Session key holding the single-use state nonce.
OAUTH_STATE_SESSION_KEY = "oauth_state"

# Defaults for accounts created from a provider profile.
DEFAULT_DISPLAY_NAME = "Google User"
DEFAULT_TEL = "0000000000"


@dataclass(frozen=True)
class ProviderProfile:
    """Identity claim from the provider after a successful exchange."""

    id: str
    email: str | None
    email_verified: bool
    display_name: str | None = None


class OAuthProviderError(DependencyError):
    """The provider's token or userinfo endpoint failed or returned garbage."""


def issue_state(session: MutableMapping[str, Any]) -> str:
    """Store a fresh state nonce in the browser session and return it."""
    state = secrets.token_hex(32)
    session[OAUTH_STATE_SESSION_KEY] = state
    return state


def consume_state(session: MutableMapping[str, Any], presented: str | None) -> None:
    """
    Compare the presented state with the session's nonce, removing the nonce first.
    Raises OAuthCsrfMismatch when either is missing or they differ.
    """
    expected = session.pop(OAUTH_STATE_SESSION_KEY, None)
    if not expected or not presented or not hmac.compare_digest(str(expected), presented):
        logger.warning("OAuth state mismatch (expected_present=%s)", bool(expected))
        raise OAuthCsrfMismatch()


def authorization_url(state: str, settings: "Settings") -> str:
    if not settings.google_configured:
        raise OAuthNotConfigured()
    params = {
        "client_id": settings.GOOGLE_CLIENT_ID,
        "redirect_uri": settings.GOOGLE_CALLBACK_URL,
        "response_type": "code",
        "scope": GOOGLE_SCOPE,
        "state": state,
        "access_type": "offline",
        "prompt": "consent",
    }
    return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"


def exchange_profile(userinfo: dict[str, Any]) -> ProviderProfile:
    """Normalize a Google userinfo document into a ProviderProfile."""
    subject = userinfo.get("sub") or userinfo.get("id")
    if not subject:
        raise OAuthProviderError("Provider profile has no subject")
    email = userinfo.get("email")
    verified = userinfo.get("email_verified", userinfo.get("verified_email", False))
    if isinstance(verified, str):
        verified = verified.strip().lower() == "true"
    name = (userinfo.get("name") or "").strip() or None
    return ProviderProfile(
        id=str(subject),
        email=email.strip().lower() if isinstance(email, str) and email.strip() else None,
        email_verified=bool(verified),
        display_name=name,
    )


async def fetch_google_userinfo(code: str, settings: "Settings") -> dict[str, Any]:
    """Exchange an authorization code for an access token, then fetch the userinfo document."""
    if not settings.google_configured:
        raise OAuthNotConfigured()
    token_data = {
        "client_id": settings.GOOGLE_CLIENT_ID,
        "client_secret": settings.GOOGLE_CLIENT_SECRET.get_secret_value(),  # type: ignore[union-attr]
        "code": code,
        "redirect_uri": settings.GOOGLE_CALLBACK_URL,
        "grant_type": "authorization_code",
    }
    timeout = httpx.Timeout(settings.GOOGLE_REQUEST_TIMEOUT_SEC)
    try:
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=False) as client:
            token_response = await client.post(
                GOOGLE_TOKEN_URL,
                data=token_data,
                headers={"Accept": "application/json"},
            )
            token_response.raise_for_status()
            access_token = token_response.json().get("access_token")
            if not access_token:
                raise OAuthProviderError("Provider returned no access token")
            userinfo_response = await client.get(
                GOOGLE_USERINFO_URL,
                headers={"Authorization": f"Bearer {access_token}"},
            )
            userinfo_response.raise_for_status()
            userinfo = userinfo_response.json()
    except httpx.HTTPStatusError as e:
        logger.error(
            "Google OAuth request failed: url=%s status=%s body=%s",
            e.request.url,
            e.response.status_code,
            e.response.text[:500],
        )
        raise OAuthProviderError("Identity provider request failed") from e
    except httpx.HTTPError as e:
        logger.error("Google OAuth unreachable: %s", e)
        raise OAuthProviderError("Identity provider unreachable") from e
    except ValueError as e:
        logger.error("Google OAuth returned invalid JSON: %s", e)
        raise OAuthProviderError("Identity provider returned invalid JSON") from e
    if not isinstance(userinfo, dict):
        raise OAuthProviderError("Identity provider returned invalid userinfo")
    return userinfo


def link_or_create(db: Session, profile: ProviderProfile) -> User:
    """
    Return the local account for a provider profile.

    1. Reject unverified (or missing) emails.
    2. Look up by provider id, then by email.
    3. An email match without a provider id gets the id backfilled; its password is untouched.
    4. Otherwise create a 'user' account with a random password nobody is told.
    """
    if not profile.email or not profile.email_verified:
        logger.warning("Refused OAuth login with unverified email (provider_id=%s)", profile.id)
        raise UnverifiedEmail()

    user = db.query(User).filter(User.google_id == profile.id).first()
    if user is not None:
        return user

    user = db.query(User).filter(User.email == profile.email).first()
    if user is not None:
        if user.google_id is None:
            user.google_id = profile.id
            db.commit()
            db.refresh(user)
            logger.info("Linked Google id to existing user id=%s", user.id)
        return user

    user = User(
        name=profile.display_name or DEFAULT_DISPLAY_NAME,
        email=profile.email,
        tel=DEFAULT_TEL,
        password_hash=hash_password(generate_password()),
        google_id=profile.id,
        role=ROLE_USER,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Another callback created the same account first
        db.rollback()
        existing = (
            db.query(User)
            .filter((User.google_id == profile.id) | (User.email == profile.email))
            .first()
        )
        if existing is None:
            raise
        return existing
    db.refresh(user)
    logger.info("Created user id=%s from Google profile", user.id)
    return user
