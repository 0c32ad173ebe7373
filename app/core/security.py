"""Password hashing, reset tokens, and JWT issuance/verification for authentication."""

import hashlib
import hmac
import secrets
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import bcrypt
import jwt

from app.core.errors import ExpiredToken, InvalidToken

if TYPE_CHECKING:
    from app.core.config import Settings

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

# Min/max lengths for input validation.
NAME_MAX_LEN = 255
EMAIL_MAX_LEN = 255
TEL_MAX_LEN = 32
PASSWORD_MIN_LEN = 6
PASSWORD_MAX_LEN = 128

# Random bytes behind reset tokens and generated passwords.
RESET_TOKEN_BYTES = 20
GENERATED_PASSWORD_BYTES = 32

# Hash checked when the account does not exist, so both paths pay for bcrypt.
_DUMMY_HASH = bcrypt.hashpw(b"not-a-real-password", bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str | None) -> bool:
    """Verify a plain password against a stored hash; a missing hash never matches."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        matched = bcrypt.checkpw(pw_bytes, (hashed or _DUMMY_HASH).encode("utf-8"))
    except (ValueError, TypeError):
        return False
    return matched and hashed is not None


def generate_password() -> str:
    """Random password nobody is told; accounts created this way log in through the provider only."""
    return secrets.token_urlsafe(GENERATED_PASSWORD_BYTES)


def generate_reset_token() -> str:
    return secrets.token_hex(RESET_TOKEN_BYTES)


def hash_reset_token(plain_token: str) -> str:
    """One-way SHA-256 of a reset token; only this digest is persisted."""
    return hashlib.sha256(plain_token.encode("utf-8")).hexdigest()


def sign_value(value: str, secret: str) -> str:
    """Hex HMAC-SHA256 of value under secret."""
    return hmac.new(secret.encode("utf-8"), value.encode("utf-8"), hashlib.sha256).hexdigest()


def create_access_token(user_id: str | int, settings: "Settings") -> tuple[str, datetime]:
    """
    Create a signed identity token for user_id.

    Returns (token, expires_at). The payload holds only sub, iat and exp;
    the role is looked up again on every request.
    """
    now = datetime.now(UTC)
    expires_at = now + timedelta(days=settings.JWT_EXPIRE_DAYS)
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "exp": expires_at,
        "iat": now,
    }
    token = jwt.encode(
        payload,
        settings.JWT_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
    )
    return token, expires_at


def decode_access_token(token: str, settings: "Settings") -> int:
    """
    Verify token and return the user id it was issued for.

    Raises ExpiredToken when the signature is valid but exp has passed, and
    InvalidToken for anything else (malformed, bad signature, bad subject).
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET.get_secret_value(),
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise ExpiredToken() from e
    except jwt.PyJWTError as e:
        raise InvalidToken() from e
    try:
        return int(payload["sub"])
    except (TypeError, ValueError) as e:
        raise InvalidToken() from e
