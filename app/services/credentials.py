"""
Local account store: registration, password login, profile edits and password reset.

Only bcrypt hashes of passwords and SHA-256 digests of reset tokens are persisted.
"""

import logging
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import DuplicateKey, InvalidOrExpiredToken, UserNotFound
from app.core.security import (
    generate_reset_token,
    hash_password,
    hash_reset_token,
    verify_password,
)
from app.models.user import ROLE_ADMIN, ROLE_USER, User

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == email.strip().lower()).first()


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise UserNotFound()
    return user


def register(
    db: Session,
    name: str,
    email: str,
    tel: str,
    raw_password: str,
    role: str = ROLE_USER,
) -> User:
    """
    Create a local account. Raises DuplicateKey('email') if the email is taken.
    """
    email = email.strip().lower()
    if get_user_by_email(db, email) is not None:
        raise DuplicateKey("email", "Email already registered")
    user = User(
        name=name,
        email=email,
        tel=tel,
        password_hash=hash_password(raw_password),
        role=role,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        # Concurrent registration with the same email
        db.rollback()
        raise DuplicateKey("email", "Email already registered") from e
    db.refresh(user)
    logger.info("Registered user id=%s role=%s", user.id, user.role)
    return user


def verify(db: Session, email: str, raw_password: str) -> User | None:
    """
    Return the user for a correct email/password pair, else None.

    Unknown email and wrong password both give None, and both pay for a bcrypt check.
    """
    user = get_user_by_email(db, email)
    if not verify_password(raw_password, user.password_hash if user else None):
        logger.warning("Failed login attempt")
        return None
    return user


def update_profile(
    db: Session,
    user: User,
    *,
    name: str | None = None,
    tel: str | None = None,
    role: str | None = None,
    actor_role: str = ROLE_USER,
) -> User:
    """Apply a partial profile update. Role changes are only honoured when the actor is an admin."""
    if name is not None:
        user.name = name.strip()
    if tel is not None:
        user.tel = tel.strip()
    if role is not None and role != user.role:
        if actor_role == ROLE_ADMIN:
            user.role = role
        else:
            logger.warning("Ignored role change by non-admin user id=%s", user.id)
    db.commit()
    db.refresh(user)
    return user


def issue_reset_token(db: Session, user: User, settings: "Settings") -> str:
    """
    Store the digest of a fresh reset token with its expiry; return the plaintext once.
    Issuing again replaces any earlier token.
    """
    plain = generate_reset_token()
    user.reset_password_token = hash_reset_token(plain)
    user.reset_password_expire = datetime.now(UTC) + timedelta(
        minutes=settings.RESET_TOKEN_EXPIRE_MINUTES
    )
    db.commit()
    return plain


def clear_reset_token(db: Session, user: User) -> None:
    user.reset_password_token = None
    user.reset_password_expire = None
    db.commit()


def consume_reset_token(db: Session, plain_token: str, new_password: str) -> User:
    """
    Set a new password for the holder of an unexpired reset token and clear the token.

    The password and the cleared reset fields are written in one commit, so a
    token works at most once. Raises InvalidOrExpiredToken otherwise.
    """
    digest = hash_reset_token(plain_token)
    now = datetime.now(UTC)
    user = (
        db.query(User)
        .filter(
            User.reset_password_token == digest,
            User.reset_password_expire > now,
        )
        .first()
    )
    if user is None:
        logger.warning("Rejected invalid or expired reset token")
        raise InvalidOrExpiredToken()
    user.password_hash = hash_password(new_password)
    user.reset_password_token = None
    user.reset_password_expire = None
    db.commit()
    db.refresh(user)
    logger.info("Password reset for user id=%s", user.id)
    return user
