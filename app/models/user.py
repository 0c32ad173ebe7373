"""ORM model for application users (local and OAuth accounts, RBAC)."""

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String, func

from app.models.base import Base

ROLE_USER = "user"
ROLE_ADMIN = "admin"
ROLES = (ROLE_USER, ROLE_ADMIN)


class User(Base):
    """
    User account for JWT authentication and role-based access control.

    role: 'admin' or 'user'. Every account has a password hash, a Google id,
    or both; OAuth-created accounts get a random password nobody knows.
    email is stored lowercased.
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "password_hash IS NOT NULL OR google_id IS NOT NULL",
            name="ck_users_has_auth_path",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    tel = Column(String(32), nullable=False)
    password_hash = Column(String(255), nullable=True)
    role = Column(String(32), nullable=False, default=ROLE_USER)
    google_id = Column(String(255), nullable=True, unique=True, index=True)
    reset_password_token = Column(String(64), nullable=True, index=True)
    reset_password_expire = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
