"""Shared test helpers: in-memory SQLite sessions, settings, and seeded rows."""

from datetime import date

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import Settings
from app.core.security import hash_password
from app.models import Base, Booking, Hotel, User
from app.schemas.auth import CurrentUser


def make_session_factory() -> sessionmaker:
    """Fresh in-memory database with all tables; one connection shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


def make_session() -> Session:
    return make_session_factory()()


def make_settings(**overrides: object) -> Settings:
    values: dict[str, object] = {
        "APP_ENV": "dev",
        "JWT_SECRET": "test-jwt-secret",
        "CSRF_SECRET": "test-csrf-secret",
        "SESSION_SECRET": "test-session-secret",
        "FRONTEND_URL": "http://frontend.test",
    }
    values.update(overrides)
    return Settings(**values)


def add_user(
    db: Session,
    email: str,
    role: str = "user",
    name: str | None = None,
    password: str | None = "secret1",
    google_id: str | None = None,
) -> User:
    user = User(
        name=name or email.split("@")[0],
        email=email,
        tel="0812345678",
        password_hash=hash_password(password) if password else None,
        role=role,
        google_id=google_id,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def add_hotel(db: Session, name: str = "H1") -> Hotel:
    hotel = Hotel(name=name, address="1 Main Street", tel="021234567")
    db.add(hotel)
    db.commit()
    db.refresh(hotel)
    return hotel


def add_booking(db: Session, user: User, hotel: Hotel, check_in: date, check_out: date) -> Booking:
    """Insert directly, bypassing date rules (for past/expired fixtures)."""
    booking = Booking(
        user_id=user.id,
        hotel_id=hotel.id,
        check_in=check_in,
        check_out=check_out,
        num_of_nights=max(1, min(3, (check_out - check_in).days)),
    )
    db.add(booking)
    db.commit()
    db.refresh(booking)
    return booking


def principal(user: User) -> CurrentUser:
    return CurrentUser(id=user.id, name=user.name, email=user.email, role=user.role)
