"""SQLAlchemy declarative Base shared by all models."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base for users, hotels and bookings."""

    pass
