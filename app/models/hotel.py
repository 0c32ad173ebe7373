"""ORM model for hotels that can be booked."""

from sqlalchemy import Column, DateTime, Integer, String, func

from app.models.base import Base


class Hotel(Base):
    __tablename__ = "hotels"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False, unique=True, index=True)
    address = Column(String(1024), nullable=False)
    tel = Column(String(32), nullable=False)
    picture = Column(String(2048), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
