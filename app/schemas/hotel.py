"""Request/response schemas for hotels."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class HotelCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    address: str = Field(..., min_length=1, max_length=1024)
    tel: str = Field(..., min_length=1, max_length=32)
    picture: str | None = Field(default=None, max_length=2048)


class HotelUpdate(BaseModel):
    """Partial hotel update; omitted fields are left alone."""

    name: str | None = Field(default=None, min_length=1, max_length=50)
    address: str | None = Field(default=None, min_length=1, max_length=1024)
    tel: str | None = Field(default=None, min_length=1, max_length=32)
    picture: str | None = Field(default=None, max_length=2048)


class HotelOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., serialization_alias="_id")
    name: str
    address: str
    tel: str
    picture: str | None = None
    created_at: datetime | None = Field(default=None, serialization_alias="createdAt")


class HotelResponse(BaseModel):
    success: bool = True
    data: HotelOut


class HotelsListResponse(BaseModel):
    success: bool = True
    count: int
    data: list[HotelOut]
