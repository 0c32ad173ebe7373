"""Request/response schemas for bookings. Dates are ISO-8601 calendar dates (YYYY-MM-DD)."""

from datetime import date, datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class BookingCreate(BaseModel):
    """New booking for the hotel in the path. Night count is computed server-side."""

    model_config = ConfigDict(extra="ignore")

    check_in: date = Field(
        ...,
        validation_alias=AliasChoices("check_in", "checkIn"),
        description="Check-in date (YYYY-MM-DD)",
    )
    check_out: date = Field(
        ...,
        validation_alias=AliasChoices("check_out", "checkOut"),
        description="Check-out date (YYYY-MM-DD)",
    )


class BookingUpdate(BaseModel):
    """
    Patch for an existing booking. Omitted dates keep their stored value and the
    resulting pair is validated as a whole. Owner, hotel and night count are not patchable.
    """

    model_config = ConfigDict(extra="ignore")

    check_in: date | None = Field(default=None, validation_alias=AliasChoices("check_in", "checkIn"))
    check_out: date | None = Field(default=None, validation_alias=AliasChoices("check_out", "checkOut"))


class BookingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., serialization_alias="_id")
    user_id: int = Field(..., serialization_alias="user")
    hotel_id: int = Field(..., serialization_alias="hotel")
    check_in: date = Field(..., serialization_alias="checkIn")
    check_out: date = Field(..., serialization_alias="checkOut")
    num_of_nights: int = Field(..., serialization_alias="numOfNights")
    created_at: datetime | None = Field(default=None, serialization_alias="createdAt")


class BookingResponse(BaseModel):
    success: bool = True
    data: BookingOut


class BookingsListResponse(BaseModel):
    success: bool = True
    count: int
    data: list[BookingOut]


class DeletedResponse(BaseModel):
    success: bool = True
    data: dict = Field(default_factory=dict)
