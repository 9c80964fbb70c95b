"""Pydantic v2 request/response schemas for booking endpoints."""

import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.models.booking import BookingStatus
from app.schemas.auth import UserResponse
from app.schemas.property import PropertyResponse

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class _BookingDates(BaseModel):
    check_in: date
    check_out: date

    @model_validator(mode="after")
    def check_dates(self):
        """Check-in must be after today and check-out after check-in."""
        if self.check_in <= date.today():
            raise ValueError("Check-in date must be greater than today")
        if self.check_out <= self.check_in:
            raise ValueError("Check-out date must be greater than check-in date")
        return self


class BookingCreate(_BookingDates):
    """Schema for requesting a booking. The renter is the caller."""

    property_id: uuid.UUID
    status: BookingStatus = Field(BookingStatus.PENDING)

    @model_validator(mode="after")
    def check_initial_status(self) -> "BookingCreate":
        if self.status == BookingStatus.CANCELLED:
            raise ValueError("A booking cannot be created as CANCELLED")
        return self


class BookingUpdate(_BookingDates):
    """Schema for changing a booking's dates and, optionally, its status."""

    status: BookingStatus | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BookingResponse(BaseModel):
    """Standard booking response returned from list endpoints."""

    id: uuid.UUID
    property_id: uuid.UUID
    renter_id: uuid.UUID
    check_in: date
    check_out: date
    status: BookingStatus
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BookingDetailResponse(BookingResponse):
    """Booking with nested property and renter, as returned on create/update/show."""

    property: PropertyResponse | None = None
    renter: UserResponse | None = None


class BookingListResponse(BaseModel):
    """Paginated list of bookings."""

    items: list[BookingResponse]
    total: int


class AvailabilityResponse(BaseModel):
    """Result of an availability probe for a property and date range."""

    property_id: uuid.UUID
    check_in: date
    check_out: date
    available: bool
