"""Domain errors raised by the booking services.

Routers do not catch these; the handlers registered in ``app.main`` map each
one to its HTTP status.
"""

from fastapi import status


class BookingError(Exception):
    """Base class for booking domain errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Booking request rejected"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ConflictError(BookingError):
    """The requested dates overlap an existing booking on the property."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "Property is already booked for the selected dates"


class NotFoundError(BookingError):
    """The booking (or property) does not exist or is not visible to the actor."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Booking Not found"


class InvalidTransitionError(BookingError):
    """The requested status change is not allowed."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Booking status change not allowed"
