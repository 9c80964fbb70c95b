"""SQLAlchemy models for Lala Rental.

All models are imported here so that ``Base.metadata`` knows every table
before ``create_all`` runs. If you add a new model, import it in this file.
"""

from app.models.booking import Booking, BookingStatus
from app.models.property import Property
from app.models.user import User, UserRole

__all__ = [
    "Booking",
    "BookingStatus",
    "Property",
    "User",
    "UserRole",
]
