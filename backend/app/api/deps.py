"""Shared API dependencies: single import point for all routers.

Re-exports database session and authentication dependencies so that router
modules can import everything they need from one place::

    from app.api.deps import get_db, get_current_active_user, require_roles
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import (
    get_current_active_user,
    get_current_user,
    require_roles,
)
from app.database import get_db
from app.services.booking_engine import BookingEngine
from app.services.booking_store import SQLAlchemyBookingStore


async def get_booking_engine(db: AsyncSession = Depends(get_db)) -> BookingEngine:
    """Booking engine bound to the request's session (and its transaction)."""
    return BookingEngine(SQLAlchemyBookingStore(db))


__all__ = [
    "get_db",
    "get_booking_engine",
    "get_current_user",
    "get_current_active_user",
    "require_roles",
]
