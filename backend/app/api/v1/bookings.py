"""Bookings API router.

Renters create and manage their own bookings; hosts see the bookings on
their properties; admins see and manage everything. Creation and updates go
through :class:`~app.services.booking_engine.BookingEngine`, which rejects
overlapping stays.
"""

from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_booking_engine, get_current_active_user, get_db, require_roles
from app.models.booking import Booking, BookingStatus
from app.models.property import Property
from app.models.user import User, UserRole
from app.schemas.auth import MessageResponse
from app.schemas.booking import (
    AvailabilityResponse,
    BookingCreate,
    BookingDetailResponse,
    BookingListResponse,
    BookingResponse,
    BookingUpdate,
)
from app.services.booking_engine import BookingEngine, BookingRequest, BookingUpdateRequest

router = APIRouter(prefix="/api/v1/bookings", tags=["bookings"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _booking_not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Booking Not found",
    )


async def _paginate(db: AsyncSession, filters: list, skip: int, limit: int) -> dict:
    count_query = select(func.count()).select_from(Booking).where(*filters)
    total = (await db.execute(count_query)).scalar_one()

    items_query = select(Booking).where(*filters).order_by(Booking.check_in).offset(skip).limit(limit)
    result = await db.execute(items_query)
    return {"items": list(result.scalars().all()), "total": total}


async def _get_visible_booking(booking_id: uuid.UUID, user: User, db: AsyncSession) -> Booking:
    """Fetch a booking visible to the user: their own, on their property, or any for admins."""
    result = await db.execute(select(Booking).where(Booking.id == booking_id))
    booking = result.scalar_one_or_none()

    if booking is None:
        raise _booking_not_found()
    if user.role == UserRole.ADMIN or booking.renter_id == user.id or booking.property.host_id == user.id:
        return booking
    raise _booking_not_found()


def _renter_scope(user: User) -> uuid.UUID | None:
    """Admins may touch any booking; everyone else only their own."""
    return None if user.role == UserRole.ADMIN else user.id


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post(
    "",
    response_model=BookingDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Book a property",
)
async def create_booking(
    body: BookingCreate,
    engine: BookingEngine = Depends(get_booking_engine),
    current_user: User = Depends(get_current_active_user),
) -> Booking:
    """Reserve a property for the current user.

    Returns 409 when the dates overlap an existing booking and 404 when the
    property does not exist.
    """
    return await engine.admit_booking(
        BookingRequest(
            renter_id=current_user.id,
            property_id=body.property_id,
            check_in=body.check_in,
            check_out=body.check_out,
            status=body.status,
        )
    )


@router.get(
    "",
    response_model=BookingListResponse,
    summary="List all bookings",
)
async def list_bookings(
    property_id: uuid.UUID | None = Query(None, description="Filter by property"),
    renter_id: uuid.UUID | None = Query(None, description="Filter by renter"),
    status_filter: BookingStatus | None = Query(None, alias="status", description="Filter by booking status"),
    check_in_from: date | None = Query(None, description="Bookings with check_in >= this date"),
    check_in_to: date | None = Query(None, description="Bookings with check_in <= this date"),
    skip: int = Query(0, ge=0, description="Pagination offset"),
    limit: int = Query(20, ge=1, le=100, description="Pagination limit"),
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_roles(UserRole.ADMIN)),
) -> dict:
    """Return a paginated list of every booking in the system."""
    filters = []
    if property_id is not None:
        filters.append(Booking.property_id == property_id)
    if renter_id is not None:
        filters.append(Booking.renter_id == renter_id)
    if status_filter is not None:
        filters.append(Booking.status == status_filter)
    if check_in_from is not None:
        filters.append(Booking.check_in >= check_in_from)
    if check_in_to is not None:
        filters.append(Booking.check_in <= check_in_to)

    return await _paginate(db, filters, skip, limit)


@router.get(
    "/user",
    response_model=BookingListResponse,
    summary="List the current user's bookings",
)
async def list_user_bookings(
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> dict:
    return await _paginate(db, [Booking.renter_id == current_user.id], skip, limit)


@router.get(
    "/property/{property_id}",
    response_model=BookingListResponse,
    summary="List bookings for a property",
)
async def list_property_bookings(
    property_id: uuid.UUID,
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> dict:
    """Only the property's host and admins can see its bookings."""
    result = await db.execute(select(Property).where(Property.id == property_id))
    prop = result.scalar_one_or_none()

    if prop is None or (current_user.role != UserRole.ADMIN and prop.host_id != current_user.id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Property not found",
        )

    return await _paginate(db, [Booking.property_id == property_id], skip, limit)


@router.get(
    "/property/{property_id}/availability",
    response_model=AvailabilityResponse,
    summary="Check whether a property is free for a date range",
)
async def check_property_availability(
    property_id: uuid.UUID,
    check_in: date = Query(...),
    check_out: date = Query(...),
    db: AsyncSession = Depends(get_db),
    engine: BookingEngine = Depends(get_booking_engine),
) -> AvailabilityResponse:
    if check_out <= check_in:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Check-out date must be greater than check-in date",
        )
    if await db.get(Property, property_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Property not found",
        )

    conflict = await engine.check_availability(property_id, check_in, check_out)
    return AvailabilityResponse(
        property_id=property_id,
        check_in=check_in,
        check_out=check_out,
        available=not conflict,
    )


@router.get(
    "/{booking_id}",
    response_model=BookingDetailResponse,
    summary="Get booking detail with nested property and renter",
)
async def get_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Booking:
    return await _get_visible_booking(booking_id, current_user, db)


@router.put(
    "/{booking_id}",
    response_model=BookingDetailResponse,
    summary="Update a booking",
)
async def update_booking(
    booking_id: uuid.UUID,
    body: BookingUpdate,
    engine: BookingEngine = Depends(get_booking_engine),
    current_user: User = Depends(get_current_active_user),
) -> Booking:
    """Change dates and/or status.

    The new dates are checked against every other booking on the property.
    Renters can only update their own bookings.
    """
    return await engine.admit_booking_update(
        BookingUpdateRequest(
            booking_id=booking_id,
            check_in=body.check_in,
            check_out=body.check_out,
            status=body.status,
            renter_id=_renter_scope(current_user),
        )
    )


@router.delete(
    "/{booking_id}",
    response_model=MessageResponse,
    summary="Delete a booking",
)
async def delete_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> dict:
    """Delete a booking. Renters can only delete their own."""
    query = select(Booking).where(Booking.id == booking_id)
    renter_scope = _renter_scope(current_user)
    if renter_scope is not None:
        query = query.where(Booking.renter_id == renter_scope)

    booking = (await db.execute(query)).scalar_one_or_none()
    if booking is None:
        raise _booking_not_found()

    await db.delete(booking)
    await db.flush()
    return {"message": "Booking deleted successfully"}
