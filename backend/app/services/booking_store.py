"""SQLAlchemy implementation of the booking persistence contract."""

import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.booking import Booking, BookingStatus
from app.models.property import Property
from app.services.exceptions import NotFoundError


class SQLAlchemyBookingStore:
    """Booking persistence on the request's session.

    ``lock_property`` takes ``SELECT ... FOR UPDATE`` on the property row. The
    lock lives until the session's transaction ends, so every admission for
    that property on another connection waits until this one has committed.
    """

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    @asynccontextmanager
    async def lock_property(self, property_id: uuid.UUID) -> AsyncIterator[None]:
        result = await self._db.execute(
            select(Property.id).where(Property.id == property_id).with_for_update()
        )
        if result.scalar_one_or_none() is None:
            raise NotFoundError("Property not found")
        yield

    async def find_overlapping(
        self,
        property_id: uuid.UUID,
        check_in: date,
        check_out: date,
        *,
        inclusive: bool,
        statuses: frozenset[BookingStatus],
        exclude_booking_id: uuid.UUID | None = None,
    ) -> list[Booking]:
        query = select(Booking).where(
            Booking.property_id == property_id,
            Booking.status.in_(sorted(statuses)),
        )
        if inclusive:
            query = query.where(Booking.check_in <= check_out, Booking.check_out >= check_in)
        else:
            query = query.where(Booking.check_in < check_out, Booking.check_out > check_in)
        if exclude_booking_id is not None:
            query = query.where(Booking.id != exclude_booking_id)

        result = await self._db.execute(query)
        return list(result.scalars().all())

    async def create_booking(
        self,
        renter_id: uuid.UUID,
        property_id: uuid.UUID,
        check_in: date,
        check_out: date,
        status: BookingStatus,
    ) -> Booking:
        booking = Booking(
            renter_id=renter_id,
            property_id=property_id,
            check_in=check_in,
            check_out=check_out,
            status=status,
        )
        self._db.add(booking)
        await self._db.flush()
        await self._db.refresh(booking)
        return booking

    async def get_booking(self, booking_id: uuid.UUID, renter_id: uuid.UUID | None = None) -> Booking | None:
        query = select(Booking).where(Booking.id == booking_id).execution_options(populate_existing=True)
        if renter_id is not None:
            query = query.where(Booking.renter_id == renter_id)
        result = await self._db.execute(query)
        return result.scalar_one_or_none()

    async def update_booking(
        self,
        booking: Booking,
        *,
        check_in: date,
        check_out: date,
        status: BookingStatus,
    ) -> Booking:
        booking.check_in = check_in
        booking.check_out = check_out
        booking.status = status
        self._db.add(booking)
        await self._db.flush()
        await self._db.refresh(booking)
        return booking
