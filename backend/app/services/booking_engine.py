"""Booking conflict detection and lifecycle orchestration.

The engine decides whether a booking may be admitted for a property and date
range, then performs the write through a :class:`BookingStore`. The overlap
check and the write run while the store holds the property lock, so two
requests for overlapping dates on the same property can never both be
admitted.
"""

from __future__ import annotations

import logging
import uuid
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass, field
from datetime import date
from typing import Protocol

from app.config import settings
from app.models.booking import ALLOWED_TRANSITIONS, Booking, BookingStatus
from app.services.exceptions import ConflictError, InvalidTransitionError, NotFoundError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Overlap predicate
# ---------------------------------------------------------------------------


def dates_overlap(
    check_in: date,
    check_out: date,
    other_check_in: date,
    other_check_out: date,
    *,
    inclusive: bool = True,
) -> bool:
    """Return True when the two stays conflict.

    With ``inclusive`` (the default) the boundaries count, so a stay starting
    on another stay's check-out day conflicts with it.
    """
    if inclusive:
        return check_in <= other_check_out and other_check_in <= check_out
    return check_in < other_check_out and other_check_in < check_out


@dataclass(frozen=True)
class OverlapPolicy:
    """Which bookings occupy the calendar, and how boundaries are compared."""

    inclusive: bool = True
    blocking_statuses: frozenset[BookingStatus] = field(
        default_factory=lambda: frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})
    )

    @classmethod
    def from_settings(cls) -> OverlapPolicy:
        statuses = {BookingStatus.PENDING, BookingStatus.CONFIRMED}
        if settings.booking_cancelled_blocks_dates:
            statuses.add(BookingStatus.CANCELLED)
        return cls(
            inclusive=not settings.booking_allow_same_day_turnover,
            blocking_statuses=frozenset(statuses),
        )


# ---------------------------------------------------------------------------
# Requests and the persistence contract
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BookingRequest:
    """A validated request to reserve a property."""

    renter_id: uuid.UUID
    property_id: uuid.UUID
    check_in: date
    check_out: date
    status: BookingStatus = BookingStatus.PENDING


@dataclass(frozen=True)
class BookingUpdateRequest:
    """A validated request to change an existing booking.

    ``renter_id`` scopes the lookup to the renter's own bookings; privileged
    actors pass ``None``. ``status=None`` keeps the current status.
    """

    booking_id: uuid.UUID
    check_in: date
    check_out: date
    status: BookingStatus | None = None
    renter_id: uuid.UUID | None = None


class BookingStore(Protocol):
    """Persistence operations the engine relies on."""

    def lock_property(self, property_id: uuid.UUID) -> AbstractAsyncContextManager[None]:
        """Serialize admissions for one property. Raises NotFoundError if it does not exist."""
        ...

    async def find_overlapping(
        self,
        property_id: uuid.UUID,
        check_in: date,
        check_out: date,
        *,
        inclusive: bool,
        statuses: frozenset[BookingStatus],
        exclude_booking_id: uuid.UUID | None = None,
    ) -> list[Booking]: ...

    async def create_booking(
        self,
        renter_id: uuid.UUID,
        property_id: uuid.UUID,
        check_in: date,
        check_out: date,
        status: BookingStatus,
    ) -> Booking: ...

    async def get_booking(self, booking_id: uuid.UUID, renter_id: uuid.UUID | None = None) -> Booking | None: ...

    async def update_booking(
        self,
        booking: Booking,
        *,
        check_in: date,
        check_out: date,
        status: BookingStatus,
    ) -> Booking: ...


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class BookingEngine:
    """Admits new and updated bookings without ever double-booking a property."""

    def __init__(self, store: BookingStore, policy: OverlapPolicy | None = None) -> None:
        self._store = store
        self._policy = policy or OverlapPolicy.from_settings()

    @property
    def policy(self) -> OverlapPolicy:
        return self._policy

    async def check_availability(
        self,
        property_id: uuid.UUID,
        check_in: date,
        check_out: date,
        exclude_booking_id: uuid.UUID | None = None,
    ) -> bool:
        """Return True if a conflicting booking exists for the range."""
        overlapping = await self._store.find_overlapping(
            property_id,
            check_in,
            check_out,
            inclusive=self._policy.inclusive,
            statuses=self._policy.blocking_statuses,
            exclude_booking_id=exclude_booking_id,
        )
        return len(overlapping) > 0

    async def admit_booking(self, request: BookingRequest) -> Booking:
        """Create the booking, or raise ConflictError if the dates are taken."""
        async with self._store.lock_property(request.property_id):
            if await self.check_availability(request.property_id, request.check_in, request.check_out):
                logger.warning(
                    "Rejected booking for property %s (%s to %s): dates taken",
                    request.property_id,
                    request.check_in,
                    request.check_out,
                )
                raise ConflictError()

            booking = await self._store.create_booking(
                request.renter_id,
                request.property_id,
                request.check_in,
                request.check_out,
                request.status,
            )

        logger.info(
            "Admitted booking %s for property %s (%s to %s)",
            booking.id,
            booking.property_id,
            booking.check_in,
            booking.check_out,
        )
        return booking

    async def admit_booking_update(self, request: BookingUpdateRequest) -> Booking:
        """Apply new dates/status to a booking, re-checking against all other bookings."""
        booking = await self._store.get_booking(request.booking_id, renter_id=request.renter_id)
        if booking is None:
            raise NotFoundError()

        async with self._store.lock_property(booking.property_id):
            # Re-read under the lock; a concurrent request may have changed it.
            booking = await self._store.get_booking(request.booking_id, renter_id=request.renter_id)
            if booking is None:
                raise NotFoundError()

            new_status = request.status or booking.status
            if new_status != booking.status and new_status not in ALLOWED_TRANSITIONS[booking.status]:
                raise InvalidTransitionError(
                    f"Cannot change booking status from {booking.status.value} to {new_status.value}"
                )

            if new_status in self._policy.blocking_statuses and await self.check_availability(
                booking.property_id,
                request.check_in,
                request.check_out,
                exclude_booking_id=booking.id,
            ):
                logger.warning(
                    "Rejected update of booking %s (%s to %s): dates taken",
                    booking.id,
                    request.check_in,
                    request.check_out,
                )
                raise ConflictError()

            booking = await self._store.update_booking(
                booking,
                check_in=request.check_in,
                check_out=request.check_out,
                status=new_status,
            )

        logger.info("Updated booking %s (status=%s)", booking.id, booking.status.value)
        return booking
