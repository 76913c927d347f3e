from dataclasses import dataclass
from datetime import date, time, timedelta
from typing import Iterable, Optional

from ..models import Booking, Table
from ..utils.time import time_distance

DEFAULT_SEATING_WINDOW = timedelta(minutes=90)


@dataclass(frozen=True)
class BookingRequest:
    customer_id: int
    restaurant_id: int
    booking_date: date
    booking_time: time
    guest_count: int
    table_id: Optional[int] = None
    special_requests: Optional[str] = None


@dataclass(frozen=True)
class BookingResult:
    """Either the persisted booking or the reason it was refused."""

    booking: Optional[Booking] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.booking is not None

    @classmethod
    def created(cls, booking: Booking) -> "BookingResult":
        return cls(booking=booking)

    @classmethod
    def rejected(cls, error: str) -> "BookingResult":
        return cls(error=error)


def slots_overlap(booking_date: date, first: time, second: time, *, window: timedelta) -> bool:
    return time_distance(booking_date, first, second) < window


def blocks_slot(booking: Booking, booking_date: date, booking_time: time, *, window: timedelta) -> bool:
    """True when ``booking`` occupies its table at the given slot."""
    if not booking.is_active or booking.booking_date != booking_date:
        return False
    return slots_overlap(booking_date, booking.booking_time, booking_time, window=window)


def select_available_tables(
    tables: Iterable[Table],
    bookings: Iterable[Booking],
    *,
    booking_date: date,
    booking_time: time,
    guest_count: int,
    window: timedelta,
) -> list[Table]:
    """
    Pure selection: active tables seating ``guest_count`` with no blocking booking,
    smallest first then by id so the first entry is the best fit.
    """
    occupied = {
        booking.table_id
        for booking in bookings
        if booking.table_id is not None and blocks_slot(booking, booking_date, booking_time, window=window)
    }
    candidates = [table for table in tables if table.can_seat(guest_count) and table.id not in occupied]
    return sorted(candidates, key=lambda table: (table.seating_capacity, table.id))
