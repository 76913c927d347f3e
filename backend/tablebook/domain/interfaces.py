from __future__ import annotations

from datetime import date, time
from typing import Protocol, runtime_checkable

from ..models import Booking, Table
from .services import BookingRequest, BookingResult


@runtime_checkable
class AvailabilityChecker(Protocol):
    async def get_available_tables(
        self,
        restaurant_id: int,
        booking_date: date,
        booking_time: time,
        guest_count: int,
    ) -> list[Table]: ...

    async def is_table_available(self, table_id: int, booking_date: date, booking_time: time) -> bool: ...


@runtime_checkable
class BookingService(Protocol):
    async def create_booking(self, booking: BookingRequest) -> BookingResult: ...

    async def cancel_booking(self, booking_id: int) -> bool: ...

    async def get_upcoming_bookings(self, customer_id: int) -> list[Booking]: ...

    async def validate_booking(self, booking: BookingRequest) -> tuple[bool, str | None]: ...
