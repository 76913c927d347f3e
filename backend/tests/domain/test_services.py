from datetime import date, datetime, time, timedelta

from tablebook.domain.services import (
    DEFAULT_SEATING_WINDOW,
    BookingResult,
    blocks_slot,
    select_available_tables,
    slots_overlap,
)
from tablebook.models import Booking, BookingStatus, Table

DAY = date(2031, 5, 8)
NOW = datetime(2031, 5, 1, 12, 0)


def _table(table_id: int, capacity: int, *, is_active: bool = True) -> Table:
    return Table(
        id=table_id,
        restaurant_id=1,
        table_number=f"T{table_id}",
        seating_capacity=capacity,
        is_active=is_active,
        created_at=NOW,
        updated_at=NOW,
    )


def _booking(table_id: int, at: time, status: BookingStatus = BookingStatus.PENDING, day: date = DAY) -> Booking:
    return Booking(
        id=100 + table_id,
        customer_id=1,
        restaurant_id=1,
        table_id=table_id,
        booking_date=day,
        booking_time=at,
        guest_count=2,
        status=status,
        created_at=NOW,
        updated_at=NOW,
    )


def test_slots_overlap_is_strict_at_window_edge() -> None:
    window = timedelta(minutes=90)
    assert slots_overlap(DAY, time(19, 0), time(20, 29), window=window)
    assert not slots_overlap(DAY, time(19, 0), time(20, 30), window=window)
    assert slots_overlap(DAY, time(20, 0), time(19, 0), window=window)


def test_default_window_is_ninety_minutes() -> None:
    assert DEFAULT_SEATING_WINDOW == timedelta(minutes=90)


def test_inactive_statuses_never_block() -> None:
    for status in (BookingStatus.CANCELLED, BookingStatus.COMPLETED, BookingStatus.NO_SHOW):
        booking = _booking(1, time(19, 0), status)
        assert not blocks_slot(booking, DAY, time(19, 0), window=DEFAULT_SEATING_WINDOW)


def test_booking_on_other_date_does_not_block() -> None:
    booking = _booking(1, time(19, 0), day=DAY + timedelta(days=1))
    assert not blocks_slot(booking, DAY, time(19, 0), window=DEFAULT_SEATING_WINDOW)


def test_select_orders_by_capacity_then_id() -> None:
    tables = [_table(3, 4), _table(2, 6), _table(1, 4)]
    selected = select_available_tables(
        tables, [], booking_date=DAY, booking_time=time(19, 0), guest_count=3, window=DEFAULT_SEATING_WINDOW
    )
    assert [t.id for t in selected] == [1, 3, 2]


def test_select_skips_inactive_small_and_occupied_tables() -> None:
    tables = [_table(1, 2), _table(2, 4, is_active=False), _table(3, 4), _table(4, 8)]
    bookings = [_booking(3, time(18, 30)), _booking(4, time(21, 0))]
    selected = select_available_tables(
        tables, bookings, booking_date=DAY, booking_time=time(19, 0), guest_count=4, window=DEFAULT_SEATING_WINDOW
    )
    assert [t.id for t in selected] == [4]


def test_booking_result_carries_reason_when_rejected() -> None:
    result = BookingResult.rejected("no table available")
    assert not result.ok
    assert result.booking is None
    assert result.error == "no table available"
