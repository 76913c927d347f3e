from datetime import date, datetime, time, timedelta, timezone


def utc_now_naive() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def combine(booking_date: date, booking_time: time) -> datetime:
    return datetime.combine(booking_date, booking_time.replace(tzinfo=None))


def time_distance(booking_date: date, first: time, second: time) -> timedelta:
    """Absolute distance between two times of day on the same date."""
    return abs(combine(booking_date, first) - combine(booking_date, second))
