from __future__ import annotations

from datetime import date, datetime, time
from enum import StrEnum
from typing import Optional

from sqlalchemy import CheckConstraint, Enum, ForeignKey, Index
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql.sqltypes import BigInteger, Boolean, Date, DateTime, Integer, String, Time

from .domain.errors import InvalidTransitionError
from .utils.time import combine, utc_now_naive

SPECIAL_REQUESTS_MAX_LENGTH = 500

# SQLite only autoincrements INTEGER primary keys.
PrimaryKey = BigInteger().with_variant(Integer, "sqlite")


class Base(DeclarativeBase):
    pass


class BookingStatus(StrEnum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NO_SHOW = "no_show"


ACTIVE_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})

ALLOWED_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset(
        {BookingStatus.CANCELLED, BookingStatus.COMPLETED, BookingStatus.NO_SHOW}
    ),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.NO_SHOW: frozenset(),
}


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)

    def touch(self, now: datetime | None = None) -> None:
        """Refresh ``updated_at``. Every mutating method calls this."""
        self.updated_at = now or utc_now_naive()


class Restaurant(TimestampMixin, Base):
    __tablename__ = "restaurants"

    id: Mapped[int] = mapped_column(PrimaryKey, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    location: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    phone_number: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    tables: Mapped[list["Table"]] = relationship(back_populates="restaurant")
    bookings: Mapped[list["Booking"]] = relationship(back_populates="restaurant")


class Table(TimestampMixin, Base):
    __tablename__ = "restaurant_tables"
    __table_args__ = (
        CheckConstraint("seating_capacity >= 1", name="chk_tables_capacity"),
        Index("idx_tables_restaurant", "restaurant_id"),
    )

    id: Mapped[int] = mapped_column(PrimaryKey, primary_key=True, autoincrement=True)
    restaurant_id: Mapped[int] = mapped_column(ForeignKey("restaurants.id"), nullable=False)
    table_number: Mapped[str] = mapped_column(String(20), nullable=False)
    seating_capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    restaurant: Mapped["Restaurant"] = relationship(back_populates="tables")
    bookings: Mapped[list["Booking"]] = relationship(back_populates="table")

    def can_seat(self, guest_count: int) -> bool:
        return bool(self.is_active) and self.seating_capacity >= guest_count


class Customer(TimestampMixin, Base):
    __tablename__ = "customers"

    id: Mapped[int] = mapped_column(PrimaryKey, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(64), nullable=False)
    last_name: Mapped[str] = mapped_column(String(64), nullable=False)
    email: Mapped[str] = mapped_column(String(128), nullable=False)
    phone_number: Mapped[str] = mapped_column(String(20), nullable=False)

    bookings: Mapped[list["Booking"]] = relationship(back_populates="customer")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Booking(TimestampMixin, Base):
    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("guest_count >= 1", name="chk_bookings_guest_count"),
        Index("idx_bookings_table_date", "table_id", "booking_date"),
        Index("idx_bookings_customer", "customer_id"),
    )

    id: Mapped[int] = mapped_column(PrimaryKey, primary_key=True, autoincrement=True)
    customer_id: Mapped[int] = mapped_column(ForeignKey("customers.id"), nullable=False)
    restaurant_id: Mapped[int] = mapped_column(ForeignKey("restaurants.id"), nullable=False)
    table_id: Mapped[Optional[int]] = mapped_column(ForeignKey("restaurant_tables.id"), nullable=True)
    booking_date: Mapped[date] = mapped_column(Date, nullable=False)
    booking_time: Mapped[time] = mapped_column(Time(timezone=False), nullable=False)
    guest_count: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[BookingStatus] = mapped_column(
        Enum(
            BookingStatus,
            values_callable=lambda enum_cls: [e.value for e in enum_cls],
            native_enum=False,
        ),
        nullable=False,
        default=BookingStatus.PENDING,
    )
    special_requests: Mapped[Optional[str]] = mapped_column(
        String(SPECIAL_REQUESTS_MAX_LENGTH), nullable=True
    )

    customer: Mapped["Customer"] = relationship(back_populates="bookings")
    restaurant: Mapped["Restaurant"] = relationship(back_populates="bookings")
    table: Mapped[Optional["Table"]] = relationship(back_populates="bookings")

    @property
    def effective_at(self) -> datetime:
        return combine(self.booking_date, self.booking_time)

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    def is_upcoming(self, now: datetime | None = None) -> bool:
        return self.effective_at > (now or utc_now_naive())

    def can_be_cancelled(self) -> bool:
        return self.status in (BookingStatus.PENDING, BookingStatus.CONFIRMED)

    def transition_to(self, status: BookingStatus, now: datetime | None = None) -> None:
        if status not in ALLOWED_TRANSITIONS[self.status]:
            raise InvalidTransitionError(f"cannot move booking from {self.status} to {status}")
        self.status = status
        self.touch(now)

    def assign_table(self, table_id: int, now: datetime | None = None) -> None:
        self.table_id = table_id
        self.touch(now)

    def cancel(self, now: datetime | None = None) -> None:
        self.transition_to(BookingStatus.CANCELLED, now)

    def confirm(self, now: datetime | None = None) -> None:
        self.transition_to(BookingStatus.CONFIRMED, now)

    def complete(self, now: datetime | None = None) -> None:
        self.transition_to(BookingStatus.COMPLETED, now)

    def mark_no_show(self, now: datetime | None = None) -> None:
        self.transition_to(BookingStatus.NO_SHOW, now)
