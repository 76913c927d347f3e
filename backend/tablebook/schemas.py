from datetime import date, datetime, time
from typing import Optional

from pydantic import BaseModel, Field, field_serializer

from .domain.services import BookingRequest
from .models import SPECIAL_REQUESTS_MAX_LENGTH, Booking, BookingStatus, Table


class TableRead(BaseModel):
    table_id: int
    restaurant_id: int
    table_number: str
    seating_capacity: int
    is_active: bool

    @classmethod
    def from_db(cls, *, table: Table) -> "TableRead":
        return cls(
            table_id=table.id,
            restaurant_id=table.restaurant_id,
            table_number=table.table_number,
            seating_capacity=table.seating_capacity,
            is_active=bool(table.is_active),
        )


class TableAvailability(BaseModel):
    table_id: int
    booking_date: date
    booking_time: time
    available: bool


class BookingCreate(BaseModel):
    customer_id: int
    restaurant_id: int
    booking_date: date
    booking_time: time
    guest_count: int = Field(ge=1)
    table_id: Optional[int] = None
    special_requests: Optional[str] = Field(default=None, max_length=SPECIAL_REQUESTS_MAX_LENGTH)

    def to_request(self) -> BookingRequest:
        return BookingRequest(
            customer_id=self.customer_id,
            restaurant_id=self.restaurant_id,
            booking_date=self.booking_date,
            booking_time=self.booking_time,
            guest_count=self.guest_count,
            table_id=self.table_id,
            special_requests=self.special_requests,
        )


class BookingValidation(BaseModel):
    is_valid: bool
    error: Optional[str] = None


class BookingRead(BaseModel):
    booking_id: int
    customer_id: int
    restaurant_id: int
    table_id: Optional[int]
    booking_date: date
    booking_time: time
    guest_count: int
    status: BookingStatus
    special_requests: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @field_serializer("created_at", "updated_at")
    def _ser_datetime(self, dt: datetime) -> str:
        return dt.isoformat() + "Z"

    @classmethod
    def from_db(cls, *, booking: Booking) -> "BookingRead":
        return cls(
            booking_id=booking.id,
            customer_id=booking.customer_id,
            restaurant_id=booking.restaurant_id,
            table_id=booking.table_id,
            booking_date=booking.booking_date,
            booking_time=booking.booking_time,
            guest_count=booking.guest_count,
            status=booking.status,
            special_requests=booking.special_requests,
            created_at=booking.created_at,
            updated_at=booking.updated_at,
        )
