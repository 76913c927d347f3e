import logging
from datetime import datetime
from typing import Callable

from ..domain.errors import ConflictError, NotFoundError, ValidationError
from ..domain.interfaces import AvailabilityChecker
from ..domain.repositories import BookingRepository, CustomerRepository, RestaurantRepository, TableRepository
from ..domain.services import BookingRequest, BookingResult
from ..models import SPECIAL_REQUESTS_MAX_LENGTH, Booking, BookingStatus, Table
from ..utils.locks import KeyedLocks
from ..utils.time import utc_now_naive

logger = logging.getLogger(__name__)

# One initial attempt plus a single retry after a lost race.
MAX_RESERVE_ATTEMPTS = 2

# Shared across requests in this process; serializes create per (restaurant, date).
slot_locks = KeyedLocks()


class BookingManager:
    def __init__(
        self,
        restaurant_repo: RestaurantRepository,
        customer_repo: CustomerRepository,
        table_repo: TableRepository,
        booking_repo: BookingRepository,
        availability: AvailabilityChecker,
        *,
        locks: KeyedLocks = slot_locks,
        clock: Callable[[], datetime] = utc_now_naive,
    ) -> None:
        self.restaurant_repo = restaurant_repo
        self.customer_repo = customer_repo
        self.table_repo = table_repo
        self.booking_repo = booking_repo
        self.availability = availability
        self.locks = locks
        self.clock = clock

    async def validate_booking(self, booking: BookingRequest) -> tuple[bool, str | None]:
        try:
            await self._check(booking)
        except ValidationError as exc:
            return False, exc.reason
        return True, None

    async def create_booking(self, booking: BookingRequest) -> BookingResult:
        """
        Validate, pick the best-fit table (unless one is pre-assigned) and persist a pending booking.
        Returns the refusal reason as data; raises ConflictError when a concurrent writer
        takes the slot twice in a row.
        """
        async with self.locks.hold((booking.restaurant_id, booking.booking_date)):
            is_valid, error = await self.validate_booking(booking)
            if not is_valid:
                return BookingResult.rejected(error or "booking is invalid")

            for attempt in range(1, MAX_RESERVE_ATTEMPTS + 1):
                table = await self._reserve_table(booking)
                if table is not None:
                    created = await self._persist(booking, table)
                    return BookingResult.created(created)
                logger.warning(
                    "booking race lost for restaurant=%s date=%s time=%s (attempt %d)",
                    booking.restaurant_id,
                    booking.booking_date,
                    booking.booking_time,
                    attempt,
                )
        raise ConflictError("table was booked concurrently")

    async def cancel_booking(self, booking_id: int) -> bool:
        booking = await self.booking_repo.get_for_update(booking_id)
        if booking is None or not booking.can_be_cancelled():
            return False
        # Table assignment is kept; cancelled bookings no longer block the slot.
        booking.cancel(self.clock())
        await self.booking_repo.save(booking)
        return True

    async def get_upcoming_bookings(self, customer_id: int) -> list[Booking]:
        if await self.customer_repo.get(customer_id) is None:
            raise NotFoundError(f"customer {customer_id} not found")
        now = self.clock()
        bookings = await self.booking_repo.list_by_customer(customer_id)
        upcoming = [booking for booking in bookings if booking.is_upcoming(now)]
        return sorted(upcoming, key=lambda booking: (booking.effective_at, booking.id))

    async def get_booking(self, booking_id: int) -> Booking:
        booking = await self.booking_repo.get(booking_id)
        if booking is None:
            raise NotFoundError(f"booking {booking_id} not found")
        return booking

    async def confirm_booking(self, booking_id: int) -> Booking:
        return await self._transition(booking_id, BookingStatus.CONFIRMED)

    async def complete_booking(self, booking_id: int) -> Booking:
        return await self._transition(booking_id, BookingStatus.COMPLETED)

    async def mark_no_show(self, booking_id: int) -> Booking:
        return await self._transition(booking_id, BookingStatus.NO_SHOW)

    async def _transition(self, booking_id: int, status: BookingStatus) -> Booking:
        booking = await self.booking_repo.get_for_update(booking_id)
        if booking is None:
            raise NotFoundError(f"booking {booking_id} not found")
        booking.transition_to(status, self.clock())
        return await self.booking_repo.save(booking)

    async def _check(self, booking: BookingRequest) -> None:
        """Raise ValidationError on the first violated rule, in a fixed order."""
        if booking.guest_count <= 0:
            raise ValidationError("guest count must be positive")
        if booking.special_requests is not None and len(booking.special_requests) > SPECIAL_REQUESTS_MAX_LENGTH:
            raise ValidationError(f"special requests must be at most {SPECIAL_REQUESTS_MAX_LENGTH} characters")
        if booking.booking_date < self.clock().date():
            raise ValidationError("booking date is in the past")

        restaurant = await self.restaurant_repo.get(booking.restaurant_id)
        if restaurant is None:
            raise ValidationError("restaurant not found")
        if not restaurant.is_active:
            raise ValidationError("restaurant is not accepting bookings")
        if await self.customer_repo.get(booking.customer_id) is None:
            raise ValidationError("customer not found")

        if booking.table_id is not None:
            table = await self.table_repo.get(booking.table_id)
            if table is None or table.restaurant_id != booking.restaurant_id:
                raise ValidationError("table does not belong to this restaurant")
            if not table.is_active:
                raise ValidationError("table is not active")
            if table.seating_capacity < booking.guest_count:
                raise ValidationError(f"table seats at most {table.seating_capacity} guests")
            if not await self.availability.is_table_available(table.id, booking.booking_date, booking.booking_time):
                raise ValidationError("table is already booked at this time")
            return

        tables = await self.availability.get_available_tables(
            booking.restaurant_id, booking.booking_date, booking.booking_time, booking.guest_count
        )
        if not tables:
            raise ValidationError(f"no table available for {booking.guest_count} guests at this time")

    async def _reserve_table(self, booking: BookingRequest) -> Table | None:
        """Lock the candidate table row and re-check it is still free."""
        if booking.table_id is not None:
            table_id = booking.table_id
        else:
            tables = await self.availability.get_available_tables(
                booking.restaurant_id, booking.booking_date, booking.booking_time, booking.guest_count
            )
            if not tables:
                return None
            table_id = tables[0].id

        table = await self.table_repo.get_for_update(table_id)
        if table is None:
            raise NotFoundError(f"table {table_id} not found")
        if not await self.availability.is_table_available(table_id, booking.booking_date, booking.booking_time):
            return None
        return table

    async def _persist(self, booking: BookingRequest, table: Table) -> Booking:
        now = self.clock()
        record = Booking(
            customer_id=booking.customer_id,
            restaurant_id=booking.restaurant_id,
            table_id=table.id,
            booking_date=booking.booking_date,
            booking_time=booking.booking_time,
            guest_count=booking.guest_count,
            status=BookingStatus.PENDING,
            special_requests=booking.special_requests,
            created_at=now,
            updated_at=now,
        )
        return await self.booking_repo.add(record)
