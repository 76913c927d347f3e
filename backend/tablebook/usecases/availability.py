from datetime import date, time, timedelta

from ..domain.errors import NotFoundError
from ..domain.repositories import BookingRepository, RestaurantRepository, TableRepository
from ..domain.services import DEFAULT_SEATING_WINDOW, blocks_slot, select_available_tables
from ..models import Table


class TableAvailabilityChecker:
    """Answers table availability questions from the current booking state."""

    def __init__(
        self,
        restaurant_repo: RestaurantRepository,
        table_repo: TableRepository,
        booking_repo: BookingRepository,
        *,
        window: timedelta = DEFAULT_SEATING_WINDOW,
    ) -> None:
        self.restaurant_repo = restaurant_repo
        self.table_repo = table_repo
        self.booking_repo = booking_repo
        self.window = window

    async def get_available_tables(
        self,
        restaurant_id: int,
        booking_date: date,
        booking_time: time,
        guest_count: int,
    ) -> list[Table]:
        restaurant = await self.restaurant_repo.get(restaurant_id)
        if restaurant is None:
            raise NotFoundError(f"restaurant {restaurant_id} not found")
        if not restaurant.is_active:
            return []
        tables = await self.table_repo.list_by_restaurant(restaurant_id)
        if not tables:
            return []
        bookings = await self.booking_repo.list_active_for_tables([t.id for t in tables], booking_date)
        return select_available_tables(
            tables,
            bookings,
            booking_date=booking_date,
            booking_time=booking_time,
            guest_count=guest_count,
            window=self.window,
        )

    async def is_table_available(self, table_id: int, booking_date: date, booking_time: time) -> bool:
        table = await self.table_repo.get(table_id)
        if table is None:
            raise NotFoundError(f"table {table_id} not found")
        bookings = await self.booking_repo.list_active_for_tables([table_id], booking_date)
        return not any(
            booking.table_id == table_id and blocks_slot(booking, booking_date, booking_time, window=self.window)
            for booking in bookings
        )
