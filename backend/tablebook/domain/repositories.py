from __future__ import annotations

from datetime import date
from typing import Iterable, Protocol

from ..models import Booking, Customer, Restaurant, Table


class RestaurantRepository(Protocol):
    async def get(self, restaurant_id: int) -> Restaurant | None: ...


class CustomerRepository(Protocol):
    async def get(self, customer_id: int) -> Customer | None: ...


class TableRepository(Protocol):
    async def get(self, table_id: int) -> Table | None: ...

    async def get_for_update(self, table_id: int) -> Table | None: ...

    async def list_by_restaurant(self, restaurant_id: int) -> list[Table]: ...


class BookingRepository(Protocol):
    async def get(self, booking_id: int) -> Booking | None: ...

    async def get_for_update(self, booking_id: int) -> Booking | None: ...

    async def list_active_for_tables(self, table_ids: Iterable[int], booking_date: date) -> list[Booking]: ...

    async def list_by_customer(self, customer_id: int) -> list[Booking]: ...

    async def add(self, booking: Booking) -> Booking: ...

    async def save(self, booking: Booking) -> Booking: ...
