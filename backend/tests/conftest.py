import asyncio
import itertools
from datetime import date, datetime, time
from typing import Callable, Iterable, Optional

import pytest
from tablebook.models import ACTIVE_STATUSES, Booking, BookingStatus, Customer, Restaurant, Table
from tablebook.usecases.availability import TableAvailabilityChecker
from tablebook.usecases.bookings import BookingManager
from tablebook.utils.locks import KeyedLocks

FIXED_NOW = datetime(2031, 5, 1, 12, 0)
SEEDED_AT = datetime(2031, 4, 1, 9, 0)
BOOKING_DAY = date(2031, 5, 8)


class InMemoryStore:
    def __init__(self) -> None:
        self.restaurants: dict[int, Restaurant] = {}
        self.tables: dict[int, Table] = {}
        self.customers: dict[int, Customer] = {}
        self.bookings: dict[int, Booking] = {}
        self._ids = itertools.count(1)

    def add_restaurant(self, *, name: str = "Trattoria", is_active: bool = True) -> Restaurant:
        restaurant = Restaurant(
            id=next(self._ids),
            name=name,
            location="1 Main St",
            capacity=40,
            is_active=is_active,
            created_at=SEEDED_AT,
            updated_at=SEEDED_AT,
        )
        self.restaurants[restaurant.id] = restaurant
        return restaurant

    def add_table(self, restaurant: Restaurant, *, seating_capacity: int, is_active: bool = True) -> Table:
        table_id = next(self._ids)
        table = Table(
            id=table_id,
            restaurant_id=restaurant.id,
            table_number=f"T{table_id}",
            seating_capacity=seating_capacity,
            is_active=is_active,
            created_at=SEEDED_AT,
            updated_at=SEEDED_AT,
        )
        self.tables[table.id] = table
        return table

    def add_customer(self, *, first_name: str = "Ada", last_name: str = "Lovelace") -> Customer:
        customer = Customer(
            id=next(self._ids),
            first_name=first_name,
            last_name=last_name,
            email=f"{first_name.lower()}@example.com",
            phone_number="555-0100",
            created_at=SEEDED_AT,
            updated_at=SEEDED_AT,
        )
        self.customers[customer.id] = customer
        return customer

    def add_booking(
        self,
        *,
        customer: Customer,
        table: Table,
        booking_time: time,
        booking_date: date = BOOKING_DAY,
        guest_count: int = 2,
        status: BookingStatus = BookingStatus.PENDING,
    ) -> Booking:
        booking = Booking(
            id=next(self._ids),
            customer_id=customer.id,
            restaurant_id=table.restaurant_id,
            table_id=table.id,
            booking_date=booking_date,
            booking_time=booking_time,
            guest_count=guest_count,
            status=status,
            created_at=SEEDED_AT,
            updated_at=SEEDED_AT,
        )
        self.bookings[booking.id] = booking
        return booking

    def next_id(self) -> int:
        return next(self._ids)


class FakeRestaurantRepo:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def get(self, restaurant_id: int) -> Optional[Restaurant]:
        await asyncio.sleep(0)
        return self.store.restaurants.get(restaurant_id)


class FakeCustomerRepo:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def get(self, customer_id: int) -> Optional[Customer]:
        await asyncio.sleep(0)
        return self.store.customers.get(customer_id)


class FakeTableRepo:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store
        self.locked: list[int] = []
        # Called with the table id right after the row lock is taken; lets tests inject a racing writer.
        self.on_lock: Optional[Callable[[int], None]] = None

    async def get(self, table_id: int) -> Optional[Table]:
        await asyncio.sleep(0)
        return self.store.tables.get(table_id)

    async def get_for_update(self, table_id: int) -> Optional[Table]:
        await asyncio.sleep(0)
        self.locked.append(table_id)
        if self.on_lock is not None:
            self.on_lock(table_id)
        return self.store.tables.get(table_id)

    async def list_by_restaurant(self, restaurant_id: int) -> list[Table]:
        await asyncio.sleep(0)
        return [t for t in self.store.tables.values() if t.restaurant_id == restaurant_id]


class FakeBookingRepo:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store
        self.saved: list[int] = []

    async def get(self, booking_id: int) -> Optional[Booking]:
        await asyncio.sleep(0)
        return self.store.bookings.get(booking_id)

    async def get_for_update(self, booking_id: int) -> Optional[Booking]:
        return await self.get(booking_id)

    async def list_active_for_tables(self, table_ids: Iterable[int], booking_date: date) -> list[Booking]:
        await asyncio.sleep(0)
        ids = set(table_ids)
        return [
            b
            for b in self.store.bookings.values()
            if b.table_id in ids and b.booking_date == booking_date and b.status in ACTIVE_STATUSES
        ]

    async def list_by_customer(self, customer_id: int) -> list[Booking]:
        await asyncio.sleep(0)
        return [b for b in self.store.bookings.values() if b.customer_id == customer_id]

    async def add(self, booking: Booking) -> Booking:
        await asyncio.sleep(0)
        booking.id = self.store.next_id()
        self.store.bookings[booking.id] = booking
        return booking

    async def save(self, booking: Booking) -> Booking:
        await asyncio.sleep(0)
        self.saved.append(booking.id)
        self.store.bookings[booking.id] = booking
        return booking


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def table_repo(store: InMemoryStore) -> FakeTableRepo:
    return FakeTableRepo(store)


@pytest.fixture
def booking_repo(store: InMemoryStore) -> FakeBookingRepo:
    return FakeBookingRepo(store)


@pytest.fixture
def availability(
    store: InMemoryStore, table_repo: FakeTableRepo, booking_repo: FakeBookingRepo
) -> TableAvailabilityChecker:
    return TableAvailabilityChecker(FakeRestaurantRepo(store), table_repo, booking_repo)


@pytest.fixture
def manager(
    store: InMemoryStore,
    table_repo: FakeTableRepo,
    booking_repo: FakeBookingRepo,
    availability: TableAvailabilityChecker,
) -> BookingManager:
    return BookingManager(
        FakeRestaurantRepo(store),
        FakeCustomerRepo(store),
        table_repo,
        booking_repo,
        availability,
        locks=KeyedLocks(),
        clock=lambda: FIXED_NOW,
    )
