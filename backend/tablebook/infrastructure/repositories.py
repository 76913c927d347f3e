from __future__ import annotations

from datetime import date
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain.repositories import BookingRepository, CustomerRepository, RestaurantRepository, TableRepository
from ..models import ACTIVE_STATUSES, Booking, Customer, Restaurant, Table


class SqlAlchemyRestaurantRepository(RestaurantRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, restaurant_id: int) -> Restaurant | None:
        return await self.session.get(Restaurant, restaurant_id)


class SqlAlchemyCustomerRepository(CustomerRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, customer_id: int) -> Customer | None:
        return await self.session.get(Customer, customer_id)


class SqlAlchemyTableRepository(TableRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, table_id: int) -> Table | None:
        return await self.session.get(Table, table_id)

    async def get_for_update(self, table_id: int) -> Table | None:
        result = await self.session.scalar(
            select(Table)
            .where(Table.id == table_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result if isinstance(result, Table) else None

    async def list_by_restaurant(self, restaurant_id: int) -> list[Table]:
        stmt = select(Table).where(Table.restaurant_id == restaurant_id).order_by(Table.id)
        return list((await self.session.scalars(stmt)).all())


class SqlAlchemyBookingRepository(BookingRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, booking_id: int) -> Booking | None:
        return await self.session.get(Booking, booking_id)

    async def get_for_update(self, booking_id: int) -> Booking | None:
        result = await self.session.scalar(
            select(Booking)
            .where(Booking.id == booking_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result if isinstance(result, Booking) else None

    async def list_active_for_tables(self, table_ids: Iterable[int], booking_date: date) -> list[Booking]:
        ids = list(table_ids)
        if not ids:
            return []
        stmt = select(Booking).where(
            Booking.table_id.in_(ids),
            Booking.booking_date == booking_date,
            Booking.status.in_(sorted(ACTIVE_STATUSES)),
        ).execution_options(populate_existing=True)
        return list((await self.session.scalars(stmt)).all())

    async def list_by_customer(self, customer_id: int) -> list[Booking]:
        stmt = select(Booking).where(Booking.customer_id == customer_id)
        return list((await self.session.scalars(stmt)).all())

    async def add(self, booking: Booking) -> Booking:
        self.session.add(booking)
        await self.session.flush()
        return booking

    async def save(self, booking: Booking) -> Booking:
        self.session.add(booking)
        await self.session.flush()
        return booking
