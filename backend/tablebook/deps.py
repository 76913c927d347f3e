from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession

from .config import Settings
from .database import async_session
from .infrastructure.repositories import (
    SqlAlchemyBookingRepository,
    SqlAlchemyCustomerRepository,
    SqlAlchemyRestaurantRepository,
    SqlAlchemyTableRepository,
)
from .usecases.availability import TableAvailabilityChecker
from .usecases.bookings import BookingManager


async def get_session() -> AsyncIterator[AsyncSession]:
    async with async_session() as session:
        yield session


def build_availability_checker(session: AsyncSession, settings: Settings) -> TableAvailabilityChecker:
    return TableAvailabilityChecker(
        SqlAlchemyRestaurantRepository(session),
        SqlAlchemyTableRepository(session),
        SqlAlchemyBookingRepository(session),
        window=settings.seating_window,
    )


def build_booking_manager(session: AsyncSession, settings: Settings) -> BookingManager:
    return BookingManager(
        SqlAlchemyRestaurantRepository(session),
        SqlAlchemyCustomerRepository(session),
        SqlAlchemyTableRepository(session),
        SqlAlchemyBookingRepository(session),
        build_availability_checker(session, settings),
    )
