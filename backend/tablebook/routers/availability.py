from datetime import date, time
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import Settings, get_settings
from ..deps import build_availability_checker, get_session
from ..domain.errors import NotFoundError
from ..schemas import TableAvailability, TableRead

router = APIRouter(prefix="", tags=["availability"])


@router.get("/restaurants/{restaurant_id}/tables/available", response_model=List[TableRead])
async def list_available_tables(
    restaurant_id: int = Path(..., ge=1),
    booking_date: date = Query(..., description="Calendar date of the seating"),
    booking_time: time = Query(..., description="Time of day of the seating"),
    guests: int = Query(..., ge=1),
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> list[TableRead]:
    checker = build_availability_checker(session, settings)
    try:
        tables = await checker.get_available_tables(restaurant_id, booking_date, booking_time, guests)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="restaurant not found")
    return [TableRead.from_db(table=table) for table in tables]


@router.get("/tables/{table_id}/availability", response_model=TableAvailability)
async def get_table_availability(
    table_id: int = Path(..., ge=1),
    booking_date: date = Query(...),
    booking_time: time = Query(...),
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> TableAvailability:
    checker = build_availability_checker(session, settings)
    try:
        available = await checker.is_table_available(table_id, booking_date, booking_time)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="table not found")
    return TableAvailability(
        table_id=table_id,
        booking_date=booking_date,
        booking_time=booking_time,
        available=available,
    )
