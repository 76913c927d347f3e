from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import Settings, get_settings
from ..deps import build_booking_manager, get_session
from ..domain.errors import ConflictError, InvalidTransitionError, NotFoundError
from ..domain.interfaces import BookingService
from ..models import Booking, BookingStatus
from ..schemas import BookingCreate, BookingRead, BookingValidation
from ..utils.audit_log import AuditAction, emit_audit_log

router = APIRouter(prefix="", tags=["bookings"])


def _audit(action: AuditAction, booking: Booking, status_from: Optional[BookingStatus]) -> None:
    try:
        emit_audit_log(
            action=action,
            booking_id=booking.id,
            restaurant_id=booking.restaurant_id,
            table_id=booking.table_id,
            customer_id=booking.customer_id,
            guest_count=booking.guest_count,
            status_from=status_from,
            status_to=booking.status,
        )
    except RuntimeError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="audit log failed")


@router.post("/bookings", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
async def create_booking(
    payload: BookingCreate,
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> BookingRead:
    async with session.begin():
        manager = build_booking_manager(session, settings)
        try:
            result = await manager.create_booking(payload.to_request())
        except ConflictError:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="table was just booked, try again")
        if result.booking is None:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_CONTENT, detail=result.error)
        booking = result.booking

    _audit("booking.created", booking, None)
    return BookingRead.from_db(booking=booking)


@router.post("/bookings/validate", response_model=BookingValidation)
async def validate_booking(
    payload: BookingCreate,
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> BookingValidation:
    manager: BookingService = build_booking_manager(session, settings)
    is_valid, error = await manager.validate_booking(payload.to_request())
    return BookingValidation(is_valid=is_valid, error=error)


@router.get("/bookings/{booking_id}", response_model=BookingRead)
async def get_booking(
    booking_id: int = Path(..., ge=1),
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> BookingRead:
    manager = build_booking_manager(session, settings)
    try:
        booking = await manager.get_booking(booking_id)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="booking not found")
    return BookingRead.from_db(booking=booking)


@router.post("/bookings/{booking_id}/cancel", response_model=BookingRead)
async def cancel_booking(
    booking_id: int = Path(..., ge=1),
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> BookingRead:
    async with session.begin():
        manager = build_booking_manager(session, settings)
        try:
            booking = await manager.get_booking(booking_id)
        except NotFoundError:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="booking not found")
        status_from = booking.status
        if not await manager.cancel_booking(booking_id):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"booking in status {status_from} cannot be cancelled",
            )

    _audit("booking.cancelled", booking, status_from)
    return BookingRead.from_db(booking=booking)


@router.post("/bookings/{booking_id}/confirm", response_model=BookingRead)
async def confirm_booking(
    booking_id: int = Path(..., ge=1),
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> BookingRead:
    async with session.begin():
        manager = build_booking_manager(session, settings)
        try:
            booking = await manager.get_booking(booking_id)
            status_from = booking.status
            booking = await manager.confirm_booking(booking_id)
        except NotFoundError:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="booking not found")
        except InvalidTransitionError as exc:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.reason)

    _audit("booking.confirmed", booking, status_from)
    return BookingRead.from_db(booking=booking)


@router.get("/customers/{customer_id}/bookings/upcoming", response_model=List[BookingRead])
async def list_upcoming_bookings(
    customer_id: int = Path(..., ge=1),
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> list[BookingRead]:
    manager: BookingService = build_booking_manager(session, settings)
    try:
        bookings = await manager.get_upcoming_bookings(customer_id)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="customer not found")
    return [BookingRead.from_db(booking=booking) for booking in bookings]
