from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from uuid import UUID

from core.errors import unwrap
from db.database import get_async_session
from schemas.bookings import BookingCreate, BookingRead, BookingUpdate
from services import bookings

router = APIRouter()


@router.post("/", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
async def create_booking(payload: BookingCreate, db: AsyncSession = Depends(get_async_session)):
    booking = unwrap(await bookings.create_booking(db, payload.user_id, payload.time, payload.clients_nb))
    return BookingRead(**booking.to_schema)


@router.get("/", response_model=List[BookingRead])
async def list_bookings(user_id: Optional[UUID] = None, db: AsyncSession = Depends(get_async_session)):
    return [BookingRead(**b.to_schema) for b in await bookings.list_bookings(db, user_id)]


@router.get("/user/{user_id}", response_model=List[BookingRead])
async def list_user_bookings(user_id: UUID, db: AsyncSession = Depends(get_async_session)):
    return [BookingRead(**b.to_schema) for b in unwrap(await bookings.list_user_bookings(db, user_id))]


@router.get("/{booking_id}", response_model=BookingRead)
async def get_booking(booking_id: int, db: AsyncSession = Depends(get_async_session)):
    booking = unwrap(await bookings.get_booking(db, booking_id))
    return BookingRead(**booking.to_schema)


@router.patch("/{booking_id}", response_model=BookingRead)
async def update_booking(booking_id: int, payload: BookingUpdate, db: AsyncSession = Depends(get_async_session)):
    """Move the booking time or advance its lifecycle (seated, pay enabled, finished, paid)"""
    booking = unwrap(await bookings.update_booking(db, booking_id, payload.model_dump(exclude_unset=True)))
    return BookingRead(**booking.to_schema)


@router.delete("/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_booking(booking_id: int, db: AsyncSession = Depends(get_async_session)):
    unwrap(await bookings.cancel_booking(db, booking_id))
