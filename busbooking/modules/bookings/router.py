from typing import List

from fastapi import APIRouter, Depends, status

from busbooking.auth.deps import get_current_user
from busbooking.schemas.auth import Principal
from busbooking.schemas.booking import BookingDetail, BookingResponse, CancelResponse, CreateBookingRequest
from busbooking.services.booking_service import BookingService
from busbooking.services.deps import get_booking_service

router = APIRouter(tags=["bookings"])


@router.post("/", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    req: CreateBookingRequest,
    current_user: Principal = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    """Reserve a seat and record the booking. 409 when the seat is taken."""
    booking = await service.create_booking(current_user.user_id, req)
    return BookingResponse.model_validate(booking)


@router.get("/", response_model=List[BookingDetail])
async def my_bookings(
    current_user: Principal = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    return await service.get_user_bookings(current_user.user_id)


@router.post("/{booking_id}/cancel", response_model=CancelResponse)
async def cancel_booking(
    booking_id: int,
    current_user: Principal = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    await service.cancel_booking(booking_id, current_user.user_id)
    return CancelResponse()
