from fastapi import APIRouter, Depends

from busbooking.auth.deps import role_required
from busbooking.schemas.auth import Principal
from busbooking.schemas.booking import ReconcileReport, ReconcileRequest
from busbooking.services.booking_service import BookingService
from busbooking.services.deps import get_booking_service

router = APIRouter(tags=["admin"])


@router.post("/reconcile", response_model=ReconcileReport)
async def reconcile_seats(
    req: ReconcileRequest,
    current_user: Principal = Depends(role_required(["admin"])),
    service: BookingService = Depends(get_booking_service),
):
    """Make the seat flags of one bus/date agree with its confirmed bookings."""
    return await service.reconcile_seats(req.bus_id, req.travel_date)
