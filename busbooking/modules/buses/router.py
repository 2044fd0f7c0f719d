from typing import List

from fastapi import APIRouter, Depends, Query

from busbooking.schemas.bus import BusOut, SeatAvailabilityResponse
from busbooking.services.booking_service import BookingService
from busbooking.services.bus_catalog import BusCatalog
from busbooking.services.deps import get_booking_service, get_catalog

router = APIRouter(tags=["buses"])


@router.get("/", response_model=List[BusOut])
async def list_buses(catalog: BusCatalog = Depends(get_catalog)):
    return [BusOut.from_model(bus) for bus in await catalog.list_buses()]


@router.get("/{bus_id}", response_model=BusOut)
async def get_bus(bus_id: int, catalog: BusCatalog = Depends(get_catalog)):
    return BusOut.from_model(await catalog.get_bus(bus_id))


@router.get("/{bus_id}/seats", response_model=SeatAvailabilityResponse)
async def get_bus_seats(
    bus_id: int,
    date: str = Query(..., min_length=1, description="Travel date"),
    service: BookingService = Depends(get_booking_service),
):
    seats = await service.get_bus_seats(bus_id, date)
    return SeatAvailabilityResponse(bus_id=bus_id, travel_date=date, seats=seats)
