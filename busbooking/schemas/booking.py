from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Passenger(BaseModel):
    name: str
    age: Optional[int] = Field(None, ge=0, le=130)
    gender: Optional[str] = None


class CreateBookingRequest(BaseModel):
    bus_id: int
    travel_date: str = Field(..., min_length=1, description="Travel date, kept as given")
    seat_number: str = Field(..., min_length=1)
    passenger: Optional[Passenger] = None


class BookingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    bus_id: int
    seat_number: str
    travel_date: str
    booking_date: datetime
    status: str
    passenger: Optional[Passenger] = None


class PassengerDetail(BaseModel):
    name: str
    seat_number: str
    age: str
    gender: str


class BookingDetail(BaseModel):
    """A ledger entry joined with the bus it was made on."""

    id: int
    booking_ref: str
    bus_id: int
    bus_name: str
    bus_type: str
    origin: str
    destination: str
    departure: str
    arrival: str
    total_price: float
    seats: list[str]
    status: str
    date: str
    booking_date: datetime
    passengers: list[PassengerDetail]


class CancelResponse(BaseModel):
    success: bool = True
    message: str = "Booking cancelled successfully"


class ReconcileRequest(BaseModel):
    bus_id: int
    travel_date: str


class ReconcileReport(BaseModel):
    bus_id: int
    travel_date: str
    released: list[str] = []
    held: list[str] = []
    # changed too recently, or moved while reconciling
    skipped: list[str] = []
