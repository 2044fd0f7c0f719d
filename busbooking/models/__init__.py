from .models import *

__all__ = [
    "Base",
    "User",
    "Bus",
    "SeatAvailability",
    "Booking",
    "BOOKING_CONFIRMED",
    "BOOKING_CANCELLED",
]
