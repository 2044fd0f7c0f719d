"""Error kinds raised by the booking core.

Every kind carries a stable ``code`` and the HTTP status the API layer maps it
to, so no failure ever reaches a client as a generic error.
"""


class BookingError(Exception):
    code = "BookingError"
    status_code = 400

    def __init__(self, message: str | None = None):
        self.message = message or self.code
        super().__init__(self.message)


class BusNotFoundError(BookingError):
    code = "BusNotFound"
    status_code = 404

    def __init__(self, bus_id):
        self.bus_id = bus_id
        super().__init__(f"Bus {bus_id} not found")


class InvalidSeatError(BookingError):
    code = "InvalidSeat"
    status_code = 400

    def __init__(self, bus_id, seat_number: str):
        self.bus_id = bus_id
        self.seat_number = seat_number
        super().__init__(f"Seat {seat_number} does not exist on bus {bus_id}")


class SeatAlreadyBookedError(BookingError):
    code = "SeatAlreadyBooked"
    status_code = 409

    def __init__(self, bus_id, travel_date: str, seat_number: str):
        self.bus_id = bus_id
        self.travel_date = travel_date
        self.seat_number = seat_number
        super().__init__(f"Seat {seat_number} on bus {bus_id} for {travel_date} is already booked")


class BookingNotFoundError(BookingError):
    code = "BookingNotFound"
    status_code = 404

    def __init__(self, booking_id):
        self.booking_id = booking_id
        super().__init__(f"Booking {booking_id} not found")


class UnauthorizedError(BookingError):
    """The booking belongs to another user."""

    code = "Unauthorized"
    status_code = 403

    def __init__(self, booking_id):
        self.booking_id = booking_id
        super().__init__(f"Booking {booking_id} belongs to another user")


class AlreadyCancelledError(BookingError):
    code = "AlreadyCancelled"
    status_code = 409

    def __init__(self, booking_id):
        self.booking_id = booking_id
        super().__init__(f"Booking {booking_id} is already cancelled")


class StorageError(BookingError):
    """Underlying I/O fault. Transient from the caller's point of view."""

    code = "StorageFailure"
    status_code = 503


class SeatReleaseFailedError(StorageError):
    """A seat stayed unavailable although nothing holds it any more.

    Raised when the booking record reached its final state but the seat flag
    could not be flipped back. Needs operator reconciliation.
    """

    def __init__(self, bus_id, travel_date: str, seat_number: str, booking_id=None):
        self.bus_id = bus_id
        self.travel_date = travel_date
        self.seat_number = seat_number
        self.booking_id = booking_id
        super().__init__(
            f"Seat {seat_number} on bus {bus_id} for {travel_date} could not be released"
            + (f" (booking {booking_id})" if booking_id is not None else "")
        )
