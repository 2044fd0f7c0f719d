"""Booking orchestration.

Creating a booking reserves the seat, then records the booking; cancelling
marks the booking, then frees the seat. The seat store and the ledger commit
independently, so each of these is a two-step saga with an explicit undo
instead of one transaction.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from busbooking.errors import (
    AlreadyCancelledError,
    BookingError,
    BookingNotFoundError,
    InvalidSeatError,
    SeatAlreadyBookedError,
    SeatReleaseFailedError,
    StorageError,
    UnauthorizedError,
)
from busbooking.metrics import BOOKING_ATTEMPTS, BOOKING_CANCELS, COMPENSATIONS
from busbooking.models.models import BOOKING_CANCELLED, BOOKING_CONFIRMED, Booking
from busbooking.schemas.booking import (
    BookingDetail,
    CreateBookingRequest,
    PassengerDetail,
    ReconcileReport,
)
from busbooking.schemas.bus import Seat
from busbooking.services.bus_catalog import BusCatalog
from busbooking.services.ledger import BookingLedger
from busbooking.services.seat_store import ReleaseOutcome, ReserveOutcome, SeatAvailabilityStore

logger = logging.getLogger(__name__)

UNKNOWN_BUS = "Unknown Bus"
UNKNOWN = "Unknown"

# how long a changed seat is left alone by reconcile_seats
DEFAULT_RECONCILE_GRACE = timedelta(minutes=2)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BookingService:
    def __init__(
        self,
        catalog: BusCatalog,
        seats: SeatAvailabilityStore,
        ledger: BookingLedger,
        clock: Optional[Callable[[], datetime]] = None,
        reconcile_grace: timedelta = DEFAULT_RECONCILE_GRACE,
    ):
        self.catalog = catalog
        self.seats = seats
        self.ledger = ledger
        self.clock = clock or _utcnow
        self.reconcile_grace = reconcile_grace

    async def get_bus_seats(self, bus_id: int, travel_date: str) -> list[Seat]:
        return await self.seats.get_seats(bus_id, travel_date)

    async def create_booking(self, user_id: str, request: CreateBookingRequest) -> Booking:
        bus_id, travel_date, seat_number = request.bus_id, request.travel_date, request.seat_number
        log_ctx = {"user_id": user_id, "bus_id": bus_id, "travel_date": travel_date, "seat_number": seat_number}

        try:
            await self.catalog.get_bus(bus_id)
            outcome = await self.seats.try_reserve(bus_id, travel_date, seat_number)
        except BookingError as exc:
            BOOKING_ATTEMPTS.labels(result=exc.code).inc()
            raise
        if outcome is ReserveOutcome.SEAT_TAKEN:
            BOOKING_ATTEMPTS.labels(result=SeatAlreadyBookedError.code).inc()
            logger.info("Seat already booked", extra=log_ctx)
            raise SeatAlreadyBookedError(bus_id, travel_date, seat_number)
        if outcome is ReserveOutcome.SEAT_NOT_FOUND:
            BOOKING_ATTEMPTS.labels(result=InvalidSeatError.code).inc()
            raise InvalidSeatError(bus_id, seat_number)

        try:
            booking = await self.ledger.insert(
                Booking(
                    user_id=user_id,
                    bus_id=bus_id,
                    seat_number=seat_number,
                    travel_date=travel_date,
                    booking_date=self.clock(),
                    status=BOOKING_CONFIRMED,
                    passenger=request.passenger.model_dump() if request.passenger else None,
                )
            )
        except Exception as exc:
            BOOKING_ATTEMPTS.labels(result="insert_failed").inc()
            await self._compensate_reservation(bus_id, travel_date, seat_number, exc)
            if isinstance(exc, BookingError):
                raise
            raise StorageError("Could not store booking") from exc

        BOOKING_ATTEMPTS.labels(result="confirmed").inc()
        logger.info("Booking confirmed", extra={**log_ctx, "booking_id": booking.id})
        return booking

    async def _compensate_reservation(self, bus_id: int, travel_date: str, seat_number: str, cause: Exception):
        logger.warning(
            "Booking insert failed after seat reservation, releasing seat",
            extra={"bus_id": bus_id, "travel_date": travel_date, "seat_number": seat_number, "cause": repr(cause)},
        )
        try:
            await self.seats.release(bus_id, travel_date, seat_number)
        except Exception as release_exc:
            COMPENSATIONS.labels(outcome="failed").inc()
            logger.exception(
                "Compensating seat release failed, seat left orphaned",
                extra={"bus_id": bus_id, "travel_date": travel_date, "seat_number": seat_number},
            )
            raise SeatReleaseFailedError(bus_id, travel_date, seat_number) from release_exc
        COMPENSATIONS.labels(outcome="released").inc()

    async def cancel_booking(self, booking_id: int, user_id: str) -> None:
        booking = await self.ledger.find_by_id(booking_id)
        if booking is None:
            BOOKING_CANCELS.labels(result=BookingNotFoundError.code).inc()
            raise BookingNotFoundError(booking_id)
        if booking.user_id != user_id:
            BOOKING_CANCELS.labels(result=UnauthorizedError.code).inc()
            logger.warning("Cancel attempted by non-owner", extra={"booking_id": booking_id, "user_id": user_id})
            raise UnauthorizedError(booking_id)
        if booking.status == BOOKING_CANCELLED:
            BOOKING_CANCELS.labels(result=AlreadyCancelledError.code).inc()
            raise AlreadyCancelledError(booking_id)

        changed = await self.ledger.set_status(booking_id, BOOKING_CANCELLED, expected_status=BOOKING_CONFIRMED)
        if not changed:
            # a concurrent cancel got there first
            BOOKING_CANCELS.labels(result=AlreadyCancelledError.code).inc()
            raise AlreadyCancelledError(booking_id)

        try:
            outcome = await self.seats.release(booking.bus_id, booking.travel_date, booking.seat_number)
        except BookingError as exc:
            BOOKING_CANCELS.labels(result="release_failed").inc()
            logger.error(
                "Booking cancelled but seat release failed; needs reconciliation",
                extra={
                    "booking_id": booking_id,
                    "bus_id": booking.bus_id,
                    "travel_date": booking.travel_date,
                    "seat_number": booking.seat_number,
                },
            )
            raise SeatReleaseFailedError(
                booking.bus_id, booking.travel_date, booking.seat_number, booking_id=booking_id
            ) from exc
        if outcome is ReleaseOutcome.SEAT_NOT_FOUND:
            logger.warning(
                "Cancelled booking referenced an unknown seat",
                extra={"booking_id": booking_id, "bus_id": booking.bus_id, "seat_number": booking.seat_number},
            )

        BOOKING_CANCELS.labels(result="cancelled").inc()
        logger.info("Booking cancelled", extra={"booking_id": booking_id, "user_id": user_id})

    async def get_user_bookings(self, user_id: str) -> list[BookingDetail]:
        bookings = await self.ledger.find_by_user(user_id)
        buses = {}
        details = []
        for b in bookings:
            if b.bus_id not in buses:
                buses[b.bus_id] = await self._lookup_bus(b.bus_id)
            details.append(_detail(b, buses[b.bus_id]))
        return details

    async def _lookup_bus(self, bus_id: int):
        # one bad join must not hide the rest of the listing
        try:
            return await self.catalog.get_bus(bus_id)
        except BookingError:
            logger.warning("Bus lookup failed while listing bookings", extra={"bus_id": bus_id})
            return None

    async def reconcile_seats(self, bus_id: int, travel_date: str) -> ReconcileReport:
        """Rewrite the seat flags of a (bus, date) to agree with the ledger.

        Repairs what a failed compensation or a failed cancel release leaves
        behind. Keys that were never materialized have nothing to repair.

        A seat that changed within ``reconcile_grace`` may belong to a
        booking whose insert has not landed yet, so it is left alone and
        reported as skipped. Each write is also conditional on the flag value
        read here; a seat that moved in between is skipped too.
        """
        report = ReconcileReport(bus_id=bus_id, travel_date=travel_date)
        seats = await self.seats.get_document(bus_id, travel_date)
        if not seats:
            return report
        cutoff = self.clock() - self.reconcile_grace
        held = {b.seat_number for b in await self.ledger.find_confirmed(bus_id, travel_date)}
        for seat in seats:
            should_be_available = seat.seat_number not in held
            if seat.is_available == should_be_available:
                continue
            written = await self.seats.set_availability(
                bus_id,
                travel_date,
                seat.seat_number,
                should_be_available,
                expected=seat.is_available,
                unchanged_since=cutoff,
            )
            if not written:
                report.skipped.append(seat.seat_number)
            elif should_be_available:
                report.released.append(seat.seat_number)
            else:
                report.held.append(seat.seat_number)
        logger.info(
            "Seat availability reconciled",
            extra={
                "bus_id": bus_id,
                "travel_date": travel_date,
                "released": report.released,
                "held": report.held,
                "skipped": report.skipped,
            },
        )
        return report


def _detail(booking: Booking, bus) -> BookingDetail:
    passenger = booking.passenger or {}
    return BookingDetail(
        id=booking.id,
        booking_ref=f"BK{booking.id:06d}",
        bus_id=booking.bus_id,
        bus_name=bus.bus_number if bus else UNKNOWN_BUS,
        bus_type=bus.bus_type if bus else UNKNOWN,
        origin=bus.origin if bus else UNKNOWN,
        destination=bus.destination if bus else UNKNOWN,
        departure=bus.departure_time if bus else UNKNOWN,
        arrival=bus.arrival_time if bus else UNKNOWN,
        total_price=float(bus.price) if bus else 0.0,
        seats=[booking.seat_number],
        status=booking.status.lower(),
        date=booking.travel_date,
        booking_date=booking.booking_date,
        passengers=[
            PassengerDetail(
                name=passenger.get("name") or "User",
                seat_number=booking.seat_number,
                age=str(passenger["age"]) if passenger.get("age") is not None else "N/A",
                gender=passenger.get("gender") or "N/A",
            )
        ],
    )
