import logging

from sqlalchemy import select as sa_select
from sqlalchemy import update as sa_update
from sqlalchemy.exc import SQLAlchemyError

from busbooking.db.session import Database
from busbooking.errors import StorageError
from busbooking.models.models import BOOKING_CONFIRMED, Booking

logger = logging.getLogger(__name__)


class BookingLedger:
    """All booking records, confirmed or cancelled.

    The ledger does not check seat uniqueness; that is settled by the seat
    store before a record is ever inserted.
    """

    def __init__(self, database: Database):
        self.db = database

    async def insert(self, booking: Booking) -> Booking:
        try:
            async with self.db.session() as session:
                async with session.begin():
                    session.add(booking)
                    # id is assigned here; nothing may fail after the commit
                    await session.flush()
        except SQLAlchemyError as exc:
            logger.exception(
                "Booking insert failed",
                extra={"user_id": booking.user_id, "bus_id": booking.bus_id, "seat_number": booking.seat_number},
            )
            raise StorageError("Could not store booking") from exc
        return booking

    async def find_by_id(self, booking_id: int) -> Booking | None:
        try:
            async with self.db.session() as session:
                return await session.get(Booking, booking_id)
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not load booking {booking_id}") from exc

    async def find_by_user(self, user_id: str) -> list[Booking]:
        try:
            async with self.db.session() as session:
                res = await session.execute(sa_select(Booking).where(Booking.user_id == user_id).order_by(Booking.id))
                return list(res.scalars().all())
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not load bookings for user {user_id}") from exc

    async def find_confirmed(self, bus_id: int, travel_date: str) -> list[Booking]:
        try:
            async with self.db.session() as session:
                res = await session.execute(
                    sa_select(Booking)
                    .where(Booking.bus_id == bus_id)
                    .where(Booking.travel_date == travel_date)
                    .where(Booking.status == BOOKING_CONFIRMED)
                    .order_by(Booking.id)
                )
                return list(res.scalars().all())
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not load bookings for bus {bus_id} on {travel_date}") from exc

    async def set_status(self, booking_id: int, new_status: str, expected_status: str | None = None) -> bool:
        """Write the status field. Returns False when nothing matched.

        With ``expected_status`` the write only happens while the record
        still carries that status.
        """
        stmt = sa_update(Booking).where(Booking.id == booking_id)
        if expected_status is not None:
            stmt = stmt.where(Booking.status == expected_status)
        try:
            async with self.db.session() as session:
                async with session.begin():
                    res = await session.execute(
                        stmt.values(status=new_status).execution_options(synchronize_session=False)
                    )
                    return res.rowcount == 1
        except SQLAlchemyError as exc:
            logger.exception("Booking status update failed", extra={"booking_id": booking_id, "status": new_status})
            raise StorageError(f"Could not update booking {booking_id}") from exc
