"""Seat availability per (bus, travel date).

Every change of a seat's ``is_available`` flag is a single conditional
``UPDATE`` evaluated by the database. Nothing here reads a flag, decides in
Python and writes it back.
"""

import enum
import logging
import time
from datetime import datetime, timezone
from typing import Callable, Optional

from sqlalchemy import select as sa_select
from sqlalchemy import update as sa_update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from busbooking.db.session import Database
from busbooking.errors import StorageError
from busbooking.metrics import SEAT_RESERVE_LATENCY, SEAT_RESERVE_RESULTS
from busbooking.models.models import SeatAvailability
from busbooking.schemas.bus import Seat
from busbooking.services.bus_catalog import BusCatalog

logger = logging.getLogger(__name__)

_CONFLICT_COLUMNS = ["bus_id", "travel_date", "seat_number"]


class ReserveOutcome(enum.Enum):
    RESERVED = "reserved"
    SEAT_TAKEN = "seat_taken"
    SEAT_NOT_FOUND = "seat_not_found"


class ReleaseOutcome(enum.Enum):
    RELEASED = "released"
    SEAT_NOT_FOUND = "seat_not_found"


def derive_default_seats(total_seats: int) -> list[Seat]:
    """Seats "1".."total_seats", all free, in ascending order."""
    return [Seat(seat_number=str(n), is_available=True) for n in range(1, total_seats + 1)]


def _seat_in_range(seat_number: str, total_seats: int) -> bool:
    # exact string match: "01" is not seat "1"
    if not seat_number.isdigit() or str(int(seat_number)) != seat_number:
        return False
    return 1 <= int(seat_number) <= total_seats


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _key(bus_id: int, travel_date: str):
    return SeatAvailability.bus_id == bus_id, SeatAvailability.travel_date == travel_date


def _dialect_insert(dialect_name: str):
    if dialect_name == "postgresql":
        stmt = postgresql.insert(SeatAvailability)
    elif dialect_name == "sqlite":
        stmt = sqlite.insert(SeatAvailability)
    else:
        raise NotImplementedError(f"seat materialization is not supported on {dialect_name}")
    return stmt


class SeatAvailabilityStore:
    def __init__(
        self,
        database: Database,
        catalog: BusCatalog,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.db = database
        self.catalog = catalog
        # stamps updated_at on every flag write
        self.clock = clock or _utcnow

    async def get_document(self, bus_id: int, travel_date: str) -> list[Seat]:
        """Stored seats for the key, empty when it was never materialized."""
        try:
            async with self.db.session() as session:
                res = await session.execute(
                    sa_select(SeatAvailability.seat_number, SeatAvailability.is_available)
                    .where(*_key(bus_id, travel_date))
                    .order_by(SeatAvailability.position)
                )
                return [Seat(seat_number=number, is_available=available) for number, available in res.all()]
        except SQLAlchemyError as exc:
            logger.exception("Seat lookup failed", extra={"bus_id": bus_id, "travel_date": travel_date})
            raise StorageError(f"Could not load seats for bus {bus_id} on {travel_date}") from exc

    async def get_seats(self, bus_id: int, travel_date: str) -> list[Seat]:
        seats = await self.get_document(bus_id, travel_date)
        if seats:
            return seats
        bus = await self.catalog.get_bus(bus_id)
        return derive_default_seats(bus.total_seats)

    async def try_reserve(self, bus_id: int, travel_date: str, seat_number: str) -> ReserveOutcome:
        """Flip one seat from available to taken, or report why not."""
        start = time.perf_counter()
        total_seats = None
        if not await self._is_materialized(bus_id, travel_date):
            total_seats = (await self.catalog.get_bus(bus_id)).total_seats
            if not _seat_in_range(seat_number, total_seats):
                return self._record(ReserveOutcome.SEAT_NOT_FOUND, start)

        try:
            async with self.db.session() as session:
                async with session.begin():
                    if total_seats is not None:
                        await self._materialize(session, bus_id, travel_date, total_seats)
                    res = await session.execute(
                        sa_update(SeatAvailability)
                        .where(*_key(bus_id, travel_date))
                        .where(SeatAvailability.seat_number == seat_number)
                        .where(SeatAvailability.is_available.is_(True))
                        .values(is_available=False, updated_at=self.clock())
                        .execution_options(synchronize_session=False)
                    )
                    if res.rowcount == 1:
                        outcome = ReserveOutcome.RESERVED
                    elif await self._seat_exists(session, bus_id, travel_date, seat_number):
                        outcome = ReserveOutcome.SEAT_TAKEN
                    else:
                        outcome = ReserveOutcome.SEAT_NOT_FOUND
        except SQLAlchemyError as exc:
            SEAT_RESERVE_RESULTS.labels(result="error").inc()
            logger.exception(
                "Seat reservation failed",
                extra={"bus_id": bus_id, "travel_date": travel_date, "seat_number": seat_number},
            )
            raise StorageError(f"Could not reserve seat {seat_number} on bus {bus_id} for {travel_date}") from exc
        return self._record(outcome, start)

    async def release(self, bus_id: int, travel_date: str, seat_number: str) -> ReleaseOutcome:
        """Mark a seat available again. Releasing a free seat is a no-op."""
        try:
            async with self.db.session() as session:
                async with session.begin():
                    res = await session.execute(
                        sa_update(SeatAvailability)
                        .where(*_key(bus_id, travel_date))
                        .where(SeatAvailability.seat_number == seat_number)
                        .values(is_available=True, updated_at=self.clock())
                        .execution_options(synchronize_session=False)
                    )
                    matched = res.rowcount
        except SQLAlchemyError as exc:
            logger.exception(
                "Seat release failed",
                extra={"bus_id": bus_id, "travel_date": travel_date, "seat_number": seat_number},
            )
            raise StorageError(f"Could not release seat {seat_number} on bus {bus_id} for {travel_date}") from exc

        if matched:
            return ReleaseOutcome.RELEASED
        if await self._is_materialized(bus_id, travel_date):
            return ReleaseOutcome.SEAT_NOT_FOUND
        # never materialized: every seat in range is already free
        bus = await self.catalog.get_bus(bus_id)
        if _seat_in_range(seat_number, bus.total_seats):
            return ReleaseOutcome.RELEASED
        return ReleaseOutcome.SEAT_NOT_FOUND

    async def set_availability(
        self,
        bus_id: int,
        travel_date: str,
        seat_number: str,
        available: bool,
        expected: Optional[bool] = None,
        unchanged_since: Optional[datetime] = None,
    ) -> bool:
        """Flag write for the reconciliation path. Returns False when nothing matched.

        ``expected`` only writes while the flag still holds that value;
        ``unchanged_since`` only writes when the seat was last changed at or
        before that instant, which leaves reservations still in flight alone.
        """
        stmt = (
            sa_update(SeatAvailability)
            .where(*_key(bus_id, travel_date))
            .where(SeatAvailability.seat_number == seat_number)
        )
        if expected is not None:
            stmt = stmt.where(SeatAvailability.is_available.is_(expected))
        if unchanged_since is not None:
            stmt = stmt.where(SeatAvailability.updated_at <= unchanged_since)
        try:
            async with self.db.session() as session:
                async with session.begin():
                    res = await session.execute(
                        stmt.values(is_available=available, updated_at=self.clock()).execution_options(
                            synchronize_session=False
                        )
                    )
                    return res.rowcount > 0
        except SQLAlchemyError as exc:
            logger.exception("Seat flag write failed", extra={"bus_id": bus_id, "seat_number": seat_number})
            raise StorageError(f"Could not update seat {seat_number} on bus {bus_id} for {travel_date}") from exc

    async def _is_materialized(self, bus_id: int, travel_date: str) -> bool:
        try:
            async with self.db.session() as session:
                res = await session.execute(
                    sa_select(SeatAvailability.id).where(*_key(bus_id, travel_date)).limit(1)
                )
                return res.first() is not None
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not load seats for bus {bus_id} on {travel_date}") from exc

    async def _materialize(self, session: AsyncSession, bus_id: int, travel_date: str, total_seats: int):
        # concurrent materializations of the same key insert identical rows
        now = self.clock()
        rows = [
            {
                "bus_id": bus_id,
                "travel_date": travel_date,
                "seat_number": seat.seat_number,
                "position": position,
                "is_available": True,
                "updated_at": now,
            }
            for position, seat in enumerate(derive_default_seats(total_seats), start=1)
        ]
        stmt = _dialect_insert(self.db.dialect_name).values(rows)
        await session.execute(stmt.on_conflict_do_nothing(index_elements=_CONFLICT_COLUMNS))
        logger.info(
            "Materialized seat availability",
            extra={"bus_id": bus_id, "travel_date": travel_date, "total_seats": total_seats},
        )

    async def _seat_exists(self, session: AsyncSession, bus_id: int, travel_date: str, seat_number: str) -> bool:
        res = await session.execute(
            sa_select(SeatAvailability.id)
            .where(*_key(bus_id, travel_date))
            .where(SeatAvailability.seat_number == seat_number)
        )
        return res.first() is not None

    def _record(self, outcome: ReserveOutcome, start: float) -> ReserveOutcome:
        SEAT_RESERVE_RESULTS.labels(result=outcome.value).inc()
        SEAT_RESERVE_LATENCY.observe(time.perf_counter() - start)
        return outcome
