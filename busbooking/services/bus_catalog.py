import logging

from sqlalchemy import select as sa_select
from sqlalchemy.exc import SQLAlchemyError

from busbooking.db.session import Database
from busbooking.errors import BusNotFoundError, StorageError
from busbooking.models.models import Bus

logger = logging.getLogger(__name__)


class BusCatalog:
    """Read-only view of the bus fleet."""

    def __init__(self, database: Database):
        self.db = database

    async def get_bus(self, bus_id: int) -> Bus:
        try:
            async with self.db.session() as session:
                bus = await session.get(Bus, bus_id)
        except SQLAlchemyError as exc:
            logger.exception("Bus lookup failed", extra={"bus_id": bus_id})
            raise StorageError(f"Could not load bus {bus_id}") from exc
        if bus is None:
            raise BusNotFoundError(bus_id)
        return bus

    async def list_buses(self) -> list[Bus]:
        try:
            async with self.db.session() as session:
                res = await session.execute(sa_select(Bus).order_by(Bus.id))
                return list(res.scalars().all())
        except SQLAlchemyError as exc:
            logger.exception("Bus listing failed")
            raise StorageError("Could not list buses") from exc
