import pytest
import pytest_asyncio

from busbooking.config import Settings
from busbooking.db.session import Database
from busbooking.models.models import Bus
from busbooking.services.booking_service import BookingService
from busbooking.services.bus_catalog import BusCatalog
from busbooking.services.ledger import BookingLedger
from busbooking.services.seat_store import SeatAvailabilityStore


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'busbooking-test.db'}",
        SECRET_KEY="test-secret",
        CREATE_SCHEMA_ON_STARTUP=False,
        SEED_BUSES=False,
        LOG_LEVEL="WARNING",
    )


@pytest_asyncio.fixture
async def database(settings):
    db = Database(settings)
    await db.create_all()
    yield db
    await db.dispose()


async def _add_bus(database, total_seats=44, bus_number="B1 - KCH 123A", **route) -> Bus:
    bus = Bus(
        bus_number=bus_number,
        bus_type=route.get("bus_type", "Standard"),
        total_seats=total_seats,
        origin=route.get("origin", "Nairobi"),
        destination=route.get("destination", "Kisumu"),
        departure_time=route.get("departure_time", "08:15 AM"),
        arrival_time=route.get("arrival_time", "04:30 PM"),
        price=route.get("price", 1450),
    )
    async with database.session() as db:
        async with db.begin():
            db.add(bus)
    return bus


@pytest.fixture
def make_bus(database):
    async def _make(**kwargs) -> Bus:
        return await _add_bus(database, **kwargs)

    return _make


@pytest_asyncio.fixture
async def bus(make_bus) -> Bus:
    return await make_bus()


@pytest.fixture
def catalog(database):
    return BusCatalog(database)


@pytest.fixture
def seat_store(database, catalog):
    return SeatAvailabilityStore(database, catalog)


@pytest.fixture
def ledger(database):
    return BookingLedger(database)


@pytest.fixture
def service(catalog, seat_store, ledger):
    return BookingService(catalog, seat_store, ledger)
