import logging

from sqlalchemy import delete as sa_delete
from sqlalchemy import func as sa_func
from sqlalchemy import select as sa_select

from busbooking.db.session import Database
from busbooking.models.models import Bus

logger = logging.getLogger(__name__)

DEFAULT_FLEET = [
    # (bus_number, bus_type, total_seats, from, to, departure, arrival, price)
    ("Easy Coach - KCH 123A", "Standard", 44, "Nairobi", "Kisumu", "08:15 AM", "04:30 PM", 1450),
    ("Mash East Africa - KDA 456B", "VIP Oxygen", 36, "Nairobi", "Mombasa", "10:00 PM", "06:00 AM", 2200),
    ("Tahmeed - KDB 789C", "Luxury Coach", 32, "Mombasa", "Nairobi", "09:00 AM", "05:00 PM", 1600),
    ("Dreamline - KDC 012D", "Executive", 40, "Nairobi", "Eldoret", "07:30 AM", "01:30 PM", 1300),
    ("Guardian Angel - KDD 345E", "Standard", 52, "Nairobi", "Busia", "09:00 PM", "05:00 AM", 1500),
    ("Modern Coast - KDE 678F", "VIP", 28, "Nairobi", "Mombasa", "08:00 AM", "04:30 PM", 2500),
    ("Super Metro - KDF 901G", "Semi-Luxury", 48, "Nairobi", "Nakuru", "06:00 AM", "09:00 AM", 800),
    ("Transline Galaxy - KDG 234H", "Standard", 14, "Nairobi", "Kisii", "10:00 AM", "04:00 PM", 1200),
    ("Spanish - KDH 567I", "Standard Coach", 52, "Nairobi", "Kakamega", "08:30 PM", "04:30 AM", 1400),
    ("Mash East Africa - KDI 890J", "Standard", 52, "Nairobi", "Malindi", "07:00 PM", "05:00 AM", 1800),
]


async def seed_buses(database: Database, force: bool = False) -> int:
    """Load the default fleet into an empty catalog. Returns the number of buses added."""
    async with database.session() as db:
        async with db.begin():
            if force:
                logger.info("Force seeding enabled, clearing bus catalog")
                await db.execute(sa_delete(Bus))
            count = (await db.execute(sa_select(sa_func.count()).select_from(Bus))).scalar_one()
            if count:
                return 0
            for bus_number, bus_type, total_seats, origin, destination, departure, arrival, price in DEFAULT_FLEET:
                db.add(
                    Bus(
                        bus_number=bus_number,
                        bus_type=bus_type,
                        total_seats=total_seats,
                        origin=origin,
                        destination=destination,
                        departure_time=departure,
                        arrival_time=arrival,
                        price=price,
                    )
                )
    logger.info("Seeded bus catalog", extra={"buses": len(DEFAULT_FLEET)})
    return len(DEFAULT_FLEET)
