from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.sql import func

from busbooking.db.base import Base

BOOKING_CONFIRMED = "Confirmed"
BOOKING_CANCELLED = "Cancelled"


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True)
    username = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    hashed_password = Column(String(255), nullable=False)
    # "user" or "admin"
    role = Column(String(50), nullable=False, default="user", index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class Bus(Base):
    __tablename__ = "buses"
    id = Column(Integer, primary_key=True)
    bus_number = Column(String(128), nullable=False, index=True)
    bus_type = Column(String(64), nullable=False, default="Standard")
    total_seats = Column(Integer, nullable=False)
    # route
    origin = Column(String(128), nullable=False, index=True)
    destination = Column(String(128), nullable=False, index=True)
    departure_time = Column(String(32), nullable=False)
    arrival_time = Column(String(32), nullable=False)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (CheckConstraint("total_seats > 0", name="ck_bus_total_seats_positive"),)


class SeatAvailability(Base):
    """One seat of one bus on one travel date.

    The rows sharing (bus_id, travel_date) form that key's availability
    document. They are written all at once the first time a seat of the key
    is reserved; until then the key has no rows and every seat is implicitly
    free.
    """

    __tablename__ = "seat_availability"
    id = Column(Integer, primary_key=True)
    bus_id = Column(Integer, nullable=False)
    travel_date = Column(String(32), nullable=False)
    seat_number = Column(String(16), nullable=False)
    position = Column(Integer, nullable=False)
    is_available = Column(Boolean, nullable=False, default=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("bus_id", "travel_date", "seat_number", name="uq_seat_availability_bus_date_seat"),
        Index("ix_seat_availability_bus_date", "bus_id", "travel_date"),
    )


class Booking(Base):
    __tablename__ = "bookings"
    id = Column(Integer, primary_key=True)
    # opaque identifier handed over by the identity provider
    user_id = Column(String(64), nullable=False, index=True)
    bus_id = Column(Integer, nullable=False, index=True)
    seat_number = Column(String(16), nullable=False)
    travel_date = Column(String(32), nullable=False)
    booking_date = Column(DateTime(timezone=True), nullable=False)
    status = Column(String(32), nullable=False, default=BOOKING_CONFIRMED, index=True)
    # {"name": ..., "age": ..., "gender": ...}
    passenger = Column(JSON, nullable=True)

    __table_args__ = (Index("ix_booking_bus_date_seat", "bus_id", "travel_date", "seat_number"),)
