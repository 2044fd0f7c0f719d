from fastapi import Request

from busbooking.db.session import Database
from busbooking.services.booking_service import BookingService
from busbooking.services.bus_catalog import BusCatalog


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_catalog(request: Request) -> BusCatalog:
    return request.app.state.catalog


def get_booking_service(request: Request) -> BookingService:
    return request.app.state.booking_service
