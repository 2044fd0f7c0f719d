from pydantic import BaseModel, ConfigDict


class RouteOut(BaseModel):
    origin: str
    destination: str
    departure_time: str
    arrival_time: str
    price: float


class BusOut(BaseModel):
    id: int
    bus_number: str
    bus_type: str
    total_seats: int
    route: RouteOut

    @classmethod
    def from_model(cls, bus) -> "BusOut":
        return cls(
            id=bus.id,
            bus_number=bus.bus_number,
            bus_type=bus.bus_type,
            total_seats=bus.total_seats,
            route=RouteOut(
                origin=bus.origin,
                destination=bus.destination,
                departure_time=bus.departure_time,
                arrival_time=bus.arrival_time,
                price=float(bus.price),
            ),
        )


class Seat(BaseModel):
    model_config = ConfigDict(frozen=True)

    seat_number: str
    is_available: bool


class SeatAvailabilityResponse(BaseModel):
    bus_id: int
    travel_date: str
    seats: list[Seat]
