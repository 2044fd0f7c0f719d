import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from busbooking.main import create_app
from busbooking.services.auth import create_access_token

DATE = "2024-05-01"


@pytest_asyncio.fixture
async def app(settings, database):
    app = create_app(settings)
    yield app
    await app.state.database.dispose()


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def _register(client, username, email, password="secret123"):
    r = await client.post("/auth/register", json={"username": username, "email": email, "password": password})
    assert r.status_code == 201, r.text
    return r.json()


def _bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.mark.asyncio
async def test_register_and_login(client):
    body = await _register(client, "amina", "Amina@Example.com")
    assert body["token_type"] == "bearer"
    assert body["user"]["email"] == "amina@example.com"
    assert body["user"]["role"] == "user"

    r = await client.post("/auth/register", json={"username": "amina", "email": "amina@example.com", "password": "secret123"})
    assert r.status_code == 400

    r = await client.post("/auth/login", data={"username": "amina@example.com", "password": "secret123"})
    assert r.status_code == 200, r.text
    assert r.json()["access_token"]

    r = await client.post("/auth/login", data={"username": "amina@example.com", "password": "wrong-one"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_list_and_get_buses(client, bus):
    r = await client.get("/buses/")
    assert r.status_code == 200
    buses = r.json()
    assert [b["id"] for b in buses] == [bus.id]
    assert buses[0]["route"]["origin"] == "Nairobi"

    r = await client.get(f"/buses/{bus.id}")
    assert r.status_code == 200
    assert r.json()["total_seats"] == 44

    r = await client.get("/buses/999")
    assert r.status_code == 404
    assert r.json()["error"] == "BusNotFound"


@pytest.mark.asyncio
async def test_seat_map_for_unbooked_date(client, bus):
    r = await client.get(f"/buses/{bus.id}/seats", params={"date": DATE})
    assert r.status_code == 200
    body = r.json()
    assert body["travel_date"] == DATE
    assert len(body["seats"]) == 44
    assert all(s["is_available"] for s in body["seats"])

    r = await client.get("/buses/999/seats", params={"date": DATE})
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_booking_flow(client, bus):
    alice = (await _register(client, "alice", "alice@example.com"))["access_token"]
    bob = (await _register(client, "bob", "bob@example.com"))["access_token"]
    payload = {
        "bus_id": bus.id,
        "travel_date": DATE,
        "seat_number": "12",
        "passenger": {"name": "Alice W", "age": 31, "gender": "F"},
    }

    r = await client.post("/bookings/", json=payload, headers=_bearer(alice))
    assert r.status_code == 201, r.text
    booking = r.json()
    assert booking["status"] == "Confirmed"
    assert booking["seat_number"] == "12"

    r = await client.post("/bookings/", json=payload, headers=_bearer(bob))
    assert r.status_code == 409
    assert r.json()["error"] == "SeatAlreadyBooked"

    r = await client.get(f"/buses/{bus.id}/seats", params={"date": DATE})
    taken = [s["seat_number"] for s in r.json()["seats"] if not s["is_available"]]
    assert taken == ["12"]

    r = await client.get("/bookings/", headers=_bearer(alice))
    assert r.status_code == 200
    listing = r.json()
    assert len(listing) == 1
    assert listing[0]["booking_ref"] == f"BK{booking['id']:06d}"
    assert listing[0]["status"] == "confirmed"
    assert listing[0]["passengers"][0]["name"] == "Alice W"

    r = await client.post(f"/bookings/{booking['id']}/cancel", headers=_bearer(bob))
    assert r.status_code == 403
    assert r.json()["error"] == "Unauthorized"

    r = await client.post(f"/bookings/{booking['id']}/cancel", headers=_bearer(alice))
    assert r.status_code == 200
    assert r.json()["success"] is True

    r = await client.post(f"/bookings/{booking['id']}/cancel", headers=_bearer(alice))
    assert r.status_code == 409
    assert r.json()["error"] == "AlreadyCancelled"

    r = await client.post("/bookings/", json=payload, headers=_bearer(bob))
    assert r.status_code == 201


@pytest.mark.asyncio
async def test_booking_errors(client, bus):
    token = (await _register(client, "carol", "carol@example.com"))["access_token"]

    r = await client.post(
        "/bookings/", json={"bus_id": bus.id, "travel_date": DATE, "seat_number": "45"}, headers=_bearer(token)
    )
    assert r.status_code == 400
    assert r.json()["error"] == "InvalidSeat"

    r = await client.post(
        "/bookings/", json={"bus_id": 999, "travel_date": DATE, "seat_number": "1"}, headers=_bearer(token)
    )
    assert r.status_code == 404
    assert r.json()["error"] == "BusNotFound"

    r = await client.post("/bookings/4242/cancel", headers=_bearer(token))
    assert r.status_code == 404
    assert r.json()["error"] == "BookingNotFound"


@pytest.mark.asyncio
async def test_bookings_require_token(client, bus):
    r = await client.post("/bookings/", json={"bus_id": bus.id, "travel_date": DATE, "seat_number": "1"})
    assert r.status_code == 401

    r = await client.get("/bookings/", headers=_bearer("not-a-token"))
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_reconcile_requires_admin(client, settings, bus):
    user_token = create_access_token(settings, "u-1")
    admin_token = create_access_token(settings, "ops", role="admin")
    payload = {"bus_id": bus.id, "travel_date": DATE}

    r = await client.post("/admin/reconcile", json=payload, headers=_bearer(user_token))
    assert r.status_code == 403

    r = await client.post("/admin/reconcile", json=payload, headers=_bearer(admin_token))
    assert r.status_code == 200
    assert r.json() == {"bus_id": bus.id, "travel_date": DATE, "released": [], "held": [], "skipped": []}


@pytest.mark.asyncio
async def test_health_and_metrics(client):
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}
    assert r.headers["x-trace-id"]

    r = await client.get("/health", headers={"X-Trace-Id": "trace-123"})
    assert r.headers["x-trace-id"] == "trace-123"

    r = await client.get("/metrics")
    assert r.status_code == 200
    assert "seat_reserve" in r.text
