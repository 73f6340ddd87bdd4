import pytest
from fastapi.testclient import TestClient

from hotel.api.server import create_app
from hotel.db import Database

ADMIN_KEY = "test-admin-key"


@pytest.fixture
def db(tmp_path):
    d = Database(f"sqlite:///{tmp_path / 'hotel.db'}")
    d.init_db()
    yield d
    d.dispose()


@pytest.fixture
def client(db, tmp_path):
    app = create_app(
        db=db, admin_key=ADMIN_KEY, obs=False, static_dir=str(tmp_path / "no-static")
    )
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_customer(client):
    def _make(name="A", phone="1", **extra):
        r = client.post("/api/customers", json={"name": name, "phone": phone, **extra})
        assert r.status_code == 201
        return r.json()["customer_id"]

    return _make


@pytest.fixture
def make_room(client):
    def _make(room_type="Single", price=100, **extra):
        r = client.post(
            "/api/rooms",
            json={"room_type": room_type, "price_per_night": price, **extra},
        )
        assert r.status_code == 201
        return r.json()["room_id"]

    return _make


@pytest.fixture
def make_booking(client):
    def _make(customer_id, room_id, check_in="2024-01-01", check_out="2024-01-02", total=100):
        r = client.post(
            "/api/bookings",
            json={
                "customer_id": customer_id,
                "room_id": room_id,
                "check_in_date": check_in,
                "check_out_date": check_out,
                "total_amount": total,
            },
        )
        assert r.status_code == 201
        return r.json()["booking_id"]

    return _make
