import logging
from contextlib import contextmanager
from datetime import date

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient
from sqlalchemy import event, text

from hotel.api.server import create_app
from hotel.db import Database
from hotel.models import Booking, Customer, Room
from hotel.repositories.booking_repo import create_booking, delete_customer
from hotel.repositories.table_repo import TableRepo


def test_booking_scenario_marks_room_unavailable(client):
    c = client.post("/api/customers", json={"name": "A", "phone": "1"}).json()
    assert c["customer_id"] == 1
    room = client.post(
        "/api/rooms",
        json={"room_type": "Single", "price_per_night": 100, "is_available": True},
    ).json()
    assert room["room_id"] == 1
    assert [r["room_id"] for r in client.get("/api/rooms/available").json()] == [1]

    r = client.post(
        "/api/bookings",
        json={
            "customer_id": 1,
            "room_id": 1,
            "check_in_date": "2024-01-01",
            "check_out_date": "2024-01-02",
            "total_amount": 100,
        },
    )
    assert r.status_code == 201
    assert r.json() == {
        "booking_id": 1,
        "customer_id": 1,
        "room_id": 1,
        "check_in_date": "2024-01-01",
        "check_out_date": "2024-01-02",
        "total_amount": 100,
    }

    assert client.get("/api/rooms/available").json() == []
    assert client.get("/api/rooms/1").json()["is_available"] is False

    # deleting the customer afterwards is refused and the booking survives
    d = client.delete("/api/customers/1")
    assert d.status_code == 400
    assert d.json()["message"] == "Cannot delete customer with existing bookings"
    assert client.get("/api/bookings/1").status_code == 200


def test_booking_listing_is_joined(client, make_customer, make_room, make_booking):
    cid = make_customer(name="Grace", phone="7")
    rid = make_room(room_type="Deluxe", price=220)
    bid = make_booking(cid, rid, total=440)

    rows = client.get("/api/bookings").json()
    assert rows == [
        {
            "booking_id": bid,
            "customer_id": cid,
            "room_id": rid,
            "check_in_date": "2024-01-01",
            "check_out_date": "2024-01-02",
            "total_amount": 440,
            "customer_name": "Grace",
            "room_type": "Deluxe",
        }
    ]
    assert client.get("/api/bookings").json() == rows


def test_dates_are_not_ordered_or_checked_for_overlap(client, make_customer, make_room, make_booking):
    cid = make_customer()
    rid = make_room()
    # check-out before check-in is stored as given
    make_booking(cid, rid, check_in="2024-02-10", check_out="2024-02-01")
    # the room is already unavailable; a second booking still goes through
    make_booking(cid, rid, check_in="2024-02-05", check_out="2024-02-06")
    assert len(client.get("/api/bookings").json()) == 2


def test_booking_for_unknown_customer_fails_in_storage(client, make_room):
    rid = make_room()
    r = client.post(
        "/api/bookings",
        json={
            "customer_id": 99,
            "room_id": rid,
            "check_in_date": "2024-01-01",
            "check_out_date": "2024-01-02",
            "total_amount": 100,
        },
    )
    assert r.status_code == 500
    assert r.json() == {"message": "Database error"}
    # the availability update rolled back with the insert
    assert client.get(f"/api/rooms/{rid}").json()["is_available"] is True


def test_bad_date_is_rejected(client, make_customer, make_room):
    r = client.post(
        "/api/bookings",
        json={
            "customer_id": make_customer(),
            "room_id": make_room(),
            "check_in_date": "01/01/2024",
            "check_out_date": "2024-01-02",
            "total_amount": 100,
        },
    )
    assert r.status_code == 422


def test_missing_room_is_logged_when_foreign_keys_off(tmp_path, caplog):
    db = Database(f"sqlite:///{tmp_path / 'nofk.db'}", foreign_keys=False)
    db.init_db()
    with caplog.at_level(logging.WARNING, logger="hotel.repositories.booking_repo"):
        row = create_booking(db, 5, 77, date(2024, 1, 1), date(2024, 1, 2), 10.0)
    assert row["booking_id"] == 1
    assert "missing room 77" in caplog.text

    app = create_app(db=db, obs=False, static_dir=str(tmp_path / "none"))
    with TestClient(app) as c:
        assert c.get("/api/bookings/1").json()["room_id"] == 77
    db.dispose()


def test_delete_customer_raises_refusal(db, client, make_customer, make_room, make_booking):
    cid = make_customer()
    make_booking(cid, make_room())
    with pytest.raises(HTTPException) as exc:
        delete_customer(db, cid)
    assert exc.value.status_code == 400


@pytest.fixture
def loose_db(tmp_path):
    d = Database(f"sqlite:///{tmp_path / 'loose.db'}", foreign_keys=False)
    d.init_db()
    yield d
    d.dispose()


def _seed(db):
    cid = TableRepo(db, Customer).insert({"name": "A", "phone": "1"})["customer_id"]
    rid = TableRepo(db, Room).insert({"room_type": "Single", "price_per_night": 100.0})["room_id"]
    return cid, rid


@contextmanager
def booking_lands_before_customer_delete(db, cid, rid):
    """Insert a booking from another connection right before the DELETE hits the store."""
    landed = []

    def before(conn, cursor, statement, params, context, executemany):
        if not landed and statement.lstrip().startswith('DELETE FROM "Customers"'):
            landed.append(create_booking(db, cid, rid, date(2024, 3, 1), date(2024, 3, 2), 100.0))

    event.listen(db.engine, "before_cursor_execute", before)
    try:
        yield landed
    finally:
        event.remove(db.engine, "before_cursor_execute", before)


def count_then_delete(db, customer_id):
    # two separate statements: look for bookings, then delete unconditionally
    with db.begin() as conn:
        count = conn.execute(
            text('SELECT COUNT(*) FROM "Bookings" WHERE customer_id = :cid'),
            {"cid": customer_id},
        ).scalar()
    if count:
        raise HTTPException(status_code=400, detail="Cannot delete customer with existing bookings")
    with db.begin() as conn:
        conn.execute(
            text('DELETE FROM "Customers" WHERE customer_id = :cid'), {"cid": customer_id}
        )


def test_count_then_delete_orphans_booking_landing_in_between(loose_db):
    cid, rid = _seed(loose_db)

    with booking_lands_before_customer_delete(loose_db, cid, rid) as landed:
        count_then_delete(loose_db, cid)

    assert len(landed) == 1
    assert TableRepo(loose_db, Customer).get(cid) is None
    orphans = TableRepo(loose_db, Booking).list_all()
    assert [b["customer_id"] for b in orphans] == [cid]


def test_guarded_delete_refuses_booking_landing_in_between(loose_db):
    cid, rid = _seed(loose_db)

    with booking_lands_before_customer_delete(loose_db, cid, rid) as landed:
        with pytest.raises(HTTPException) as exc:
            delete_customer(loose_db, cid)

    assert len(landed) == 1
    assert exc.value.status_code == 400
    assert TableRepo(loose_db, Customer).get(cid) is not None
    assert len(TableRepo(loose_db, Booking).list_all()) == 1
