import logging
from datetime import date
from typing import Any, Dict, List

from fastapi import HTTPException
from sqlalchemy import insert, text
from sqlalchemy.engine import Connection

from ..db import Database
from ..models import Booking

log = logging.getLogger(__name__)

HAS_BOOKINGS_MSG = "Cannot delete customer with existing bookings"
CUSTOMER_NOT_FOUND_MSG = "Customer not found"


def create_booking(
    db: Database,
    customer_id: int,
    room_id: int,
    check_in_date: date,
    check_out_date: date,
    total_amount: float,
) -> Dict[str, Any]:
    """Insert a booking and take its room off the market in one transaction.

    Dates are stored as given; check_out_date is not compared to check_in_date
    and overlapping bookings for the same room are not detected.
    """
    with db.begin() as conn:
        booking_id = conn.execute(
            insert(Booking.__table__).values(
                customer_id=customer_id,
                room_id=room_id,
                check_in_date=check_in_date,
                check_out_date=check_out_date,
                total_amount=total_amount,
            )
        ).inserted_primary_key[0]

        updated = conn.execute(
            text('UPDATE "Rooms" SET is_available = FALSE WHERE room_id = :rid'),
            {"rid": room_id},
        ).rowcount
        if not updated:
            # only reachable with foreign keys off: the booking stays
            log.warning(
                "[bookings] booking %s references missing room %s; availability unchanged",
                booking_id,
                room_id,
            )

    log.info("[bookings] created booking %s for room %s", booking_id, room_id)
    return {
        "booking_id": booking_id,
        "customer_id": customer_id,
        "room_id": room_id,
        "check_in_date": check_in_date,
        "check_out_date": check_out_date,
        "total_amount": total_amount,
    }


def _count_bookings(conn: Connection, customer_id: int) -> int:
    return conn.execute(
        text('SELECT COUNT(*) FROM "Bookings" WHERE customer_id = :cid'),
        {"cid": customer_id},
    ).scalar()


def delete_customer(db: Database, customer_id: int) -> None:
    """Delete a customer unless a booking still references it.

    The guard and the delete are one statement, so a booking inserted
    concurrently either blocks the delete or is rejected by the store.
    """
    with db.begin() as conn:
        deleted = conn.execute(
            text(
                """
                DELETE FROM "Customers"
                 WHERE customer_id = :cid
                   AND NOT EXISTS (
                       SELECT 1 FROM "Bookings" WHERE customer_id = :cid
                   )
            """
            ),
            {"cid": customer_id},
        ).rowcount
        if deleted:
            log.info("[customers] deleted customer %s", customer_id)
            return

        if _count_bookings(conn, customer_id):
            raise HTTPException(status_code=400, detail=HAS_BOOKINGS_MSG)
        raise HTTPException(status_code=404, detail=CUSTOMER_NOT_FOUND_MSG)


def list_bookings(db: Database) -> List[Dict[str, Any]]:
    with db.begin() as conn:
        rows = (
            conn.execute(
                text(
                    """
                SELECT b.booking_id, b.customer_id, b.room_id,
                       b.check_in_date, b.check_out_date, b.total_amount,
                       c.name AS customer_name, r.room_type
                  FROM "Bookings" b
                  JOIN "Customers" c ON b.customer_id = c.customer_id
                  JOIN "Rooms" r ON b.room_id = r.room_id
                 ORDER BY b.booking_id
            """
                )
            )
            .mappings()
            .all()
        )
        return [dict(r) for r in rows]


def list_payments(db: Database) -> List[Dict[str, Any]]:
    with db.begin() as conn:
        rows = (
            conn.execute(
                text(
                    """
                SELECT p.payment_id, p.booking_id, p.payment_date, p.amount,
                       p.payment_method, b.customer_id, c.name AS customer_name
                  FROM "Payments" p
                  JOIN "Bookings" b ON p.booking_id = b.booking_id
                  JOIN "Customers" c ON b.customer_id = c.customer_id
                 ORDER BY p.payment_id
            """
                )
            )
            .mappings()
            .all()
        )
        return [dict(r) for r in rows]
