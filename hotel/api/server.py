from typing import Optional
import logging
import os
import time

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Path, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from fastapi.staticfiles import StaticFiles
from prometheus_client import Counter, Histogram, make_asgi_app
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..db import Database
from ..models import Booking, Customer, Payment, Room, Staff
from ..repositories.booking_repo import (
    create_booking,
    delete_customer,
    list_bookings,
    list_payments,
)
from ..repositories.rooms_repo import RoomsRepo
from ..repositories.table_repo import TableRepo
from ..utils.schemas import (
    MAX_ID,
    BookingIn,
    CustomerIn,
    PaymentIn,
    RoomIn,
    StaffIn,
)
from .crud import add_crud_routes, get_db

log = logging.getLogger(__name__)

# --- Feature flags ---
OBS_ON = os.getenv("OBS_ON", "on") == "on"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
STATIC_DIR = os.getenv("STATIC_DIR", "public")

# --- Metrics ---
requests_total = Counter("hotel_requests_total", "Total API requests")
latency_seconds = Histogram("hotel_request_latency_seconds", "API request latency")

booking_create_ok = Counter("booking_create_ok_total", "Bookings created")
booking_create_fail = Counter("booking_create_fail_total", "Failed booking requests")
customer_delete_refused = Counter(
    "customer_delete_refused_total", "Customer deletes refused due to bookings"
)


# --- Customers ---
customers = APIRouter(prefix="/api/customers", tags=["customers"])


@customers.put("/{customer_id}")
def update_customer(
    body: CustomerIn,
    customer_id: int = Path(ge=1, le=MAX_ID),
    db: Database = Depends(get_db),
):
    row = TableRepo(db, Customer).update(customer_id, body.model_dump())
    if row is None:
        raise HTTPException(status_code=404, detail="Customer not found")
    return row


@customers.delete("/{customer_id}")
def remove_customer(customer_id: int = Path(ge=1, le=MAX_ID), db: Database = Depends(get_db)):
    try:
        delete_customer(db, customer_id)
    except HTTPException as e:
        if e.status_code == 400:
            customer_delete_refused.inc()
        raise e
    return {"message": "Customer deleted successfully"}


add_crud_routes(customers, Customer, CustomerIn, "Customer")


# --- Rooms ---
rooms = APIRouter(prefix="/api/rooms", tags=["rooms"])


@rooms.get("/available")
def available_rooms(db: Database = Depends(get_db)):
    return RoomsRepo(db).available()


add_crud_routes(rooms, Room, RoomIn, "Room")


# --- Bookings ---
bookings = APIRouter(prefix="/api/bookings", tags=["bookings"])


@bookings.get("")
def get_bookings(db: Database = Depends(get_db)):
    return list_bookings(db)


@bookings.post("", status_code=201)
def post_booking(req: BookingIn, db: Database = Depends(get_db)):
    try:
        row = create_booking(
            db,
            customer_id=req.customer_id,
            room_id=req.room_id,
            check_in_date=req.check_in_date,
            check_out_date=req.check_out_date,
            total_amount=req.total_amount,
        )
    except Exception:
        booking_create_fail.inc()
        raise
    booking_create_ok.inc()
    return row


add_crud_routes(bookings, Booking, BookingIn, "Booking", listing=False, create=False)


# --- Payments ---
payments = APIRouter(prefix="/api/payments", tags=["payments"])


@payments.get("")
def get_payments(db: Database = Depends(get_db)):
    return list_payments(db)


add_crud_routes(payments, Payment, PaymentIn, "Payment", listing=False)


# --- Staff ---
staff = APIRouter(prefix="/api/staff", tags=["staff"])
add_crud_routes(staff, Staff, StaffIn, "Staff")


# --- Maintenance ---
admin = APIRouter(tags=["admin"])


@admin.delete("/api/drop-database")
def drop_database(request: Request, db: Database = Depends(get_db)):
    key = request.app.state.admin_key
    # no key configured means the endpoint is switched off
    if not key or request.headers.get("X-Admin-Key") != key:
        raise HTTPException(status_code=403, detail="forbidden")
    db.reset()
    return {"message": "Database tables dropped and recreated successfully"}


@admin.get("/health")
def health():
    return {"status": "ok"}


# --- Error bodies ---


async def http_error(request: Request, exc: StarletteHTTPException) -> ORJSONResponse:
    return ORJSONResponse(
        {"message": exc.detail},
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


async def validation_error(request: Request, exc: RequestValidationError) -> ORJSONResponse:
    return ORJSONResponse(
        {"message": "Invalid request", "errors": jsonable_encoder(exc.errors())},
        status_code=422,
    )


async def storage_error(request: Request, exc: SQLAlchemyError) -> ORJSONResponse:
    log.error("[db] %s %s failed: %s", request.method, request.url.path, exc, exc_info=exc)
    return ORJSONResponse({"message": "Database error"}, status_code=500)


# --- App factory ---


def create_app(
    db: Optional[Database] = None,
    admin_key: Optional[str] = None,
    obs: Optional[bool] = None,
    static_dir: Optional[str] = None,
) -> FastAPI:
    logging.basicConfig(
        level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    db = db or Database()
    obs = OBS_ON if obs is None else obs
    static_dir = static_dir or STATIC_DIR

    app = FastAPI(title="Hotel Records", default_response_class=ORJSONResponse)
    app.state.db = db
    app.state.admin_key = admin_key if admin_key is not None else os.getenv("ADMIN_KEY")

    app.add_middleware(
        CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"]
    )

    app.add_exception_handler(StarletteHTTPException, http_error)
    app.add_exception_handler(RequestValidationError, validation_error)
    app.add_exception_handler(SQLAlchemyError, storage_error)

    for r in (customers, rooms, bookings, payments, staff, admin):
        app.include_router(r)

    @app.on_event("startup")
    def on_start() -> None:
        db.init_db()

    @app.on_event("shutdown")
    def on_stop() -> None:
        db.dispose()

    if obs:

        @app.middleware("http")
        async def observe(request: Request, call_next):
            start = time.perf_counter()
            try:
                return await call_next(request)
            finally:
                requests_total.inc()
                latency_seconds.observe(time.perf_counter() - start)

        # Expose /metrics for Prometheus
        app.mount("/metrics", make_asgi_app())

    # front-end files, mounted last so /api wins
    if static_dir and os.path.isdir(static_dir):
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "3000"))
    )
