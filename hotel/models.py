from datetime import date
from typing import Optional

from sqlmodel import Field, SQLModel


class Customer(SQLModel, table=True):
    __tablename__ = "Customers"

    customer_id: int | None = Field(default=None, primary_key=True)
    name: str
    phone: str
    email: Optional[str] = None
    address: Optional[str] = None


class Room(SQLModel, table=True):
    __tablename__ = "Rooms"

    room_id: int | None = Field(default=None, primary_key=True)
    room_type: str
    price_per_night: float
    is_available: bool = Field(default=True)


class Booking(SQLModel, table=True):
    __tablename__ = "Bookings"

    booking_id: int | None = Field(default=None, primary_key=True)
    customer_id: int = Field(foreign_key="Customers.customer_id")
    room_id: int = Field(foreign_key="Rooms.room_id")
    check_in_date: date
    check_out_date: date
    total_amount: float


class Payment(SQLModel, table=True):
    __tablename__ = "Payments"

    payment_id: int | None = Field(default=None, primary_key=True)
    booking_id: int = Field(foreign_key="Bookings.booking_id")
    payment_date: date
    amount: float
    payment_method: str


class Staff(SQLModel, table=True):
    __tablename__ = "Staff"

    staff_id: int | None = Field(default=None, primary_key=True)
    name: str
    role: str
    phone: Optional[str] = None
    email: Optional[str] = None
