from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

# largest key a 64-bit integer column can hold
MAX_ID = 2**63 - 1


# -------- Customers / Staff --------


class CustomerIn(BaseModel):
    name: str
    phone: str
    email: Optional[str] = None
    address: Optional[str] = None


class StaffIn(BaseModel):
    name: str
    role: str
    phone: Optional[str] = None
    email: Optional[str] = None


# -------- Rooms --------


class RoomIn(BaseModel):
    room_type: str
    price_per_night: float = Field(ge=0)
    is_available: bool = True


# -------- Bookings / Payments --------


class BookingIn(BaseModel):
    customer_id: int = Field(ge=1, le=MAX_ID)
    room_id: int = Field(ge=1, le=MAX_ID)
    check_in_date: date  # ISO date, ordering against check_out_date is not checked
    check_out_date: date
    total_amount: float = Field(ge=0)


class PaymentIn(BaseModel):
    booking_id: int = Field(ge=1, le=MAX_ID)
    payment_date: date
    amount: float
    payment_method: str
