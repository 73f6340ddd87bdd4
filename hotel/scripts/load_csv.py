import csv
import os
import sys

from sqlalchemy import text

from hotel.db import Database


# -------- utils --------
def _norm_row(row: dict) -> dict:
    return {
        (k or "")
        .replace("\ufeff", "")
        .strip()
        .lower(): (v.strip() if isinstance(v, str) else v)
        for k, v in row.items()
    }


def _num(x, default=None):
    try:
        if x is None or x == "":
            return default
        return float(str(x).replace(",", ""))
    except ValueError:
        return default


def _bool(x, default=False):
    if x is None or x == "":
        return default
    return str(x).strip().lower() in ("true", "1", "yes", "y")


def _blank_to_none(x):
    return x if x not in ("", None) else None


# -------- loaders --------
def load_customers(db: Database, path: str) -> int:
    n = 0
    with db.begin() as cx, open(path, newline="", encoding="utf-8") as f:
        for raw in csv.DictReader(f):
            r = _norm_row(raw)
            name = r.get("name") or r.get("customer_name")
            phone = r.get("phone") or r.get("phone_number")
            if not name or not phone:
                continue
            cx.execute(
                text(
                    'INSERT INTO "Customers" (name, phone, email, address) '
                    "VALUES (:name, :phone, :email, :address)"
                ),
                {
                    "name": name,
                    "phone": phone,
                    "email": _blank_to_none(r.get("email")),
                    "address": _blank_to_none(r.get("address")),
                },
            )
            n += 1
    return n


def load_rooms(db: Database, path: str) -> int:
    n = 0
    with db.begin() as cx, open(path, newline="", encoding="utf-8") as f:
        for raw in csv.DictReader(f):
            r = _norm_row(raw)
            room_type = r.get("room_type") or r.get("roomtype") or r.get("type")
            price = _num(
                r.get("price_per_night") or r.get("base_rate") or r.get("rate")
            )
            if not room_type or price is None:
                continue
            cx.execute(
                text(
                    'INSERT INTO "Rooms" (room_type, price_per_night, is_available) '
                    "VALUES (:room_type, :price, :available)"
                ),
                {
                    "room_type": room_type,
                    "price": price,
                    "available": _bool(r.get("is_available"), default=True),
                },
            )
            n += 1
    return n


def load_staff(db: Database, path: str) -> int:
    n = 0
    with db.begin() as cx, open(path, newline="", encoding="utf-8") as f:
        for raw in csv.DictReader(f):
            r = _norm_row(raw)
            name = r.get("name")
            role = r.get("role") or r.get("position")
            if not name or not role:
                continue
            cx.execute(
                text(
                    'INSERT INTO "Staff" (name, role, phone, email) '
                    "VALUES (:name, :role, :phone, :email)"
                ),
                {
                    "name": name,
                    "role": role,
                    "phone": _blank_to_none(r.get("phone")),
                    "email": _blank_to_none(r.get("email")),
                },
            )
            n += 1
    return n


LOADERS = [
    ("customers", load_customers),
    ("rooms", load_rooms),
    ("staff", load_staff),
]


def main(data_dir: str = "data") -> None:
    db = Database()
    db.init_db()
    for name, loader in LOADERS:
        path = os.path.join(data_dir, f"{name}.csv")
        if not os.path.exists(path):
            print(f"[load] skip {name}: {path} not found")
            continue
        print(f"[load] {name}: {loader(db, path)} rows")


if __name__ == "__main__":
    main(sys.argv[1] if len(sys.argv) > 1 else "data")
