#!/usr/bin/env python3
# hotel/cli.py - simple interactive console client for the hotel records API
# Usage:
#   hotel-cli [--url http://127.0.0.1:3000]
#
# Commands:
#   customers | rooms | available | bookings | payments | staff
#   book <customer_id> <room_id> <check_in> <check_out> <total_amount>
#   exit

import argparse
import os
from typing import List, Optional

import requests

DEFAULT_URL = os.environ.get("HOTEL_URL", "http://127.0.0.1:3000")

LISTINGS = {
    "customers": "/api/customers",
    "rooms": "/api/rooms",
    "available": "/api/rooms/available",
    "bookings": "/api/bookings",
    "payments": "/api/payments",
    "staff": "/api/staff",
}


def parse_args(argv: Optional[List[str]] = None):
    ap = argparse.ArgumentParser(description="Interactive hotel records CLI")
    ap.add_argument("--url", default=DEFAULT_URL, help="Base URL, default %(default)s")
    return ap.parse_args(argv)


def call(base_url: str, method: str, path: str, payload: Optional[dict] = None):
    url = base_url.rstrip("/") + path
    try:
        r = requests.request(method, url, json=payload, timeout=30)
    except requests.exceptions.RequestException as e:
        return {"error": str(e)}
    try:
        body = r.json()
    except ValueError:
        body = {"message": r.text}
    if r.status_code >= 400:
        msg = body.get("message") if isinstance(body, dict) else body
        return {"error": f"{r.status_code} {msg}"}
    return body


def parse_book(parts: List[str]) -> dict:
    """book <customer_id> <room_id> <check_in> <check_out> <total_amount>"""
    if len(parts) != 5:
        raise ValueError(
            "usage: book <customer_id> <room_id> <check_in> <check_out> <total_amount>"
        )
    cid, rid, cin, cout, amount = parts
    return {
        "customer_id": int(cid),
        "room_id": int(rid),
        "check_in_date": cin,
        "check_out_date": cout,
        "total_amount": float(amount),
    }


def format_rows(obj) -> str:
    if isinstance(obj, dict) and "error" in obj:
        return f"[error] {obj['error']}"
    if isinstance(obj, dict):
        obj = [obj]
    if not obj:
        return "(no rows)"
    lines = []
    for row in obj:
        lines.append("  ".join(f"{k}={v}" for k, v in row.items()))
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None):
    args = parse_args(argv)
    base_url = args.url

    print(f"Hotel CLI ready. Base URL: {base_url}")
    print("Commands: " + ", ".join(LISTINGS) + ", book ..., exit")

    while True:
        try:
            line = input("> ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nbye")
            break

        if not line:
            continue
        cmd, *rest = line.split()
        cmd = cmd.lower()
        if cmd in ("exit", "quit"):
            print("bye")
            break
        if cmd in LISTINGS:
            print(format_rows(call(base_url, "GET", LISTINGS[cmd])))
            continue
        if cmd == "book":
            try:
                payload = parse_book(rest)
            except ValueError as e:
                print(e)
                continue
            print(format_rows(call(base_url, "POST", "/api/bookings", payload)))
            continue
        print(f"unknown command: {cmd}")


if __name__ == "__main__":
    main()
