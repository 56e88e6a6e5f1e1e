#!/usr/bin/env python3
"""Seed a running Expense Manager with demo expenses.

The server must have been started with EM_SEED_DEMO_USERS=true so the
demo accounts (admin, accountant, manager, user) exist.

Usage:
    python scripts/seed_demo.py
    python scripts/seed_demo.py --base http://localhost:5000 --password password123
"""

from __future__ import annotations

import argparse
import random
import sys
from datetime import datetime, timedelta, timezone

import requests

VENDORS = ["Staples", "IndiGo", "BESCOM", "Google Ads", "WeWork", "Amazon Business"]
MATERIALS = ["Printer paper", "Flight BLR-DEL", "Electricity bill", "Search ads", "Desk rent", "Monitor"]
PAYMENT_METHODS = ["UPI", "Cash", "Card", "Bank Transfer", "Cheque"]


def login(base: str, username: str, password: str) -> dict[str, str]:
    r = requests.post(
        f"{base}/api/login", json={"username": username, "password": password}, timeout=30
    )
    if r.status_code != 200:
        print(f"  WARN login {username} → {r.status_code}: {r.text[:200]}")
        sys.exit(1)
    return {"Authorization": f"Bearer {r.json()['token']}"}


def seed_user(base: str, username: str, password: str, count: int) -> int:
    headers = login(base, username, password)
    categories = requests.get(f"{base}/api/categories", headers=headers, timeout=30).json()
    if not categories:
        print(f"  WARN {username} has no categories")
        return 0

    now = datetime.now(timezone.utc)
    items = []
    for _ in range(count):
        index = random.randrange(len(VENDORS))
        items.append(
            {
                "date": (now - timedelta(days=random.randint(0, 365))).isoformat(),
                "category_id": random.choice(categories)["id"],
                "material_name": MATERIALS[index],
                "vendor_name": VENDORS[index],
                "amount": round(random.uniform(100, 25000), 2),
                "payment_method": random.choice(PAYMENT_METHODS),
            }
        )

    r = requests.post(f"{base}/api/expenses/bulk", json=items, headers=headers, timeout=30)
    if r.status_code != 201:
        print(f"  WARN bulk {username} → {r.status_code}: {r.text[:200]}")
        return 0
    return len(r.json())


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed demo expenses over HTTP")
    parser.add_argument("--base", default="http://localhost:5000")
    parser.add_argument("--password", default="password123")
    parser.add_argument("--count", type=int, default=40, help="Expenses per demo account")
    args = parser.parse_args()

    print("═══ Seeding demo expenses ═══")
    for username in ("admin", "accountant", "manager", "user"):
        created = seed_user(args.base.rstrip("/"), username, args.password, args.count)
        print(f"  {username}: {created} expenses")

    health = requests.get(f"{args.base.rstrip('/')}/health", timeout=30).json()
    print(f"Done. Server {health.get('version')} is {health.get('status')}.")


if __name__ == "__main__":
    main()
