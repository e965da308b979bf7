#!/usr/bin/env python3
"""
Seed script: creates users, categories and listings via the API (no direct DB).
Users are provisioned on first request from signed provider-style tokens;
categories are created by name through listing creation (get-or-create).
Run: API must be running with the same SECRET_KEY.
  python scripts/seed_data.py
  python scripts/seed_data.py --users 10 --listings-per-user 15
"""

import argparse
import random
import sys
from pathlib import Path

# Project root
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import httpx
from cityshare.core.security import create_access_token

API_BASE = "http://localhost:8000/api/v1"

CATEGORIES = [
    "Clothing", "Tools", "Furniture", "Electronics", "Books",
    "Toys", "Sports Equipment", "Kitchen", "Decor", "Other",
]

ITEMS = [
    ("Blue Denim Jacket", "Gently used denim jacket, size M. Perfect condition!", "Clothing"),
    ("Laptop Stand", "Aluminum laptop stand, adjustable height", "Electronics"),
    ("Winter Coat", "Warm and cozy, size L.", "Clothing"),
    ("IKEA Poang Chair", "Lightly used, pickup in SJ", "Furniture"),
    ("Cordless Drill", "Great for weekend projects", "Tools"),
    ("Calculus Textbook", "8th edition, some highlighting", "Books"),
    ("Desk Lamp", "LED, three brightness levels", "Electronics"),
    ("Yoga Mat", "Barely used, non-slip", "Sports Equipment"),
    ("Rice Cooker", "3-cup, works great", "Kitchen"),
    ("Board Game Bundle", "Catan and Ticket to Ride", "Toys"),
]

CONDITIONS = ["new", "like_new", "good", "fair", "poor"]


def random_listing() -> dict:
    name, description, category = random.choice(ITEMS)
    kind = random.choice(["sell", "sell", "donate", "borrow"])
    body = {
        "item_name": name,
        "description": description,
        "category": category,
        "kind": kind,
        "condition": random.choice(CONDITIONS),
        "images": [f"https://picsum.photos/seed/{random.randint(1, 10_000)}/500"],
    }
    if kind == "sell":
        body["price_cents"] = random.choice([500, 1000, 1500, 2500, 3000, 4500, 9900])
    return body


def main():
    ap = argparse.ArgumentParser(description="Seed users, categories and listings via API")
    ap.add_argument("--users", type=int, default=5, help="Number of users to create")
    ap.add_argument("--listings-per-user", type=int, default=10, help="Listings per user")
    ap.add_argument("--base-url", default=API_BASE, help="API base URL")
    args = ap.parse_args()

    created = 0
    errors = []

    with httpx.Client(base_url=args.base_url, timeout=30.0) as client:
        for i in range(args.users):
            email = f"student{i + 1}@example.com"
            token = create_access_token(
                email, {"user_metadata": {"display_name": f"Student {i + 1}"}}
            )
            headers = {"Authorization": f"Bearer {token}"}

            r = client.post(
                "/profile/update",
                headers=headers,
                json={"username": f"student{i + 1}", "location": "San Jose, CA"},
            )
            if r.status_code != 200:
                errors.append(f"Profile {email}: {r.status_code} {r.text[:80]}")
                continue

            for _ in range(args.listings_per_user):
                try:
                    r = client.post("/listings", headers=headers, json=random_listing())
                    if r.status_code == 201:
                        created += 1
                    else:
                        errors.append(f"Listing {email}: {r.status_code} {r.text[:80]}")
                except httpx.HTTPError as e:
                    errors.append(f"Listing {email}: {e}")
            print(f"  {email}: total listings so far {created}")

        r = client.get("/categories")
        if r.status_code == 200:
            names = [c["name"] for c in r.json()]
            missing = [c for c in CATEGORIES if c not in names]
            print(f"Categories: {len(names)} present; unused seed names: {missing or 'none'}")

    print(f"\nDone. Users: {args.users}, Listings created: {created}")
    if errors:
        print(f"Errors ({len(errors)}):")
        for e in errors[:15]:
            print("  ", e)
        if len(errors) > 15:
            print("  ... and", len(errors) - 15, "more")


if __name__ == "__main__":
    main()
