#!/usr/bin/env python3
"""
Database Seeding for QuoteDesk

Usage:
    python -m quotedesk.seed                 # Create admin user if no users exist
    SEED_DEMO=true python -m quotedesk.seed  # Also create demo agents and catalog

Safe to run multiple times (idempotent). Does not change the schema.
"""

import os
from decimal import Decimal

from quotedesk.auth import hash_password
from quotedesk.database import SessionLocal, init_db
from quotedesk.models import Agent, Category, Item, User


ADMIN_USER = {
    "email": os.getenv("SEED_ADMIN_EMAIL", "admin@quotedesk.local"),
    "full_name": "QuoteDesk Admin",
    "role": "Admin",
    "password": os.getenv("SEED_ADMIN_PASSWORD", "change-me-now"),
}

DEMO_AGENTS = [
    {"name": "Dana Reyes", "company_name": "Reyes Telecom Partners", "commission_rate": Decimal("15")},
    {"name": "Sam Okafor", "company_name": "Northline Connect", "commission_rate": Decimal("12.5")},
]

DEMO_CATEGORIES = [
    {"name": "Dedicated Fiber", "type": "Circuit", "minimum_markup": Decimal("20")},
    {"name": "Broadband", "type": "Circuit", "minimum_markup": Decimal("15")},
    {"name": "Hosted Voice", "type": "Service", "minimum_markup": Decimal("25")},
]

DEMO_ITEMS = [
    {"name": "Fiber Circuit 100M", "category": "Dedicated Fiber", "price": Decimal("650"), "cost": Decimal("480"), "charge_type": "MRC"},
    {"name": "Fiber Install", "category": "Dedicated Fiber", "price": Decimal("1500"), "cost": Decimal("1000"), "charge_type": "NRC"},
    {"name": "Cable Broadband 500M", "category": "Broadband", "price": Decimal("140"), "cost": Decimal("95"), "charge_type": "MRC"},
    {"name": "Hosted Seat", "category": "Hosted Voice", "price": Decimal("25"), "cost": Decimal("14"), "charge_type": "MRC"},
]


def seed_admin_user(db) -> bool:
    """
    Create the admin user if no users exist in the database.
    Returns True if user was created, False if skipped.
    """
    email = ADMIN_USER["email"].strip().lower()
    user_count = db.query(User).count()
    if user_count > 0:
        print(f"  [SKIP] {user_count} user(s) already exist - admin user not needed")
        return False

    print(f"  [CREATE] Admin user: {email}")
    db.add(
        User(
            email=email,
            full_name=ADMIN_USER["full_name"],
            role=ADMIN_USER["role"],
            password_hash=hash_password(ADMIN_USER["password"]),
            is_active=True,
        )
    )
    return True


def seed_demo_catalog(db) -> int:
    """Create demo agents, categories and items that are missing. Returns count created."""
    created = 0

    for data in DEMO_AGENTS:
        if db.query(Agent).filter(Agent.name == data["name"]).first():
            print(f"  [SKIP] Agent exists: {data['name']}")
            continue
        print(f"  [CREATE] Agent: {data['name']} ({data['commission_rate']}%)")
        db.add(Agent(**data))
        created += 1

    categories = {}
    for data in DEMO_CATEGORIES:
        category = db.query(Category).filter(Category.name == data["name"]).first()
        if not category:
            print(f"  [CREATE] Category: {data['name']}")
            category = Category(**data)
            db.add(category)
            created += 1
        categories[data["name"]] = category
    db.flush()

    for data in DEMO_ITEMS:
        if db.query(Item).filter(Item.name == data["name"]).first():
            print(f"  [SKIP] Item exists: {data['name']}")
            continue
        print(f"  [CREATE] Item: {data['name']}")
        fields = {k: v for k, v in data.items() if k != "category"}
        db.add(Item(category_id=categories[data["category"]].id, **fields))
        created += 1

    return created


def main():
    """Main seeding entry point."""
    print("=" * 60)
    print("QUOTEDESK - DATABASE SEEDING")
    print("=" * 60)

    seed_demo = os.getenv("SEED_DEMO", "false").lower() == "true"
    init_db()

    db = SessionLocal()
    try:
        print("Phase 1: Admin User")
        admin_created = seed_admin_user(db)

        demo_created = 0
        if seed_demo:
            print("\nPhase 2: Demo Catalog")
            demo_created = seed_demo_catalog(db)
        else:
            print("\nPhase 2: Demo Catalog [SKIPPED - set SEED_DEMO=true to enable]")

        db.commit()

        print("\n" + "=" * 60)
        total = (1 if admin_created else 0) + demo_created
        print(f"SEEDING COMPLETE - created {total} record(s)")
        print("=" * 60)

    except Exception as e:
        db.rollback()
        print(f"\n[ERROR] Seeding failed: {e}")
        raise

    finally:
        db.close()


if __name__ == "__main__":
    main()
