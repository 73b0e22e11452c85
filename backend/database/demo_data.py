# backend/database/demo_data.py
"""Demo accounts and catalogue for local runs of the order flow."""

from decimal import Decimal
from typing import Dict

from sqlalchemy.orm import Session

from database.session import SessionLocal, init_db
from models.product_model import Product
from models.user_model import User, UserRole

DEMO_USERS = [
    # (id, email, full name, roles)
    ("00000000-0000-0000-0000-0000000000b1", "buyer@demo.test", "Demo Buyer", ("buyer",)),
    ("00000000-0000-0000-0000-0000000000c1", "seller.one@demo.test", "Northwind Supply", ("seller",)),
    ("00000000-0000-0000-0000-0000000000c2", "seller.two@demo.test", "Contoso Packaging", ("seller",)),
    ("00000000-0000-0000-0000-0000000000a1", "admin@demo.test", "Marketplace Admin", ("admin",)),
]

DEMO_PRODUCTS = [
    # (seller index in DEMO_USERS, name, price, stock)
    (1, "Industrial Safety Gloves (100 pairs)", Decimal("45.00"), 500),
    (1, "Nitrile Work Aprons (50 pack)", Decimal("60.00"), 120),
    (2, "Corrugated Shipping Boxes (200 pack)", Decimal("89.90"), 300),
    (2, "Stretch Wrap Film Roll", Decimal("19.50"), 800),
]


def seed_demo_data(db: Session) -> Dict[str, int]:
    """Insert demo users and products unless they already exist. Returns counts created."""
    created = {"users": 0, "products": 0}

    if db.get(User, DEMO_USERS[0][0]):
        return created

    for user_id, email, full_name, roles in DEMO_USERS:
        u = User(id=user_id, email=email, full_name=full_name)
        u.roles = [UserRole(role=r) for r in roles]
        db.add(u)
        created["users"] += 1

    for seller_idx, name, price, stock in DEMO_PRODUCTS:
        db.add(Product(seller_id=DEMO_USERS[seller_idx][0], name=name, price=price, stock=stock))
        created["products"] += 1

    db.commit()
    return created


def create_demo_data():
    init_db()
    db = SessionLocal()
    try:
        created = seed_demo_data(db)
        if created["users"]:
            print(f"✅ Demo data created: {created['users']} users, {created['products']} products")
        else:
            print("✅ Demo data already exists")
    finally:
        db.close()


if __name__ == "__main__":
    create_demo_data()
