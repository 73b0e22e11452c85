from database.demo_data import DEMO_PRODUCTS, DEMO_USERS, seed_demo_data
from models.product_model import Product
from models.user_model import User
from services.identity_service import actor_for_user


def test_seed_is_idempotent(db):
    created = seed_demo_data(db)
    assert created == {"users": len(DEMO_USERS), "products": len(DEMO_PRODUCTS)}
    assert seed_demo_data(db) == {"users": 0, "products": 0}
    assert db.query(Product).count() == len(DEMO_PRODUCTS)


def test_seeded_roles(db):
    seed_demo_data(db)
    buyer = actor_for_user(db.get(User, DEMO_USERS[0][0]))
    seller = actor_for_user(db.get(User, DEMO_USERS[1][0]))
    assert buyer.is_buyer and not buyer.is_seller
    assert seller.is_seller
