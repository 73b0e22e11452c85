import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["RESEND_API_KEY"] = ""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from database.session import get_db, init_db
from main import app
from models.product_model import Product
from models.user_model import User, UserRole
from schemas.orders import OrderCreate, OrderItemIn
from services import order_service
from services.errors import TransientDeliveryError
from services.identity_service import actor_for_user
from services.outbox_service import OutboxService, get_outbox_service
from services.realtime_service import ChangeFeedHub


class RecordingDispatcher:
    def __init__(self):
        self.sent = []

    def send(self, recipient, subject, html_body):
        self.sent.append((recipient, subject, html_body))


class FailingDispatcher:
    def __init__(self):
        self.calls = 0

    def send(self, recipient, subject, html_body):
        self.calls += 1
        raise TransientDeliveryError("smtp down")


@pytest.fixture
def engine(tmp_path):
    # file database so separate sessions really use separate connections
    eng = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False},
        future=True,
    )
    init_db(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def hub():
    return ChangeFeedHub()


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def outbox(session_factory, dispatcher):
    return OutboxService(dispatcher=dispatcher, session_factory=session_factory, backoff_seconds=0)


def make_user(db, email, full_name, roles):
    u = User(email=email, full_name=full_name)
    u.roles = [UserRole(role=r) for r in roles]
    db.add(u)
    db.commit()
    db.refresh(u)
    return u


def make_product(db, seller, name, price, stock=100, status="active"):
    p = Product(seller_id=seller.id, name=name, price=Decimal(price), stock=stock, status=status)
    db.add(p)
    db.commit()
    db.refresh(p)
    return p


@pytest.fixture
def buyer(db):
    return make_user(db, "buyer@example.com", "Bea Buyer", ["buyer"])


@pytest.fixture
def seller(db):
    return make_user(db, "seller@example.com", "Sam Seller", ["seller"])


@pytest.fixture
def other_seller(db):
    return make_user(db, "other@example.com", "Olly Other", ["seller"])


@pytest.fixture
def admin(db):
    return make_user(db, "admin@example.com", "Ada Admin", ["admin"])


@pytest.fixture
def product(db, seller):
    return make_product(db, seller, "Pallet Jack", "75.00")


@pytest.fixture
def other_product(db, other_seller):
    return make_product(db, other_seller, "Packing Tape", "12.50")


@pytest.fixture
def order(db, buyer, product):
    """pending order, total 150.00, one seller."""
    body = OrderCreate(
        shipping_address="Dock 4\n1 Harbour Rd\nRotterdam",
        items=[OrderItemIn(product_id=product.id, quantity=2)],
    )
    return order_service.create_order(db, actor_for_user(buyer), body)


@pytest.fixture
def multi_seller_order(db, buyer, product, other_product):
    body = OrderCreate(
        shipping_address="Unit 9, Trade Park",
        items=[
            OrderItemIn(product_id=product.id, quantity=1),
            OrderItemIn(product_id=other_product.id, quantity=4),
        ],
    )
    return order_service.create_order(db, actor_for_user(buyer), body)


@pytest.fixture
def client(session_factory, outbox):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_outbox_service] = lambda: outbox
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth(user):
    return {"X-User-Id": user.id}
