"""
Pytest configuration: SQLite database per test, eager Celery, in-memory
checkout lock and a recording notifier in place of the broker.
"""
import os

os.environ["DATABASE_URL"] = "sqlite:///./medistore-test.db"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"

from decimal import Decimal
from itertools import count

import pytest
import redis
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker

from medistore.api.deps import get_lock_service, get_notification_service
from medistore.data import models  # noqa: F401
from medistore.data.database import Base, get_db
from medistore.data.models.cart import CartModel
from medistore.data.models.cart_item import CartItemModel
from medistore.data.models.medicine import MedicineModel
from medistore.data.models.user import UserModel
from medistore.domain.actor import Actor, UserRole
from medistore.main import app
from medistore.services.order_service import OrderService


class FakeLock:
    """In-memory stand-in for the redis checkout lock."""

    def __init__(self):
        self.held = {}
        self.released = []

    def acquire_checkout_lock(self, user_id, token, ttl):
        if user_id in self.held:
            return False
        self.held[user_id] = token
        return True

    def release_checkout_lock(self, user_id, token):
        self.released.append(user_id)
        if self.held.get(user_id) == token:
            del self.held[user_id]
            return True
        return False


class UnreachableReleaseLock(FakeLock):
    """Acquires fine, then redis goes away before the release."""

    def release_checkout_lock(self, user_id, token):
        self.released.append(user_id)
        raise redis.ConnectionError("Connection refused")


class RecordingNotifier:
    def __init__(self):
        self.events = []

    def order_placed(self, user_id, order_id):
        self.events.append(("ORDER_PLACED", user_id, order_id, "PLACED"))

    def status_changed(self, user_id, order_id, status):
        self.events.append(("STATUS_CHANGED", user_id, order_id, status))

    def order_cancelled(self, user_id, order_id):
        self.events.append(("ORDER_CANCELLED", user_id, order_id, "CANCELLED"))


@pytest.fixture
def engine(tmp_path):
    eng = create_engine(
        f"sqlite:///{tmp_path / 'medistore.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def fake_lock():
    return FakeLock()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def order_service(db, fake_lock, notifier):
    return OrderService(db, lock_service=fake_lock, notification_service=notifier)


@pytest.fixture
def client(session_factory, fake_lock, notifier):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_lock_service] = lambda: fake_lock
    app.dependency_overrides[get_notification_service] = lambda: notifier
    yield TestClient(app)
    app.dependency_overrides.clear()


# ---------- factories ----------

_seq = count(1)


@pytest.fixture
def make_user(db):
    def _make(role="CUSTOMER", status="UNBAN", name=None, email=None):
        n = next(_seq)
        user = UserModel(
            name=name or f"{role.lower()}-{n}",
            email=email or f"{role.lower()}{n}@example.com",
            role=role,
            status=status,
        )
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def make_medicine(db):
    def _make(seller, price="10.00", stock=10, is_active=True, name=None):
        medicine = MedicineModel(
            name=name or f"Medicine {next(_seq)}",
            price=Decimal(price),
            stock=stock,
            is_active=is_active,
            seller_id=seller.id,
        )
        db.add(medicine)
        db.commit()
        return medicine

    return _make


@pytest.fixture
def add_to_cart(db):
    def _add(user, medicine, quantity=1, unit_price=None):
        cart = db.execute(select(CartModel).where(CartModel.user_id == user.id)).scalar_one_or_none()
        if cart is None:
            cart = CartModel(user_id=user.id)
            db.add(cart)
            db.flush()
        item = CartItemModel(
            cart_id=cart.id,
            medicine_id=medicine.id,
            quantity=quantity,
            unit_price=Decimal(unit_price) if unit_price is not None else medicine.price,
        )
        db.add(item)
        db.commit()
        return item

    return _add


@pytest.fixture
def place_order(order_service, add_to_cart):
    """Puts (medicine, quantity) pairs in the customer's cart and checks out."""

    def _place(customer, *lines):
        for medicine, quantity in lines:
            add_to_cart(customer, medicine, quantity)
        return order_service.create_order(customer.id, "+8801700000000", "12 Road, Dhaka")

    return _place


def actor_of(user) -> Actor:
    return Actor(id=user.id, role=UserRole(user.role), name=user.name, email=user.email)


def stock_of(db, medicine_id) -> int:
    db.expire_all()
    return db.execute(select(MedicineModel.stock).where(MedicineModel.id == medicine_id)).scalar_one()


def auth(user) -> dict:
    return {"X-User-Id": str(user.id)}
