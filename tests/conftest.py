"""Pytest fixtures for directsource tests."""

import os

# engine w directsource.data.database powstaje przy imporcie
os.environ["DATABASE_URL"] = "sqlite://"

from decimal import Decimal

import pytest
import redis
import requests
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import directsource.data.models  # noqa: F401
from directsource.data.database import Base
from directsource.data.models import ManufacturerModel, UserModel
from directsource.domain.cart import CartSession, Identity
from directsource.domain.schemas import Product
from directsource.services.cart_service import CartService
from directsource.services.local_cart_store import LocalCartStore
from directsource.services.order_service import OrderService


class FakeRedis:
    """Minimal in-memory stand-in for redis.Redis; values come back exactly as stored."""

    def __init__(self):
        self.data = {}
        self.fail = False

    def _check(self):
        if self.fail:
            raise redis.ConnectionError("redis down")

    def get(self, key):
        self._check()
        return self.data.get(key)

    def set(self, key, value):
        self._check()
        self.data[key] = value
        return True

    def delete(self, key):
        self._check()
        return 1 if self.data.pop(key, None) is not None else 0


class FakeCatalog:
    """In-memory catalog with the ProductClient interface."""

    def __init__(self):
        self.products = {}
        self.unavailable = False

    def add(self, product: Product) -> Product:
        self.products[product.id] = product
        return product

    def _check(self):
        if self.unavailable:
            raise requests.ConnectionError("catalog down")

    def fetch_product(self, product_id):
        self._check()
        return self.products.get(product_id)

    def fetch_products(self, product_ids):
        self._check()
        return {pid: self.products[pid] for pid in product_ids if pid in self.products}


class FakeNotifier:
    def __init__(self):
        self.placed = []
        self.status_changes = []
        self.fail = False

    def send_order_placed(self, customer_id, order_id, manufacturer_id):
        if self.fail:
            raise ConnectionError("broker down")
        self.placed.append((customer_id, order_id, manufacturer_id))

    def send_status_changed(self, customer_id, order_id, status):
        if self.fail:
            raise ConnectionError("broker down")
        self.status_changes.append((customer_id, order_id, status))


def make_product(product_id, manufacturer_id="m1", price="10.00", stock=10, **kwargs) -> Product:
    return Product(
        id=product_id,
        manufacturer_id=manufacturer_id,
        name=kwargs.pop("name", f"Product {product_id}"),
        price=Decimal(price),
        stock=stock,
        category=kwargs.pop("category", "General"),
        image_url=kwargs.pop("image_url", f"https://img.example.com/{product_id}.jpg"),
        **kwargs,
    )


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seeded_db(db):
    """Customer u1, second customer u2 and manufacturers m1, m2, m3 with owner accounts."""
    db.add_all(
        [
            UserModel(id="u1", name="Alice", email="alice@example.com"),
            UserModel(id="u2", name="Bob", email="bob@example.com"),
        ]
    )
    for mid in ("m1", "m2", "m3"):
        db.add(UserModel(id=f"owner-{mid}", name=f"Owner {mid}", role="manufacturer"))
        db.add(
            ManufacturerModel(
                id=mid,
                user_id=f"owner-{mid}",
                company_name=f"Manufacturer {mid}",
                verification_status="verified" if mid != "m3" else "pending",
                total_sales=0,
                revenue=Decimal("0"),
            )
        )
    db.commit()
    return db


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def local_store(fake_redis):
    return LocalCartStore(client=fake_redis, namespace="test_guest_cart")


@pytest.fixture
def catalog():
    return FakeCatalog()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def cart_service(seeded_db, catalog, local_store):
    return CartService(db=seeded_db, product_client=catalog, local_store=local_store)


@pytest.fixture
def order_service(seeded_db, local_store, notifier):
    return OrderService(
        db=seeded_db,
        local_store=local_store,
        notification_service=notifier,
        shipping_fee=Decimal("10.00"),
    )


@pytest.fixture
def guest_session():
    return CartSession(Identity.anonymous("guest-1"))


@pytest.fixture
def user_session():
    return CartSession(Identity.authenticated("u1"))
