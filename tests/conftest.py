import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="humidor-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "1"
os.environ["RATE_LIMIT_ENABLED"] = "0"
os.environ["EMAIL_API_KEY"] = ""

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import select

from humidor.data.database import Base, SessionLocal, engine
from humidor.data.models import (
    AddressModel,
    CartItemModel,
    CartModel,
    ProductModel,
    UserModel,
    VariantModel,
)
from tests.helpers import FakeGateway, FakeNotifier


@pytest.fixture(autouse=True)
def _schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(_schema):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def make_user(db):
    def _make(user_id=1, name="Alice", email=None, is_admin=False):
        db.add(UserModel(id=user_id, name=name, email=email or f"user{user_id}@example.com", is_admin=is_admin))
        db.commit()
        return user_id

    return _make


@pytest.fixture
def make_address(db):
    def _make(user_id, type="SHIPPING", city="Taipei"):
        address = AddressModel(
            user_id=user_id,
            type=type,
            line1="1 Cedar Lane",
            city=city,
            state="TP",
            postal="100",
            country="TW",
        )
        db.add(address)
        db.commit()
        return address.id

    return _make


@pytest.fixture
def make_variant(db):
    counter = {"n": 0}

    def _make(price="10.00", inventory=5, name=None, deleted=False):
        counter["n"] += 1
        n = counter["n"]
        product = ProductModel(name=name or f"Cutter {n}", slug=f"cutter-{n}")
        if deleted:
            product.deleted_at = datetime.now(timezone.utc)
        variant = VariantModel(sku=f"SKU-{n}", price=Decimal(price), inventory=inventory, color="Black")
        product.variants.append(variant)
        db.add(product)
        db.commit()
        return variant.id

    return _make


@pytest.fixture
def put_in_cart(db):
    def _put(user_id, variant_id, quantity):
        cart = db.execute(select(CartModel).where(CartModel.user_id == user_id)).scalar_one_or_none()
        if cart is None:
            cart = CartModel(user_id=user_id, version=1)
            db.add(cart)
            db.flush()
        db.add(CartItemModel(cart_id=cart.id, variant_id=variant_id, quantity=quantity))
        db.commit()
        return cart.id

    return _put


@pytest.fixture
def set_price(db):
    def _set(variant_id, price):
        variant = db.get(VariantModel, variant_id)
        variant.price = Decimal(price)
        db.commit()

    return _set
