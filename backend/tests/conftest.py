import itertools
import os
import tempfile

# point the app at a throwaway database before anything imports marketplace.config
_TMP = tempfile.mkdtemp(prefix="marketplace-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP, 'test.db')}"
os.environ["LOCK_DIR"] = os.path.join(_TMP, "locks")
os.environ["RESERVATION_SWEEP_ENABLED"] = "false"
os.environ["SKIP_SEED"] = "true"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402

from marketplace.db import SessionLocal, init_db  # noqa: E402
from marketplace.models.cart_item import CartItem  # noqa: E402
from marketplace.models.product import Product  # noqa: E402
from marketplace.models.user import User  # noqa: E402


@pytest.fixture(autouse=True)
def clean_db():
    init_db(reset=True)
    yield


@pytest.fixture
def db():
    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    def _make(username=None):
        username = username or f"user{next(counter)}"
        u = User(
            username=username,
            email=f"{username}@example.com",
            full_name=username.title(),
            role="user",
            is_active=True,
        )
        db.add(u)
        db.commit()
        return u.id

    return _make


@pytest.fixture
def seller_id(make_user):
    return make_user("seller")


@pytest.fixture
def make_product(db, seller_id):
    def _make(price_cents=1000, name="Item", status="available", is_active=True):
        p = Product(
            user_id=seller_id,
            name=name,
            price_cents=price_cents,
            status=status,
            is_active=is_active,
        )
        db.add(p)
        db.commit()
        return p.id

    return _make


@pytest.fixture
def add_to_cart(db):
    def _add(user_id, product_id, quantity=1):
        item = CartItem(user_id=user_id, product_id=product_id, quantity=quantity)
        db.add(item)
        db.commit()
        return item.id

    return _add


@pytest.fixture
def reload(db):
    """Fresh copy of a row, ignoring whatever the session has cached."""

    def _reload(model, pk):
        db.expire_all()
        return db.get(model, pk)

    return _reload
