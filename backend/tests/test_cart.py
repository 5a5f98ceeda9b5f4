import pytest

from marketplace.models.cart_item import CartItem
from marketplace.services.cart_service import CartService
from marketplace.services.exceptions import (
    InvalidQuantityError,
    NotFoundError,
    ProductUnavailableError,
)


def test_add_item_creates_line(db, make_user, make_product):
    buyer = make_user()
    pid = make_product(price_cents=250)

    item = CartService(db).add_item(buyer, pid, 2)

    assert item.quantity == 2
    cart = CartService(db).get_cart(buyer)
    assert [it.product_id for it in cart["items"]] == [pid]
    assert cart["total_cents"] == 500


def test_add_existing_product_increments_quantity(db, make_user, make_product):
    buyer = make_user()
    pid = make_product()
    svc = CartService(db)

    svc.add_item(buyer, pid, 1)
    item = svc.add_item(buyer, pid, 3)

    assert item.quantity == 4
    db.expire_all()
    assert db.query(CartItem).filter(CartItem.user_id == buyer).count() == 1


@pytest.mark.parametrize(
    "status, is_active",
    [("reserved", True), ("sold", True), ("available", False)],
)
def test_add_unavailable_product(db, make_user, make_product, status, is_active):
    buyer = make_user()
    pid = make_product(status=status, is_active=is_active)
    with pytest.raises(ProductUnavailableError):
        CartService(db).add_item(buyer, pid, 1)


def test_add_missing_product(db, make_user):
    buyer = make_user()
    with pytest.raises(ProductUnavailableError):
        CartService(db).add_item(buyer, 4242, 1)


def test_add_rejects_non_positive_quantity(db, make_user, make_product):
    buyer = make_user()
    pid = make_product()
    with pytest.raises(InvalidQuantityError):
        CartService(db).add_item(buyer, pid, 0)


@pytest.mark.parametrize("qty", [0, -1, -10])
def test_update_quantity_rejects_non_positive(db, make_user, make_product, add_to_cart, reload, qty):
    buyer = make_user()
    pid = make_product()
    item_id = add_to_cart(buyer, pid, 2)

    with pytest.raises(InvalidQuantityError):
        CartService(db).update_quantity(item_id, buyer, qty)

    assert reload(CartItem, item_id).quantity == 2


def test_update_quantity(db, make_user, make_product, add_to_cart):
    buyer = make_user()
    pid = make_product()
    item_id = add_to_cart(buyer, pid, 2)

    item = CartService(db).update_quantity(item_id, buyer, 5)

    assert item.quantity == 5


def test_update_quantity_scoped_to_owner(db, make_user, make_product, add_to_cart, reload):
    buyer = make_user()
    other = make_user()
    pid = make_product()
    item_id = add_to_cart(buyer, pid, 2)

    with pytest.raises(NotFoundError):
        CartService(db).update_quantity(item_id, other, 5)
    assert reload(CartItem, item_id).quantity == 2


def test_remove_item(db, make_user, make_product, add_to_cart):
    buyer = make_user()
    other = make_user()
    pid = make_product()
    item_id = add_to_cart(buyer, pid)
    svc = CartService(db)

    with pytest.raises(NotFoundError):
        svc.remove_item(item_id, other)
    svc.remove_item(item_id, buyer)
    with pytest.raises(NotFoundError):
        svc.remove_item(item_id, buyer)
    assert svc.get_cart(buyer)["items"] == []


def test_clear_only_touches_own_cart(db, make_user, make_product, add_to_cart):
    buyer = make_user()
    other = make_user()
    a = make_product()
    b = make_product()
    add_to_cart(buyer, a)
    add_to_cart(buyer, b)
    add_to_cart(other, a)
    svc = CartService(db)

    assert svc.clear(buyer) == 2
    assert svc.clear(buyer) == 0
    assert len(svc.get_cart(other)["items"]) == 1
