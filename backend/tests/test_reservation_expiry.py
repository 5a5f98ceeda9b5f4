import pytest

from marketplace.models.notification import Notification
from marketplace.models.order import Order
from marketplace.models.product import Product
from marketplace.services.exceptions import ProductUnavailableError
from marketplace.services.order_service import OrderService


def test_unpaid_orders_expire_and_release_products(
    db, make_user, make_product, add_to_cart, reload
):
    buyer = make_user()
    unpaid_pid = make_product()
    paid_pid = make_product()
    svc = OrderService(db)

    add_to_cart(buyer, unpaid_pid)
    unpaid = svc.create_order(buyer, "bank_transfer")
    add_to_cart(buyer, paid_pid)
    paid = svc.create_order(buyer, "bank_transfer")
    svc.update_payment_status(paid.id, buyer, "paid")

    # nothing is old enough under the default ttl
    assert svc.expire_unpaid_orders() == []

    expired = svc.expire_unpaid_orders(ttl_seconds=-1)

    assert expired == [unpaid.id]
    assert reload(Order, unpaid.id).status == "cancelled"
    assert reload(Product, unpaid_pid).status == "available"
    assert reload(Order, paid.id).status == "confirmed"
    assert reload(Product, paid_pid).status == "sold"

    titles = [
        n.title for n in db.query(Notification).filter(Notification.user_id == buyer)
    ]
    assert "Order cancelled" in titles

    # a second sweep finds nothing left to release
    assert svc.expire_unpaid_orders(ttl_seconds=-1) == []


def test_released_product_can_be_bought_again(db, make_user, make_product, add_to_cart):
    first = make_user()
    second = make_user()
    pid = make_product(price_cents=800)
    svc = OrderService(db)

    add_to_cart(first, pid)
    svc.create_order(first, "cod")
    svc.expire_unpaid_orders(ttl_seconds=-1)

    add_to_cart(second, pid)
    order = svc.create_order(second, "cod")
    assert order.total_cents == 800


def test_late_payment_after_product_was_resold_is_refused(
    db, make_user, make_product, add_to_cart, reload
):
    first = make_user()
    second = make_user()
    pid = make_product()
    svc = OrderService(db)

    add_to_cart(first, pid)
    late = svc.create_order(first, "bank_transfer")
    svc.expire_unpaid_orders(ttl_seconds=-1)
    add_to_cart(second, pid)
    current = svc.create_order(second, "bank_transfer")

    with pytest.raises(ProductUnavailableError) as exc:
        svc.update_payment_status(late.id, first, "paid")
    assert exc.value.product_ids == [pid]

    order = reload(Order, late.id)
    assert order.status == "cancelled"
    assert order.payment_status == "pending"
    assert reload(Product, pid).status == "reserved"

    paid = svc.update_payment_status(current.id, second, "paid")
    assert paid.status == "confirmed"
    assert reload(Product, pid).status == "sold"
    assert reload(Order, late.id).status == "cancelled"


def test_late_payment_on_expired_order_does_not_take_released_product(
    db, make_user, make_product, add_to_cart, reload
):
    buyer = make_user()
    pid = make_product()
    svc = OrderService(db)

    add_to_cart(buyer, pid)
    order = svc.create_order(buyer, "bank_transfer")
    svc.expire_unpaid_orders(ttl_seconds=-1)

    with pytest.raises(ProductUnavailableError):
        svc.update_payment_status(order.id, buyer, "paid")

    assert reload(Order, order.id).payment_status == "pending"
    assert reload(Product, pid).status == "available"
    titles = [
        n.title for n in db.query(Notification).filter(Notification.user_id == buyer)
    ]
    assert "Payment received" not in titles


def test_reopened_order_cannot_be_paid_once_product_is_elsewhere(
    db, make_user, make_product, add_to_cart, reload
):
    first = make_user()
    second = make_user()
    pid = make_product()
    svc = OrderService(db)

    add_to_cart(first, pid)
    late = svc.create_order(first, "cod")
    svc.expire_unpaid_orders(ttl_seconds=-1)
    add_to_cart(second, pid)
    svc.create_order(second, "cod")
    # status changes are unconstrained, so a cancelled order can be reopened
    svc.update_order_status(late.id, first, "pending")

    with pytest.raises(ProductUnavailableError):
        svc.update_payment_status(late.id, first, "paid")
    assert reload(Order, late.id).payment_status == "pending"
    assert reload(Product, pid).status == "reserved"
