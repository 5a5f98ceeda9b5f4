import threading

from marketplace.db import SessionLocal
from marketplace.models.order import Order
from marketplace.models.product import Product
from marketplace.services.exceptions import ProductUnavailableError
from marketplace.services.order_service import OrderService


def _checkout_all(buyers):
    barrier = threading.Barrier(len(buyers))
    results = {}

    def worker(user_id):
        s = SessionLocal()
        try:
            barrier.wait()
            OrderService(s).create_order(user_id, "bank_transfer", f"buyer {user_id}")
            results[user_id] = "ok"
        except ProductUnavailableError:
            results[user_id] = "unavailable"
        except Exception as e:  # surfaced through the assertion below
            results[user_id] = repr(e)
        finally:
            s.close()

    threads = [threading.Thread(target=worker, args=(uid,)) for uid in buyers]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)
    return results


def test_concurrent_checkouts_of_same_product_have_one_winner(
    db, make_user, make_product, add_to_cart, reload
):
    pid = make_product(price_cents=500)
    buyers = [make_user(), make_user()]
    for uid in buyers:
        add_to_cart(uid, pid)
    db.commit()

    results = _checkout_all(buyers)

    assert sorted(results.values()) == ["ok", "unavailable"]
    assert reload(Product, pid).status == "reserved"
    db.expire_all()
    orders = db.query(Order).all()
    assert len(orders) == 1
    winner = next(uid for uid, r in results.items() if r == "ok")
    assert orders[0].user_id == winner


def test_concurrent_checkouts_of_different_products_both_succeed(
    db, make_user, make_product, add_to_cart
):
    buyers = [make_user(), make_user()]
    for uid in buyers:
        add_to_cart(uid, make_product())
    db.commit()

    results = _checkout_all(buyers)

    assert list(results.values()) == ["ok", "ok"]
