"""
Race several buyers for the same listing against a running server.

Each worker (one per buyer id) puts the product in its cart and then all
workers check out at once. Exactly one checkout should come back 200; the rest
should be refused with "not available".
"""
import argparse
import concurrent.futures
import os
import threading

import requests

BASE = os.environ.get("MARKETPLACE_BASE", "http://127.0.0.1:8000")


def fill_cart(user_id, product_id):
    headers = {"X-User-ID": str(user_id)}
    r = requests.post(
        f"{BASE}/api/cart/items",
        json={"product_id": product_id, "quantity": 1},
        headers=headers,
        timeout=10,
    )
    return r.status_code


def checkout_task(user_id, barrier):
    headers = {"X-User-ID": str(user_id)}
    payload = {"payment_method": "bank_transfer", "shipping_address": f"buyer {user_id}"}
    barrier.wait()
    try:
        r = requests.post(f"{BASE}/api/orders", json=payload, headers=headers, timeout=20)
        return (user_id, r.status_code, r.text)
    except Exception as e:
        return (user_id, "ERR", str(e))


def run(product_id, buyers):
    print(f"Racing {len(buyers)} buyers for product={product_id} at {BASE}")
    for uid in buyers:
        print(f"  cart user={uid}: {fill_cart(uid, product_id)}")

    barrier = threading.Barrier(len(buyers))
    with concurrent.futures.ThreadPoolExecutor(max_workers=len(buyers)) as ex:
        futures = [ex.submit(checkout_task, uid, barrier) for uid in buyers]
        results = [f.result() for f in futures]

    for r in results:
        print(r)
    winners = [r for r in results if r[1] == 200]
    print(f"Successful checkouts: {len(winners)} (expected 1)")
    return len(winners)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Race several buyers for one listing.")
    parser.add_argument("--product", type=int, required=True)
    parser.add_argument("--buyers", type=int, nargs="+", default=[1, 2])
    args = parser.parse_args()
    run(args.product, args.buyers)
