"""Storefront Load Testing: Locust entry point.

Discovers all user classes from the scenarios package.
Run specific scenarios with Locust's class selection.

Usage:
    # All scenarios (web UI):
    locust -f loadtests/locustfile.py

    # Full checkout journey only:
    locust -f loadtests/locustfile.py CheckoutUser

    # Oversell stress test:
    locust -f loadtests/locustfile.py OversellUser

    # Headless (CI mode):
    locust -f loadtests/locustfile.py CheckoutUser --headless \
           -u 50 -r 5 -t 300s --csv=results/loadtest
"""

import logging
import time

import requests
from locust import events

# Import all user classes so Locust discovers them
from loadtests.data_generators import product_data
from loadtests.helpers.response import extract_error_detail
from loadtests.scenarios.checkout import CashOnDeliveryUser, CheckoutUser  # noqa: F401
from loadtests.scenarios.stress import HOT_PRODUCT_STOCK, OversellUser, hot_product  # noqa: F401

logger = logging.getLogger("loadtest")


@events.request.add_listener
def on_request(request_type, name, response, exception, **_kw):
    """Log error details for every failed request.

    Fires globally for all scenarios; no per-task wiring needed.
    """
    if exception:
        logger.error("[EXCEPTION] %s %s: %s", request_type, name, exception)
    elif response is not None and response.status_code >= 400:
        detail = extract_error_detail(response)
        logger.error("[%s] %s %s: %s", response.status_code, request_type, name, detail)


@events.test_start.add_listener
def on_test_start(environment, **_kwargs):
    """Seed the contended product used by the oversell scenario."""
    print(f"\n[LOADTEST] Started at {time.strftime('%H:%M:%S')}")
    print(f"[LOADTEST] Target host: {environment.host}")

    resp = requests.post(
        f"{environment.host}/dev/products",
        json=product_data(stock=HOT_PRODUCT_STOCK),
        timeout=5,
    )
    if resp.status_code == 201:
        hot_product["id"] = resp.json()["product_id"]
        print(f"[LOADTEST] Hot product {hot_product['id']} seeded with {HOT_PRODUCT_STOCK} units")
    else:
        print(f"[LOADTEST] Could not seed hot product: {resp.status_code} {extract_error_detail(resp)}")
    print()


@events.test_stop.add_listener
def on_test_stop(environment, **_kwargs):
    """Check the no-oversell invariant on the contended product."""
    print(f"\n[LOADTEST] Stopped at {time.strftime('%H:%M:%S')}")
    if not hot_product["id"]:
        return

    try:
        resp = requests.get(f"{environment.host}/dev/products/{hot_product['id']}", timeout=5)
    except requests.RequestException as e:
        print(f"[LOADTEST] Could not fetch hot product stock: {e}\n")
        return

    remaining = resp.json()["stock"]
    sold = hot_product["units_sold"]
    print(f"[LOADTEST] Hot product: sold={sold} rejected={hot_product['rejected']} remaining={remaining}")
    if sold + remaining != HOT_PRODUCT_STOCK:
        print(f"[LOADTEST] OVERSELL CHECK FAILED: {sold} + {remaining} != {HOT_PRODUCT_STOCK}")
    print()
