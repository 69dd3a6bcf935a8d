"""Storefront Load Testing, Locust entry point.

Run specific user classes with Locust's class selection.

Usage:
    # All users (web UI):
    locust -f loadtests/locustfile.py --host http://localhost:8000

    # Shoppers only, once the catalogue has been seeded:
    locust -f loadtests/locustfile.py ShopperUser

    # Headless (CI mode):
    locust -f loadtests/locustfile.py --headless \
           -u 50 -r 5 -t 300s --csv=results/loadtest
"""

import logging
import time

import requests
from locust import events

# Import all user classes so Locust discovers them
from loadtests.helpers.auth import admin_bearer
from loadtests.helpers.response import extract_error_detail
from loadtests.scenarios.back_office import BackOfficeUser  # noqa: F401
from loadtests.scenarios.shopping import ShopperUser  # noqa: F401

logger = logging.getLogger("loadtest")


@events.request.add_listener
def on_request(request_type, name, response, exception, **_kw):
    """Log error details for every failed request."""
    if exception:
        logger.error("[EXCEPTION] %s %s: %s", request_type, name, exception)
    elif response is not None and response.status_code >= 400:
        detail = extract_error_detail(response)
        logger.error("[%s] %s %s: %s", response.status_code, request_type, name, detail)


@events.test_start.add_listener
def on_test_start(environment, **_kwargs):
    """Log a marker and check the target is up when the load test begins."""
    print(f"\n[LOADTEST] Started at {time.strftime('%H:%M:%S')}")
    print(f"[LOADTEST] Target host: {environment.host}")
    try:
        resp = requests.get(f"{environment.host}/health", timeout=5)
        print(f"[LOADTEST] Health: {resp.status_code} {resp.json().get('message')}")
    except requests.RequestException as e:
        print(f"[LOADTEST] Health check failed: {e}")
    print()


@events.test_stop.add_listener
def on_test_stop(environment, **_kwargs):
    """Print the storefront's order statistics when the test ends."""
    print(f"\n[LOADTEST] Stopped at {time.strftime('%H:%M:%S')}")
    try:
        resp = requests.get(f"{environment.host}/api/orders/admin/stats", headers=admin_bearer(), timeout=5)
        stats = resp.json().get("data", {}).get("stats", {})
        print(f"[LOADTEST] Orders: {stats.get('total_orders')} by status {stats.get('by_status')}")
        print(f"[LOADTEST] Revenue: {stats.get('total_revenue')}")
        print()
    except requests.RequestException as e:
        print(f"[LOADTEST] Could not fetch order statistics: {e}\n")
