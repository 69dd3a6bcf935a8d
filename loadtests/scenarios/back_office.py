"""Back-office load test scenarios.

Administrators seed the catalogue and move orders through fulfillment.
Shopper journeys browse whatever these journeys have created.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import category_name, coupon_data, product_data
from loadtests.helpers.auth import admin_bearer
from loadtests.helpers.response import data, extract_error_detail
from loadtests.helpers.state import CatalogueState

SHARED_COUPON = "LOADTEST10"


class CatalogueSeedJourney(SequentialTaskSet):
    """Create Category -> Create Products -> Create Coupon -> Restock one product."""

    def on_start(self):
        self.state = CatalogueState()
        self.headers = admin_bearer()

    @task
    def create_category(self):
        with self.client.post(
            "/api/categories",
            json={"name": category_name()},
            headers=self.headers,
            catch_response=True,
            name="POST /api/categories",
        ) as resp:
            if resp.status_code == 201:
                self.state.category_id = data(resp)["category"]["id"]
            else:
                resp.failure(f"Create category failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def create_products(self):
        for _ in range(random.randint(3, 6)):
            with self.client.post(
                "/api/products",
                json=product_data(self.state.category_id),
                headers=self.headers,
                catch_response=True,
                name="POST /api/products",
            ) as resp:
                if resp.status_code == 201:
                    self.state.product_ids.append(data(resp)["product"]["id"])
                else:
                    resp.failure(f"Create product failed: {resp.status_code} {extract_error_detail(resp)}")

    @task
    def ensure_shared_coupon(self):
        body = coupon_data()
        body["code"] = SHARED_COUPON
        with self.client.post(
            "/api/coupons",
            json=body,
            headers=self.headers,
            catch_response=True,
            name="POST /api/coupons",
        ) as resp:
            # The shared code already exists after the first run
            if resp.status_code in (201, 400):
                resp.success()
            else:
                resp.failure(f"Create coupon failed: {resp.status_code} {extract_error_detail(resp)}")

    @task
    def restock(self):
        if not self.state.product_ids:
            self.interrupt()
        product_id = random.choice(self.state.product_ids)
        with self.client.put(
            f"/api/products/{product_id}",
            json={"stock": random.randint(500, 1000)},
            headers=self.headers,
            catch_response=True,
            name="PUT /api/products/{id}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Restock failed: {resp.status_code} {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class FulfillmentJourney(SequentialTaskSet):
    """Pick a pending order -> Confirm -> Ship with tracking -> Deliver -> Stats."""

    def on_start(self):
        self.headers = admin_bearer()
        self.order_id = None

    @task
    def pick_pending_order(self):
        with self.client.get(
            "/api/orders/admin/all",
            params={"status": "pending", "limit": 20},
            headers=self.headers,
            catch_response=True,
            name="GET /api/orders/admin/all",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"List orders failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()
            orders = data(resp)["orders"]
            if not orders:
                self.interrupt()
            self.order_id = random.choice(orders)["id"]

    def _advance(self, status):
        with self.client.put(
            f"/api/orders/{self.order_id}/status",
            json={"status": status},
            headers=self.headers,
            catch_response=True,
            name="PUT /api/orders/{id}/status",
        ) as resp:
            # Another admin or the customer may have moved the order on already
            if resp.status_code == 400:
                resp.success()
                self.interrupt()
            elif resp.status_code != 200:
                resp.failure(f"Status update failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def confirm(self):
        self._advance("confirmed")

    @task
    def ship(self):
        self._advance("shipped")
        with self.client.put(
            f"/api/orders/{self.order_id}/tracking",
            json={"tracking_number": f"1Z{random.randint(10**9, 10**10)}", "carrier": "UPS"},
            headers=self.headers,
            catch_response=True,
            name="PUT /api/orders/{id}/tracking",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Tracking update failed: {resp.status_code} {extract_error_detail(resp)}")

    @task
    def deliver(self):
        self._advance("delivered")

    @task
    def stats(self):
        self.client.get("/api/orders/admin/stats", headers=self.headers, name="GET /api/orders/admin/stats")
        self.interrupt()


class BackOfficeUser(HttpUser):
    """A small number of administrators keeping the shop stocked and shipping."""

    wait_time = between(1.0, 4.0)
    weight = 1
    tasks = {CatalogueSeedJourney: 1, FulfillmentJourney: 4}
