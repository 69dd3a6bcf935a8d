"""Shopper load test scenarios.

Stateful SequentialTaskSet journeys for browsing, the cart-to-checkout
conversion, guest checkout and post-delivery reviews. Each journey works on
products found through the public listing, so a back-office user must have
seeded the catalogue first.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import cart_item, checkout_data, customer_id, guest_order_data, review_data, valid_email
from loadtests.helpers.auth import admin_bearer, bearer
from loadtests.helpers.response import data, extract_error_detail
from loadtests.helpers.state import GuestState, ShopperState
from loadtests.scenarios.back_office import SHARED_COUPON


def _browse(client, state, **params):
    """List in-stock products and remember their ids."""
    params.setdefault("inStock", "true")
    params.setdefault("limit", 20)
    with client.get("/api/products", params=params, catch_response=True, name="GET /api/products") as resp:
        if resp.status_code != 200:
            resp.failure(f"Browse failed: {resp.status_code} {extract_error_detail(resp)}")
            return
        state.product_ids = [product["id"] for product in data(resp)["products"]]


class BrowseJourney(SequentialTaskSet):
    """List -> Search -> Product detail -> Reviews -> Categories."""

    def on_start(self):
        self.state = ShopperState()

    @task
    def list_products(self):
        _browse(self.client, self.state, sort=random.choice(["-created_at", "price", "-price", "-rating"]))
        if not self.state.product_ids:
            self.interrupt()

    @task
    def search(self):
        self.client.get("/api/products", params={"search": "tee"}, name="GET /api/products?search")

    @task
    def product_detail(self):
        product_id = random.choice(self.state.product_ids)
        self.client.get(f"/api/products/{product_id}", name="GET /api/products/{id}")
        self.client.get(f"/api/reviews/product/{product_id}", name="GET /api/reviews/product/{id}")

    @task
    def categories(self):
        self.client.get("/api/categories", name="GET /api/categories")
        self.interrupt()


class CartToCheckoutJourney(SequentialTaskSet):
    """Browse -> Add items -> Change quantity -> Apply coupon -> Checkout -> Track.

    One in five shoppers cancels the pending order afterwards.
    """

    def on_start(self):
        self.state = ShopperState(customer_id=customer_id())
        self.headers = bearer(self.state.customer_id)

    @task
    def browse(self):
        _browse(self.client, self.state)
        if not self.state.product_ids:
            self.interrupt()

    @task
    def add_items(self):
        for product_id in random.sample(self.state.product_ids, k=min(3, len(self.state.product_ids))):
            with self.client.post(
                "/api/cart/add",
                json=cart_item(product_id),
                headers=self.headers,
                catch_response=True,
                name="POST /api/cart/add",
            ) as resp:
                if resp.status_code == 200:
                    self.state.cart_item_ids = [item["id"] for item in data(resp)["cart"]["items"]]
                else:
                    resp.failure(f"Add to cart failed: {resp.status_code} {extract_error_detail(resp)}")
        if not self.state.cart_item_ids:
            self.interrupt()

    @task
    def change_quantity(self):
        item_id = random.choice(self.state.cart_item_ids)
        with self.client.put(
            f"/api/cart/item/{item_id}",
            json={"quantity": random.randint(1, 2)},
            headers=self.headers,
            catch_response=True,
            name="PUT /api/cart/item/{id}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Update cart item failed: {resp.status_code} {extract_error_detail(resp)}")

    @task
    def apply_coupon(self):
        if random.random() < 0.5:
            return
        with self.client.post(
            "/api/cart/coupon",
            json={"code": SHARED_COUPON},
            headers=self.headers,
            catch_response=True,
            name="POST /api/cart/coupon",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Apply coupon failed: {resp.status_code} {extract_error_detail(resp)}")

    @task
    def checkout(self):
        with self.client.post(
            "/api/orders",
            json=checkout_data(),
            headers=self.headers,
            catch_response=True,
            name="POST /api/orders",
        ) as resp:
            if resp.status_code == 201:
                order = data(resp)["order"]
                self.state.order_id = order["id"]
                self.state.order_number = order["order_number"]
                self.state.current_status = order["status"]
            else:
                resp.failure(f"Checkout failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def track(self):
        self.client.get(f"/api/orders/{self.state.order_number}/track", name="GET /api/orders/{number}/track")
        self.client.get("/api/orders", headers=self.headers, name="GET /api/orders")

    @task
    def maybe_cancel(self):
        if random.random() < 0.2:
            with self.client.put(
                f"/api/orders/{self.state.order_id}/cancel",
                json={"reason": "Changed my mind"},
                headers=self.headers,
                catch_response=True,
                name="PUT /api/orders/{id}/cancel",
            ) as resp:
                # A back-office user may already have shipped it
                if resp.status_code in (200, 400):
                    resp.success()
                else:
                    resp.failure(f"Cancel failed: {resp.status_code} {extract_error_detail(resp)}")
        self.interrupt()


class GuestCheckoutJourney(SequentialTaskSet):
    """Browse -> Guest order -> Look up by number -> Look up by email."""

    def on_start(self):
        self.state = GuestState(email=valid_email())
        self.shopper = ShopperState()

    @task
    def browse(self):
        _browse(self.client, self.shopper)
        if not self.shopper.product_ids:
            self.interrupt()

    @task
    def place_order(self):
        with self.client.post(
            "/api/guest/order",
            json=guest_order_data(self.shopper.product_ids, email=self.state.email),
            catch_response=True,
            name="POST /api/guest/order",
        ) as resp:
            if resp.status_code == 201:
                self.state.order_number = data(resp)["order"]["order_number"]
            else:
                resp.failure(f"Guest order failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def lookups(self):
        self.client.get(f"/api/guest/order/{self.state.order_number}", name="GET /api/guest/order/{number}")
        self.client.post("/api/guest/orders", json={"email": self.state.email}, name="POST /api/guest/orders")
        self.interrupt()


class OrderToReviewJourney(SequentialTaskSet):
    """Checkout -> Delivered (by an admin) -> Review -> Another shopper marks it helpful."""

    def on_start(self):
        self.state = ShopperState(customer_id=customer_id())
        self.headers = bearer(self.state.customer_id)
        self.product_id = None
        self.review_id = None

    @task
    def buy(self):
        _browse(self.client, self.state)
        if not self.state.product_ids:
            self.interrupt()
        self.product_id = random.choice(self.state.product_ids)
        self.client.post("/api/cart/add", json=cart_item(self.product_id), headers=self.headers, name="POST /api/cart/add")
        with self.client.post(
            "/api/orders",
            json=checkout_data(),
            headers=self.headers,
            catch_response=True,
            name="POST /api/orders",
        ) as resp:
            if resp.status_code != 201:
                resp.failure(f"Checkout failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()
            self.state.order_id = data(resp)["order"]["id"]

    @task
    def deliver(self):
        self.client.put(
            f"/api/orders/{self.state.order_id}/status",
            json={"status": "delivered"},
            headers=admin_bearer(),
            name="PUT /api/orders/{id}/status",
        )

    @task
    def review(self):
        with self.client.post(
            "/api/reviews",
            json=review_data(self.product_id),
            headers=self.headers,
            catch_response=True,
            name="POST /api/reviews",
        ) as resp:
            if resp.status_code == 201:
                self.review_id = data(resp)["review"]["id"]
            else:
                resp.failure(f"Review failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def mark_helpful(self):
        self.client.post(
            f"/api/reviews/{self.review_id}/helpful",
            headers=bearer(customer_id()),
            name="POST /api/reviews/{id}/helpful",
        )
        self.interrupt()


class ShopperUser(HttpUser):
    """Signed-in and guest shoppers with realistic conversion ratios."""

    wait_time = between(0.5, 3.0)
    weight = 10
    tasks = {
        BrowseJourney: 10,
        CartToCheckoutJourney: 5,
        GuestCheckoutJourney: 2,
        OrderToReviewJourney: 1,
    }
