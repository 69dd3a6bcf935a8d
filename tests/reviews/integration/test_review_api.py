"""Integration tests for the review endpoints."""

import pytest


@pytest.fixture()
def received_product(client, auth_headers, admin_headers, make_product, shipping_address):
    """A product delivered to each of the given customers; returns its id."""

    def _receive(*customer_ids):
        product_id = make_product()
        for customer_id in customer_ids:
            headers = auth_headers(customer_id)
            client.post("/api/cart/add", json={"product_id": product_id, "size": "M"}, headers=headers)
            order = client.post(
                "/api/orders",
                json={"shipping_address": shipping_address, "payment_method": "card"},
                headers=headers,
            ).json()["data"]["order"]
            client.put(f"/api/orders/{order['id']}/status", json={"status": "delivered"}, headers=admin_headers)
        return product_id

    return _receive


def _review(client, headers, product_id, rating, comment="Great fit"):
    return client.post(
        "/api/reviews",
        json={"product_id": product_id, "rating": rating, "comment": comment},
        headers=headers,
    )


class TestSubmit:
    def test_create_and_list(self, client, auth_headers, received_product):
        product_id = received_product("cust-1", "cust-2")
        created = _review(client, auth_headers("cust-1"), product_id, 5)
        assert created.status_code == 201
        assert created.json()["data"]["review"]["verified"] is True
        _review(client, auth_headers("cust-2"), product_id, 4)

        data = client.get(f"/api/reviews/product/{product_id}", params={"sort": "highest"}).json()["data"]
        assert [r["rating"] for r in data["reviews"]] == [5, 4]
        assert data["rating"] == {"average": 4.5, "count": 2}
        assert data["pagination"]["total_reviews"] == 2

    def test_requires_purchase(self, client, auth_headers, make_product):
        response = _review(client, auth_headers("cust-1"), make_product(), 5)
        assert response.status_code == 400
        assert response.json()["errors"][0]["code"] == "PurchaseRequired"

    def test_duplicate(self, client, auth_headers, received_product):
        product_id = received_product("cust-1")
        _review(client, auth_headers("cust-1"), product_id, 5)
        response = _review(client, auth_headers("cust-1"), product_id, 3)
        assert response.json()["errors"][0]["code"] == "DuplicateReview"

    def test_rating_out_of_range(self, client, auth_headers, make_product):
        response = _review(client, auth_headers("cust-1"), make_product(), 6)
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "rating"


class TestManage:
    def test_edit_and_delete(self, client, auth_headers, received_product):
        product_id = received_product("cust-1")
        headers = auth_headers("cust-1")
        review_id = _review(client, headers, product_id, 5).json()["data"]["review"]["id"]

        edited = client.put(f"/api/reviews/{review_id}", json={"rating": 2}, headers=headers)
        assert edited.json()["data"]["review"]["rating"] == 2
        assert client.get(f"/api/products/{product_id}").json()["data"]["product"]["rating"] == 2.0

        assert client.delete(f"/api/reviews/{review_id}", headers=headers).status_code == 200
        product = client.get(f"/api/products/{product_id}").json()["data"]["product"]
        assert product["reviews_count"] == 0

    def test_others_cannot_edit(self, client, auth_headers, received_product):
        product_id = received_product("cust-1")
        review_id = _review(client, auth_headers("cust-1"), product_id, 5).json()["data"]["review"]["id"]
        response = client.put(f"/api/reviews/{review_id}", json={"rating": 1}, headers=auth_headers("cust-2"))
        assert response.status_code == 404

    def test_helpful_toggle(self, client, auth_headers, received_product):
        product_id = received_product("cust-1")
        review_id = _review(client, auth_headers("cust-1"), product_id, 5).json()["data"]["review"]["id"]

        marked = client.post(f"/api/reviews/{review_id}/helpful", headers=auth_headers("cust-2")).json()
        assert marked["message"] == "Review marked as helpful"
        assert marked["data"] == {"is_helpful": True, "helpful_count": 1}

        unmarked = client.post(f"/api/reviews/{review_id}/helpful", headers=auth_headers("cust-2")).json()
        assert unmarked["data"]["helpful_count"] == 0

    def test_moderation_hides_review(self, client, auth_headers, admin_headers, received_product):
        product_id = received_product("cust-1")
        review_id = _review(client, auth_headers("cust-1"), product_id, 5).json()["data"]["review"]["id"]

        moderated = client.put(
            f"/api/reviews/{review_id}/moderate",
            json={"status": "rejected", "note": "Spam"},
            headers=admin_headers,
        )
        assert moderated.json()["data"]["review"]["status"] == "rejected"

        listing = client.get(f"/api/reviews/product/{product_id}").json()["data"]
        assert listing["reviews"] == []

        mine = client.get("/api/reviews/user", headers=auth_headers("cust-1")).json()["data"]
        assert len(mine["reviews"]) == 1
