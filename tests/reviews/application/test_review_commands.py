"""Application tests for review submission, editing, voting and moderation."""

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.catalogue.product import Product
from storefront.reviews.editing import DeleteReview, EditReview
from storefront.reviews.moderation import ModerateReview
from storefront.reviews.review import Review
from storefront.reviews.submission import has_received
from storefront.reviews.voting import ToggleHelpful
from storefront.shared.errors import DuplicateReview, PurchaseRequired


def _product(product_id):
    return current_domain.repository_for(Product).get(product_id)


class TestSubmitReview:
    def test_ratings_are_aggregated(self, make_product, submit_review):
        product_id = make_product()
        submit_review("cust-1", product_id, 5)
        submit_review("cust-2", product_id, 3)
        submit_review("cust-3", product_id, 4)

        product = _product(product_id)
        assert product.rating == 4.0
        assert product.reviews_count == 3

    def test_review_is_verified(self, make_product, submit_review):
        product_id = make_product()
        review = current_domain.repository_for(Review).get(submit_review("cust-1", product_id, 5))
        assert review.verified is True

    def test_one_review_per_customer(self, make_product, submit_review):
        product_id = make_product()
        submit_review("cust-1", product_id, 5)
        with pytest.raises(DuplicateReview):
            submit_review("cust-1", product_id, 1, receive=False)

    def test_second_review_for_same_pair_is_not_stored(self, make_product, submit_review):
        product_id = make_product()
        submit_review("cust-1", product_id, 5)

        repeat = Review.submit(product_id=product_id, customer_id="cust-1", rating=2, comment="Again")
        with pytest.raises(ValidationError) as exc:
            current_domain.repository_for(Review).add(repeat)
        assert "review_key" in exc.value.messages

    def test_purchase_required(self, make_product, submit_review):
        product_id = make_product()
        with pytest.raises(PurchaseRequired):
            submit_review("cust-1", product_id, 5, receive=False)

    def test_pending_order_does_not_count(self, make_product, receive_product):
        product_id = make_product()
        receive_product("cust-1", product_id, status="confirmed")
        assert not has_received("cust-1", product_id)

        receive_product("cust-2", product_id, status="shipped")
        assert has_received("cust-2", product_id)

    def test_unknown_product(self, submit_review):
        with pytest.raises(ObjectNotFoundError):
            submit_review("cust-1", "missing-product", 5, receive=False)


class TestEditAndDelete:
    def test_edit_recomputes_rating(self, make_product, submit_review):
        product_id = make_product()
        review_id = submit_review("cust-1", product_id, 5)
        submit_review("cust-2", product_id, 3)

        current_domain.process(EditReview(review_id=review_id, customer_id="cust-1", rating=1), asynchronous=False)

        assert _product(product_id).rating == 2.0

    def test_delete_recomputes_rating(self, make_product, submit_review):
        product_id = make_product()
        submit_review("cust-1", product_id, 5)
        middle = submit_review("cust-2", product_id, 3)
        submit_review("cust-3", product_id, 4)

        current_domain.process(DeleteReview(review_id=middle, customer_id="cust-2"), asynchronous=False)

        product = _product(product_id)
        assert product.rating == 4.5
        assert product.reviews_count == 2

    def test_last_review_deleted_resets_rating(self, make_product, submit_review):
        product_id = make_product()
        review_id = submit_review("cust-1", product_id, 5)
        current_domain.process(DeleteReview(review_id=review_id, customer_id="cust-1"), asynchronous=False)

        product = _product(product_id)
        assert product.rating == 0.0
        assert product.reviews_count == 0

    def test_only_author_can_edit(self, make_product, submit_review):
        product_id = make_product()
        review_id = submit_review("cust-1", product_id, 5)
        with pytest.raises(ObjectNotFoundError):
            current_domain.process(
                EditReview(review_id=review_id, customer_id="cust-2", comment="Hijacked"),
                asynchronous=False,
            )

    def test_admin_can_delete_any_review(self, make_product, submit_review):
        product_id = make_product()
        review_id = submit_review("cust-1", product_id, 5)
        current_domain.process(
            DeleteReview(review_id=review_id, customer_id="admin-1", as_admin=True),
            asynchronous=False,
        )
        with pytest.raises(ObjectNotFoundError):
            current_domain.repository_for(Review).get(review_id)


class TestHelpfulAndModeration:
    def test_toggle_helpful(self, make_product, submit_review):
        product_id = make_product()
        review_id = submit_review("cust-1", product_id, 5)

        first = current_domain.process(ToggleHelpful(review_id=review_id, customer_id="cust-2"), asynchronous=False)
        assert first == {"is_helpful": True, "helpful_count": 1}

        second = current_domain.process(ToggleHelpful(review_id=review_id, customer_id="cust-2"), asynchronous=False)
        assert second == {"is_helpful": False, "helpful_count": 0}

    def test_moderation(self, make_product, submit_review):
        product_id = make_product()
        review_id = submit_review("cust-1", product_id, 5)

        current_domain.process(
            ModerateReview(review_id=review_id, status="rejected", note="Spam"),
            asynchronous=False,
        )

        review = current_domain.repository_for(Review).get(review_id)
        assert review.status == "rejected"
        assert review.moderation_note == "Spam"
