"""SubmitReview: a customer reviews a product they have received.

The product must exist, the customer must not have reviewed it already, and
one of the customer's shipped or delivered orders must contain it.
"""

from protean import handle
from protean.fields import Identifier, Integer, Text
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.ordering.lifecycle import OrderStatus
from storefront.ordering.order import Order
from storefront.reviews.rating import recompute_product_rating
from storefront.reviews.review import Review
from storefront.shared.errors import DuplicateReview, PurchaseRequired
from storefront.shared.queries import fetch_all

_RECEIVED_STATES = [OrderStatus.SHIPPED.value, OrderStatus.DELIVERED.value]


@storefront.command(part_of="Review")
class SubmitReview:
    product_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    rating = Integer(required=True, min_value=1, max_value=5)
    comment = Text(required=True)


def has_received(customer_id, product_id):
    """Whether a shipped or delivered order of the customer contains the product."""
    orders = fetch_all(Order, customer_id=str(customer_id), status__in=_RECEIVED_STATES)
    return any(str(item.product_id) == str(product_id) for order in orders for item in order.items)


@storefront.command_handler(part_of=Review)
class SubmitReviewHandler:
    @handle(SubmitReview)
    def submit_review(self, command):
        current_domain.repository_for(Product).get(command.product_id)

        repo = current_domain.repository_for(Review)
        if repo.find_for(command.customer_id, command.product_id) is not None:
            raise DuplicateReview("You have already reviewed this product")

        if not has_received(command.customer_id, command.product_id):
            raise PurchaseRequired("You can only review products from orders that have shipped")

        review = Review.submit(
            product_id=command.product_id,
            customer_id=command.customer_id,
            rating=command.rating,
            comment=command.comment,
            verified=True,
        )
        repo.add(review)

        recompute_product_rating(command.product_id, changed=review)
        return str(review.id)
