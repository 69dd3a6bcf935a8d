"""Read side of reviews: per-product listings and a customer's own reviews."""

from storefront.reviews.review import Review, ReviewStatus
from storefront.shared.queries import paginate

SORT_ORDERS = {
    "newest": "-created_at",
    "oldest": "created_at",
    "highest": "-rating_score",
    "lowest": "rating_score",
    "helpful": "-helpful_count",
}


def product_reviews(product_id, sort="newest", page=1, limit=10):
    """Approved reviews of a product."""
    return paginate(
        Review,
        page=page,
        limit=limit,
        order_by=SORT_ORDERS.get(sort, SORT_ORDERS["newest"]),
        product_id=str(product_id),
        status=ReviewStatus.APPROVED.value,
    )


def customer_reviews(customer_id, page=1, limit=10):
    return paginate(Review, page=page, limit=limit, customer_id=str(customer_id))
