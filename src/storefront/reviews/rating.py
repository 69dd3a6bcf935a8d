"""Product rating aggregation.

A product's ``rating`` and ``reviews_count`` are recomputed from the complete
review set after every review is created, edited or deleted, never adjusted
incrementally. The review being written in the same unit of work is merged in
explicitly (or left out, for a deletion) since it is not yet persisted.
"""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.reviews.review import Review
from storefront.shared.money import round_rating
from storefront.shared.queries import fetch_all

logger = structlog.get_logger(__name__)


def average_rating(scores):
    """Mean of the scores to one decimal; ``(0.0, 0)`` when there are none."""
    scores = list(scores)
    if not scores:
        return 0.0, 0
    return round_rating(sum(scores) / len(scores)), len(scores)


def recompute_product_rating(product_id, changed=None, removed_id=None):
    """Recompute and store the product's rating; returns ``(rating, count)``."""
    reviews = {str(r.id): r for r in fetch_all(Review, product_id=str(product_id))}
    if changed is not None:
        reviews[str(changed.id)] = changed
    if removed_id is not None:
        reviews.pop(str(removed_id), None)

    rating, count = average_rating(review.score for review in reviews.values())

    repo = current_domain.repository_for(Product)
    try:
        product = repo.get(product_id)
    except ObjectNotFoundError:
        logger.warning("Rating not stored for missing product", product_id=str(product_id))
        return rating, count

    product.record_rating(rating, count)
    repo.add(product)

    logger.info("Product rating recomputed", product_id=str(product_id), rating=rating, reviews_count=count)
    return rating, count
