"""Stock checks and movements used by checkout and cancellation."""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product

logger = structlog.get_logger(__name__)


def load_products(product_ids):
    """Products by id; a missing product fails the whole request."""
    repo = current_domain.repository_for(Product)
    products = {}
    for product_id in product_ids:
        try:
            products[str(product_id)] = repo.get(product_id)
        except ObjectNotFoundError:
            raise ObjectNotFoundError({"product_id": [f"Product {product_id} not found"]}) from None
    return products


def ensure_available(products, quantities):
    """Every product must cover the total quantity requested for it.

    Runs before anything is written so a shortfall leaves no trace.
    """
    for product_id, quantity in quantities.items():
        products[product_id].ensure_stock_for(quantity)


def reserve(products, quantities):
    repo = current_domain.repository_for(Product)
    for product_id, quantity in quantities.items():
        product = products[product_id]
        product.reserve_stock(quantity)
        repo.add(product)


def restore(items):
    """Return each item's quantity to its product's stock.

    Products deleted since the order was placed are skipped.
    """
    repo = current_domain.repository_for(Product)

    quantities = {}
    for item in items:
        key = str(item.product_id)
        quantities[key] = quantities.get(key, 0) + item.quantity

    for product_id, quantity in quantities.items():
        try:
            product = repo.get(product_id)
        except ObjectNotFoundError:
            logger.warning("Cannot restock deleted product", product_id=product_id, quantity=quantity)
            continue
        product.release_stock(quantity)
        repo.add(product)
