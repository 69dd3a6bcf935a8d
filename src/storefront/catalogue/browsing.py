"""Read side of the catalogue: filtered, sorted, paginated product listings."""

from dataclasses import dataclass

from protean.utils.globals import current_domain
from protean.utils.query import Q

from storefront.catalogue.category import Category
from storefront.catalogue.product import Product
from storefront.shared.queries import Page, custom_setting, fetch_all, paginate

SORTABLE_FIELDS = ("created_at", "price", "rating", "title", "reviews_count")
DEFAULT_SORT = "-created_at"


@dataclass(frozen=True)
class ProductFilter:
    category: str | None = None
    brand: str | None = None
    min_price: float | None = None
    max_price: float | None = None
    search: str | None = None
    in_stock: bool | None = None


def sort_key(sort):
    """Validated ``order_by`` expression; unknown fields fall back to newest first."""
    if not sort:
        return DEFAULT_SORT
    field = sort.lstrip("-")
    if field not in SORTABLE_FIELDS:
        return DEFAULT_SORT
    return sort


def _resolve_category_id(value):
    """Category reference given either as an id or as a slug."""
    categories = current_domain.repository_for(Category)
    by_slug = categories.find_by_slug(value)
    if by_slug is not None:
        return str(by_slug.id)
    return value


def _criteria(filters: ProductFilter):
    criteria = []
    lookups = {}

    if filters.category:
        lookups["category_id"] = _resolve_category_id(filters.category)
    if filters.brand:
        lookups["brand__icontains"] = filters.brand.strip()
    if filters.min_price is not None:
        lookups["price__gte"] = filters.min_price
    if filters.max_price is not None:
        lookups["price__lte"] = filters.max_price
    if filters.in_stock:
        lookups["stock__gt"] = 0
    if filters.search and filters.search.strip():
        term = filters.search.strip()
        criteria.append(
            Q(title__icontains=term) | Q(description__icontains=term) | Q(brand__icontains=term) | Q(tags__icontains=term)
        )

    return criteria, lookups


def browse_products(filters: ProductFilter | None = None, page=1, limit=None, sort=None) -> Page:
    criteria, lookups = _criteria(filters or ProductFilter())
    return paginate(
        Product,
        *criteria,
        page=page,
        limit=limit or custom_setting("PRODUCT_PAGE_SIZE", 10),
        order_by=sort_key(sort),
        **lookups,
    )


def get_product(product_id):
    return current_domain.repository_for(Product).get(product_id)


def list_categories(include_inactive=False):
    """Categories sorted by name, each paired with its product count."""
    lookups = {} if include_inactive else {"is_active": True}
    categories = fetch_all(Category, order_by="name", **lookups)
    return [(category, count_products(category.id)) for category in categories]


def count_products(category_id):
    return current_domain.repository_for(Product)._dao.query.filter(category_id=str(category_id)).all().total


def get_category(category_id):
    """Category by id, falling back to slug."""
    categories = current_domain.repository_for(Category)
    category = categories.find_by_slug(category_id)
    if category is not None:
        return category
    return categories.get(category_id)
