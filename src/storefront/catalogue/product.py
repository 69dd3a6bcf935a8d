"""Product aggregate root with its Discount value object.

Stock is only ever changed through ``reserve_stock`` and ``release_stock``
outside of administrative edits. ``rating`` and ``reviews_count`` are
denormalized from the product's reviews and only ``record_rating`` writes them.
"""

import json
import re

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, String, Text, ValueObject

from storefront.catalogue.events import ProductCreated, ProductRated, ProductUpdated
from storefront.domain import storefront
from storefront.shared.clock import as_utc, utcnow
from storefront.shared.errors import InsufficientStock
from storefront.shared.money import percentage_of, round_currency

MAX_IMAGES = 10
_IMAGE_URL = re.compile(r"^https?://\S+$", re.IGNORECASE)

# Sentinel for distinguishing "not provided" from None in partial updates
_UNSET = object()


def _normalize_sizes(sizes):
    seen = []
    for size in sizes or []:
        value = str(size).strip().upper()
        if value and value not in seen:
            seen.append(value)
    return seen


def _normalize_tags(tags):
    seen = []
    for tag in tags or []:
        value = str(tag).strip().lower()
        if value and value not in seen:
            seen.append(value)
    return seen


@storefront.value_object(part_of="Product")
class Discount:
    """A percentage markdown, optionally limited in time."""

    percentage: Float(required=True, min_value=0.0, max_value=100.0)
    valid_till: DateTime()

    def is_active(self, at=None):
        if not self.percentage:
            return False
        if self.valid_till is None:
            return True
        return as_utc(self.valid_till) > (at or utcnow())


@storefront.aggregate
class Product:
    """A sellable product."""

    title: String(required=True, max_length=200)
    description: Text(required=True)
    images: Text()  # JSON array of URLs
    brand: String(required=True, max_length=50)
    category_id: Identifier(required=True)
    price: Float(required=True, min_value=0.0)
    discount: ValueObject(Discount)
    sizes: Text()  # JSON array, upper-cased
    stock: Integer(required=True, min_value=0, default=0)
    tags: Text()  # JSON array, lower-cased
    rating: Float(default=0.0, min_value=0.0, max_value=5.0)
    reviews_count: Integer(default=0, min_value=0)
    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def description_within_limit(self):
        if self.description and len(self.description) > 2000:
            raise ValidationError({"description": ["Description cannot exceed 2000 characters"]})

    @invariant.post
    def images_must_be_web_urls(self):
        urls = self.image_urls
        if len(urls) > MAX_IMAGES:
            raise ValidationError({"images": [f"Cannot have more than {MAX_IMAGES} images"]})
        for url in urls:
            if not _IMAGE_URL.match(url):
                raise ValidationError({"images": [f"Image must be a valid http(s) URL: {url}"]})

    @invariant.post
    def title_must_not_be_blank(self):
        if self.title is not None and not self.title.strip():
            raise ValidationError({"title": ["Product title cannot be empty"]})

    # -------------------------------------------------------------------
    # Derived views
    # -------------------------------------------------------------------
    @property
    def image_urls(self):
        return json.loads(self.images) if self.images else []

    @property
    def size_options(self):
        return json.loads(self.sizes) if self.sizes else []

    @property
    def tag_list(self):
        return json.loads(self.tags) if self.tags else []

    @property
    def effective_price(self):
        """Price after an active discount, rounded to the cent."""
        if self.discount and self.discount.is_active():
            return round_currency(self.price - percentage_of(self.price, self.discount.percentage))
        return round_currency(self.price)

    @property
    def is_available(self):
        return (self.stock or 0) > 0

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        title,
        description,
        brand,
        category_id,
        price,
        stock=0,
        images=None,
        sizes=None,
        tags=None,
        discount=None,
    ):
        now = utcnow()
        product = cls(
            title=title.strip() if title else title,
            description=description,
            brand=brand.strip() if brand else brand,
            category_id=category_id,
            price=round_currency(price),
            stock=stock,
            images=json.dumps(list(images or [])),
            sizes=json.dumps(_normalize_sizes(sizes)),
            tags=json.dumps(_normalize_tags(tags)),
            discount=discount,
            rating=0.0,
            reviews_count=0,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductCreated(
                product_id=product.id,
                title=product.title,
                category_id=category_id,
                price=product.price,
                stock=product.stock,
                created_at=now,
            )
        )
        return product

    def update_details(
        self,
        title=_UNSET,
        description=_UNSET,
        brand=_UNSET,
        category_id=_UNSET,
        price=_UNSET,
        stock=_UNSET,
        images=_UNSET,
        sizes=_UNSET,
        tags=_UNSET,
        discount=_UNSET,
    ):
        if title is not _UNSET:
            self.title = title.strip() if title else title
        if description is not _UNSET:
            self.description = description
        if brand is not _UNSET:
            self.brand = brand.strip() if brand else brand
        if category_id is not _UNSET:
            self.category_id = category_id
        if price is not _UNSET:
            self.price = round_currency(price)
        if stock is not _UNSET:
            self.stock = stock
        if images is not _UNSET:
            self.images = json.dumps(list(images or []))
        if sizes is not _UNSET:
            self.sizes = json.dumps(_normalize_sizes(sizes))
        if tags is not _UNSET:
            self.tags = json.dumps(_normalize_tags(tags))
        if discount is not _UNSET:
            self.discount = discount

        self.updated_at = utcnow()

        self.raise_(
            ProductUpdated(
                product_id=self.id,
                title=self.title,
                price=self.price,
                stock=self.stock,
                updated_at=self.updated_at,
            )
        )

    # -------------------------------------------------------------------
    # Sizes
    # -------------------------------------------------------------------
    def resolve_size(self, size):
        """Normalized size for a cart line.

        Products without sizes ignore the requested size; products with sizes
        require one of them.
        """
        options = self.size_options
        if not options:
            return None

        value = (size or "").strip().upper()
        if not value:
            raise ValidationError({"size": ["Size is required for this product"]})
        if value not in options:
            raise ValidationError({"size": [f"Invalid size. Available sizes: {', '.join(options)}"]})
        return value

    # -------------------------------------------------------------------
    # Stock
    # -------------------------------------------------------------------
    def ensure_stock_for(self, quantity):
        if quantity > (self.stock or 0):
            raise InsufficientStock(
                f"Insufficient stock for {self.title}. Available: {self.stock or 0}, Requested: {quantity}"
            )

    def reserve_stock(self, quantity):
        """Decrement stock, refusing to go below zero."""
        self.ensure_stock_for(quantity)
        self.stock = self.stock - quantity
        self.updated_at = utcnow()

    def release_stock(self, quantity):
        self.stock = (self.stock or 0) + quantity
        self.updated_at = utcnow()

    # -------------------------------------------------------------------
    # Ratings
    # -------------------------------------------------------------------
    def record_rating(self, rating, reviews_count):
        self.rating = rating
        self.reviews_count = reviews_count
        self.updated_at = utcnow()

        self.raise_(
            ProductRated(
                product_id=self.id,
                rating=rating,
                reviews_count=reviews_count,
            )
        )
