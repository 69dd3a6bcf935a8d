"""Domain events for the Product and Category aggregates."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductCreated:
    """A product was added to the catalogue."""

    __version__ = 1

    product_id: Identifier(required=True)
    title: String(required=True)
    category_id: Identifier(required=True)
    price: Float(required=True)
    stock: Integer(required=True)
    created_at: DateTime(required=True)


@storefront.event(part_of="Product")
class ProductUpdated:
    """Product details, price or stock level were changed by an administrator."""

    __version__ = 1

    product_id: Identifier(required=True)
    title: String(required=True)
    price: Float(required=True)
    stock: Integer(required=True)
    updated_at: DateTime(required=True)


@storefront.event(part_of="Product")
class ProductRated:
    """The product's average rating was recomputed from its reviews."""

    __version__ = 1

    product_id: Identifier(required=True)
    rating: Float(required=True)
    reviews_count: Integer(required=True)


@storefront.event(part_of="Category")
class CategoryCreated:
    """A new category was created."""

    __version__ = 1

    category_id: Identifier(required=True)
    name: String(required=True)
    slug: String(required=True)


@storefront.event(part_of="Category")
class CategoryUpdated:
    """A category was renamed, re-described or toggled."""

    __version__ = 1

    category_id: Identifier(required=True)
    name: String(required=True)
    slug: String(required=True)
    is_active: String(required=True)
