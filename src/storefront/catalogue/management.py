"""Catalogue administration: commands and handlers for products and categories."""

import json

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.category import Category
from storefront.catalogue.product import Discount, Product
from storefront.domain import storefront

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------
@storefront.command(part_of="Product")
class CreateProduct:
    title: String(required=True, max_length=200)
    description: Text(required=True)
    brand: String(required=True, max_length=50)
    category_id: Identifier(required=True)
    price: Float(required=True, min_value=0.0)
    stock: Integer(default=0, min_value=0)
    images: Text()  # JSON array of URLs
    sizes: Text()  # JSON array
    tags: Text()  # JSON array
    discount_percentage: Float(min_value=0.0, max_value=100.0)
    discount_valid_till: DateTime()


@storefront.command(part_of="Product")
class UpdateProduct:
    product_id: Identifier(required=True)
    changes: Text(required=True)  # JSON object of the fields to change


@storefront.command(part_of="Product")
class DeleteProduct:
    product_id: Identifier(required=True)


@storefront.command(part_of="Category")
class CreateCategory:
    name: String(required=True, max_length=100)
    description: Text()
    image: String(max_length=500)


@storefront.command(part_of="Category")
class UpdateCategory:
    category_id: Identifier(required=True)
    name: String(max_length=100)
    description: Text()
    image: String(max_length=500)
    is_active: Boolean()


def _loads(value):
    return json.loads(value) if value else None


def _discount(percentage, valid_till):
    if percentage is None:
        return None
    return Discount(percentage=percentage, valid_till=valid_till)


def _ensure_category_exists(category_id):
    try:
        current_domain.repository_for(Category).get(category_id)
    except ObjectNotFoundError:
        raise ValidationError({"category_id": ["Category not found"]}) from None


def _ensure_name_available(name, category_id=None):
    existing = current_domain.repository_for(Category).find_by_name(name)
    if existing is not None and str(existing.id) != str(category_id):
        raise ValidationError({"name": ["Category with this name already exists"]})


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------
@storefront.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(CreateProduct)
    def create_product(self, command):
        _ensure_category_exists(command.category_id)

        product = Product.create(
            title=command.title,
            description=command.description,
            brand=command.brand,
            category_id=command.category_id,
            price=command.price,
            stock=command.stock or 0,
            images=_loads(command.images),
            sizes=_loads(command.sizes),
            tags=_loads(command.tags),
            discount=_discount(command.discount_percentage, command.discount_valid_till),
        )
        current_domain.repository_for(Product).add(product)

        logger.info("Product created", product_id=str(product.id), title=product.title)
        return str(product.id)

    @handle(UpdateProduct)
    def update_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)

        changes = json.loads(command.changes)
        if "category_id" in changes:
            _ensure_category_exists(changes["category_id"])
        if "discount_percentage" in changes or "discount_valid_till" in changes:
            changes["discount"] = _discount(
                changes.pop("discount_percentage", None),
                changes.pop("discount_valid_till", None),
            )

        product.update_details(**changes)
        repo.add(product)
        return str(product.id)

    @handle(DeleteProduct)
    def delete_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        repo._dao.delete(product)

        logger.info("Product deleted", product_id=str(command.product_id))


@storefront.command_handler(part_of=Category)
class ManageCategoryHandler:
    @handle(CreateCategory)
    def create_category(self, command):
        _ensure_name_available(command.name)

        category = Category.create(
            name=command.name,
            description=command.description,
            image=command.image,
        )
        current_domain.repository_for(Category).add(category)
        return str(category.id)

    @handle(UpdateCategory)
    def update_category(self, command):
        repo = current_domain.repository_for(Category)
        category = repo.get(command.category_id)

        if command.name is not None:
            _ensure_name_available(command.name, category_id=category.id)

        category.update_details(
            name=command.name,
            description=command.description,
            image=command.image,
            is_active=command.is_active,
        )
        repo.add(category)
        return str(category.id)
