"""FastAPI endpoints for products and categories."""

import json

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from storefront.api.auth import Principal, require_admin
from storefront.api.envelope import Envelope, ok
from storefront.api.presenters import category_payload, pagination, product_payload
from storefront.api.schemas import (
    CreateCategoryRequest,
    CreateProductRequest,
    UpdateCategoryRequest,
    UpdateProductRequest,
)
from storefront.catalogue.browsing import (
    ProductFilter,
    browse_products,
    count_products,
    get_category,
    get_product,
    list_categories,
)
from storefront.catalogue.management import (
    CreateCategory,
    CreateProduct,
    DeleteProduct,
    UpdateCategory,
    UpdateProduct,
)

product_router = APIRouter(prefix="/api/products", tags=["products"])
category_router = APIRouter(prefix="/api/categories", tags=["categories"])

_envelope = {"response_model": Envelope, "response_model_exclude_unset": True}


# --- Product endpoints ---


@product_router.get("", **_envelope)
async def list_products(
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1, le=100),
    sort: str | None = None,
    category: str | None = None,
    brand: str | None = None,
    min_price: float | None = Query(None, ge=0, alias="minPrice"),
    max_price: float | None = Query(None, ge=0, alias="maxPrice"),
    search: str | None = None,
    in_stock: bool | None = Query(None, alias="inStock"),
) -> Envelope:
    filters = ProductFilter(
        category=category,
        brand=brand,
        min_price=min_price,
        max_price=max_price,
        search=search,
        in_stock=in_stock,
    )
    result = browse_products(filters, page=page, limit=limit, sort=sort)
    return ok(
        "Products retrieved successfully",
        {
            "products": [product_payload(product) for product in result.items],
            "pagination": pagination(result, "products"),
        },
    )


@product_router.get("/{product_id}", **_envelope)
async def product_detail(product_id: str) -> Envelope:
    return ok("Product retrieved successfully", {"product": product_payload(get_product(product_id))})


@product_router.post("", status_code=201, **_envelope)
async def create_product(body: CreateProductRequest, admin: Principal = Depends(require_admin)) -> Envelope:
    command = CreateProduct(
        title=body.title,
        description=body.description,
        brand=body.brand,
        category_id=body.category_id,
        price=body.price,
        stock=body.stock,
        images=json.dumps(body.images),
        sizes=json.dumps(body.sizes),
        tags=json.dumps(body.tags),
        discount_percentage=body.discount.percentage if body.discount else None,
        discount_valid_till=body.discount.valid_till if body.discount else None,
    )
    product_id = current_domain.process(command, asynchronous=False)
    return ok("Product created successfully", {"product": product_payload(get_product(product_id))})


@product_router.put("/{product_id}", **_envelope)
async def update_product(
    product_id: str, body: UpdateProductRequest, admin: Principal = Depends(require_admin)
) -> Envelope:
    changes = body.model_dump(exclude_unset=True, mode="json")
    if "discount" in changes:
        discount = changes.pop("discount") or {}
        changes["discount_percentage"] = discount.get("percentage")
        changes["discount_valid_till"] = discount.get("valid_till")

    current_domain.process(UpdateProduct(product_id=product_id, changes=json.dumps(changes)), asynchronous=False)
    return ok("Product updated successfully", {"product": product_payload(get_product(product_id))})


@product_router.delete("/{product_id}", **_envelope)
async def delete_product(product_id: str, admin: Principal = Depends(require_admin)) -> Envelope:
    current_domain.process(DeleteProduct(product_id=product_id), asynchronous=False)
    return ok("Product deleted successfully")


# --- Category endpoints ---


@category_router.get("", **_envelope)
async def categories(include_inactive: bool = False) -> Envelope:
    listing = list_categories(include_inactive=include_inactive)
    return ok(
        "Categories retrieved successfully",
        {"categories": [category_payload(category, count) for category, count in listing]},
    )


@category_router.get("/{category_id}", **_envelope)
async def category_detail(category_id: str) -> Envelope:
    category = get_category(category_id)
    return ok(
        "Category retrieved successfully",
        {"category": category_payload(category, count_products(category.id))},
    )


@category_router.post("", status_code=201, **_envelope)
async def create_category(body: CreateCategoryRequest, admin: Principal = Depends(require_admin)) -> Envelope:
    command = CreateCategory(name=body.name, description=body.description, image=body.image)
    category_id = current_domain.process(command, asynchronous=False)
    return ok("Category created successfully", {"category": category_payload(get_category(category_id), 0)})


@category_router.put("/{category_id}", **_envelope)
async def update_category(
    category_id: str, body: UpdateCategoryRequest, admin: Principal = Depends(require_admin)
) -> Envelope:
    command = UpdateCategory(
        category_id=category_id,
        name=body.name,
        description=body.description,
        image=body.image,
        is_active=body.is_active,
    )
    current_domain.process(command, asynchronous=False)
    category = get_category(category_id)
    return ok(
        "Category updated successfully",
        {"category": category_payload(category, count_products(category.id))},
    )
