"""Shape aggregates into the response payloads."""

from storefront.coupons.engine import usage_count
from storefront.ordering.lifecycle import read_history


def pagination(page, noun):
    return {
        "current_page": page.page,
        "total_pages": page.total_pages,
        f"total_{noun}": page.total,
        "has_next_page": page.has_next,
        "has_prev_page": page.has_prev,
    }


def product_payload(product):
    discount = None
    if product.discount is not None:
        discount = {
            "percentage": product.discount.percentage,
            "valid_till": product.discount.valid_till,
        }
    return {
        "id": str(product.id),
        "title": product.title,
        "description": product.description,
        "images": product.image_urls,
        "brand": product.brand,
        "category_id": str(product.category_id),
        "price": product.price,
        "discounted_price": product.effective_price,
        "discount": discount,
        "sizes": product.size_options,
        "stock": product.stock,
        "is_available": product.is_available,
        "tags": product.tag_list,
        "rating": product.rating,
        "reviews_count": product.reviews_count,
        "created_at": product.created_at,
        "updated_at": product.updated_at,
    }


def category_payload(category, product_count=None):
    payload = {
        "id": str(category.id),
        "name": category.name,
        "slug": category.slug,
        "description": category.description,
        "image": category.image,
        "is_active": category.is_active,
        "created_at": category.created_at,
    }
    if product_count is not None:
        payload["product_count"] = product_count
    return payload


def coupon_payload(coupon):
    return {
        "id": str(coupon.id),
        "code": coupon.code,
        "discount_percent": coupon.discount_percent,
        "expiry_date": coupon.expiry_date,
        "minimum_order_amount": coupon.minimum_order_amount,
        "usage_limit": coupon.usage_limit,
        "used_count": usage_count(coupon),
        "is_expired": coupon.is_expired(),
    }


def cart_payload(view):
    cart = view.cart
    items = []
    if cart is not None:
        for item in cart.items:
            product = view.products.get(str(item.product_id))
            items.append(
                {
                    "id": str(item.id),
                    "product_id": str(item.product_id),
                    "title": product.title if product else None,
                    "image": (product.image_urls or [None])[0] if product else None,
                    "size": item.size,
                    "quantity": item.quantity,
                    "unit_price": item.unit_price,
                    "in_stock": product.stock if product else 0,
                }
            )

    coupon = None
    if view.coupon is not None:
        coupon = {
            "code": view.coupon.code,
            "discount_percent": view.coupon.discount_percent,
            "minimum_order_amount": view.coupon.minimum_order_amount,
        }

    return {
        "items": items,
        "applied_coupon": coupon,
        "summary": view.summary.to_dict(),
    }


def _address_payload(address):
    return {
        "full_name": address.full_name,
        "address_line1": address.address_line1,
        "address_line2": address.address_line2,
        "city": address.city,
        "state": address.state,
        "postal_code": address.postal_code,
        "country": address.country,
        "phone": address.phone,
    }


def _order_common(order):
    coupon = None
    if order.coupon is not None:
        coupon = {
            "code": order.coupon.code,
            "discount_percent": order.coupon.discount_percent,
            "discount_amount": order.coupon.discount_amount,
        }
    return {
        "id": str(order.id),
        "order_number": order.order_number,
        "items": [
            {
                "product_id": str(item.product_id),
                "title": item.title,
                "image": item.image,
                "size": item.size,
                "quantity": item.quantity,
                "unit_price": item.unit_price,
                "line_total": item.line_total,
            }
            for item in order.items
        ],
        "shipping_address": _address_payload(order.shipping_address),
        "payment_method": order.payment_method,
        "pricing": {
            "subtotal": order.pricing.subtotal,
            "discount_amount": order.pricing.discount_amount,
            "total": order.pricing.total,
        },
        "applied_coupon": coupon,
        "status": order.status,
        "status_history": read_history(order),
        "tracking_number": order.tracking_number,
        "carrier": order.carrier,
        "tracking_url": order.tracking_url,
        "notes": order.notes,
        "shipped_at": order.shipped_at,
        "delivered_at": order.delivered_at,
        "cancelled_at": order.cancelled_at,
        "created_at": order.created_at,
    }


def order_payload(order):
    payload = _order_common(order)
    payload["customer_id"] = str(order.customer_id)
    return payload


def guest_order_payload(order):
    payload = _order_common(order)
    payload["guest"] = {
        "name": order.guest_name,
        "email": order.guest_email,
        "phone": order.guest_phone,
    }
    return payload


def review_payload(review):
    return {
        "id": str(review.id),
        "product_id": str(review.product_id),
        "customer_id": str(review.customer_id),
        "rating": review.score,
        "comment": review.comment,
        "helpful": review.helpful_count,
        "status": review.status,
        "moderation_note": review.moderation_note,
        "verified": review.verified,
        "created_at": review.created_at,
        "updated_at": review.updated_at,
    }
