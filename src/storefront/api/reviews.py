"""FastAPI endpoints for product reviews."""

from typing import Literal

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from storefront.api.auth import Principal, current_user, require_admin
from storefront.api.envelope import Envelope, ok
from storefront.api.presenters import pagination, review_payload
from storefront.api.schemas import CreateReviewRequest, ModerateReviewRequest, UpdateReviewRequest
from storefront.catalogue.browsing import get_product
from storefront.reviews.editing import DeleteReview, EditReview
from storefront.reviews.listing import customer_reviews, product_reviews
from storefront.reviews.moderation import ModerateReview
from storefront.reviews.review import Review
from storefront.reviews.submission import SubmitReview
from storefront.reviews.voting import ToggleHelpful

review_router = APIRouter(prefix="/api/reviews", tags=["reviews"])

_envelope = {"response_model": Envelope, "response_model_exclude_unset": True}

ReviewSort = Literal["newest", "oldest", "highest", "lowest", "helpful"]


def _load_review(review_id):
    return current_domain.repository_for(Review).get(review_id)


@review_router.post("", status_code=201, **_envelope)
async def create_review(body: CreateReviewRequest, user: Principal = Depends(current_user)) -> Envelope:
    command = SubmitReview(
        product_id=body.product_id,
        customer_id=user.user_id,
        rating=body.rating,
        comment=body.comment,
    )
    review_id = current_domain.process(command, asynchronous=False)
    return ok("Review created successfully", {"review": review_payload(_load_review(review_id))})


@review_router.get("/product/{product_id}", **_envelope)
async def reviews_for_product(
    product_id: str,
    sort: ReviewSort = "newest",
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
) -> Envelope:
    product = get_product(product_id)
    result = product_reviews(product_id, sort=sort, page=page, limit=limit)
    return ok(
        "Reviews retrieved successfully",
        {
            "reviews": [review_payload(review) for review in result.items],
            "rating": {"average": product.rating, "count": product.reviews_count},
            "pagination": pagination(result, "reviews"),
        },
    )


@review_router.get("/user", **_envelope)
async def my_reviews(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: Principal = Depends(current_user),
) -> Envelope:
    result = customer_reviews(user.user_id, page=page, limit=limit)
    return ok(
        "Reviews retrieved successfully",
        {"reviews": [review_payload(review) for review in result.items], "pagination": pagination(result, "reviews")},
    )


@review_router.put("/{review_id}", **_envelope)
async def update_review(
    review_id: str, body: UpdateReviewRequest, user: Principal = Depends(current_user)
) -> Envelope:
    command = EditReview(
        review_id=review_id,
        customer_id=user.user_id,
        rating=body.rating,
        comment=body.comment,
    )
    current_domain.process(command, asynchronous=False)
    return ok("Review updated successfully", {"review": review_payload(_load_review(review_id))})


@review_router.delete("/{review_id}", **_envelope)
async def delete_review(review_id: str, user: Principal = Depends(current_user)) -> Envelope:
    command = DeleteReview(review_id=review_id, customer_id=user.user_id, as_admin=user.is_admin)
    current_domain.process(command, asynchronous=False)
    return ok("Review deleted successfully")


@review_router.post("/{review_id}/helpful", **_envelope)
async def toggle_helpful(review_id: str, user: Principal = Depends(current_user)) -> Envelope:
    result = current_domain.process(ToggleHelpful(review_id=review_id, customer_id=user.user_id), asynchronous=False)
    message = "Review marked as helpful" if result["is_helpful"] else "Helpful mark removed"
    return ok(message, result)


@review_router.put("/{review_id}/moderate", **_envelope)
async def moderate_review(
    review_id: str, body: ModerateReviewRequest, admin: Principal = Depends(require_admin)
) -> Envelope:
    current_domain.process(ModerateReview(review_id=review_id, status=body.status, note=body.note), asynchronous=False)
    return ok("Review moderated successfully", {"review": review_payload(_load_review(review_id))})
