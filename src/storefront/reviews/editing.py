"""EditReview / DeleteReview: owner changes, followed by a rating recompute."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, Identifier, Integer, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.reviews.rating import recompute_product_rating
from storefront.reviews.review import Review


@storefront.command(part_of="Review")
class EditReview:
    review_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    rating = Integer(min_value=1, max_value=5)
    comment = Text()


@storefront.command(part_of="Review")
class DeleteReview:
    review_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    as_admin = Boolean(default=False)


def _owned_review(repo, review_id, customer_id, as_admin=False):
    """The review, hidden from anyone but its author (or an administrator)."""
    review = repo.get(review_id)
    if not as_admin and not review.is_written_by(customer_id):
        raise ObjectNotFoundError({"review": ["Review not found"]})
    return review


@storefront.command_handler(part_of=Review)
class EditReviewHandler:
    @handle(EditReview)
    def edit_review(self, command):
        repo = current_domain.repository_for(Review)
        review = _owned_review(repo, command.review_id, command.customer_id)

        review.edit(rating=command.rating, comment=command.comment)
        repo.add(review)

        recompute_product_rating(review.product_id, changed=review)

    @handle(DeleteReview)
    def delete_review(self, command):
        repo = current_domain.repository_for(Review)
        review = _owned_review(repo, command.review_id, command.customer_id, as_admin=command.as_admin)
        product_id = review.product_id

        repo._dao.delete(review)

        recompute_product_rating(product_id, removed_id=review.id)
