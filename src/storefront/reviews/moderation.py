"""ModerateReview: administrators approve, reject or hold a review."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.reviews.review import Review, ReviewStatus


@storefront.command(part_of="Review")
class ModerateReview:
    review_id = Identifier(required=True)
    status = String(required=True, choices=ReviewStatus)
    note = String(max_length=500)


@storefront.command_handler(part_of=Review)
class ModerateReviewHandler:
    @handle(ModerateReview)
    def moderate_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)
        review.moderate(command.status, command.note)
        repo.add(review)
