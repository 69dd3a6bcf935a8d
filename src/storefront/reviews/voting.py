"""ToggleHelpful: mark or unmark a review as helpful."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.reviews.review import Review


@storefront.command(part_of="Review")
class ToggleHelpful:
    review_id = Identifier(required=True)
    customer_id = Identifier(required=True)


@storefront.command_handler(part_of=Review)
class ToggleHelpfulHandler:
    @handle(ToggleHelpful)
    def toggle_helpful(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)

        is_helpful = review.toggle_helpful(command.customer_id)
        repo.add(review)
        return {"is_helpful": is_helpful, "helpful_count": review.helpful_count}
