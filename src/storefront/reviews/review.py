"""Review aggregate: one customer's rating and comment on a product.

A customer reviews a product at most once (``review_key`` is unique), and only
after an order containing it has shipped. The helpful counter and the set of
customers who marked the review helpful always move together.
"""

from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, HasMany, Identifier, Integer, String, Text, ValueObject

from storefront.domain import storefront
from storefront.shared.clock import utcnow

MAX_COMMENT_LENGTH = 1000

# Sentinel for distinguishing "not provided" from None in partial updates
_UNSET = object()


def review_key(customer_id, product_id):
    return f"{customer_id}:{product_id}"


class ReviewStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------
@storefront.event(part_of="Review")
class ReviewSubmitted:
    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    rating = Integer(required=True)
    submitted_at = DateTime(required=True)


@storefront.event(part_of="Review")
class ReviewEdited:
    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    rating = Integer(required=True)
    edited_at = DateTime(required=True)


@storefront.event(part_of="Review")
class ReviewModerated:
    __version__ = 1

    review_id = Identifier(required=True)
    status = String(required=True)
    note = String()


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Review")
class Rating:
    """A star rating from 1 to 5."""

    score = Integer(required=True)

    @invariant.post
    def score_must_be_in_range(self):
        if self.score is not None and (self.score < 1 or self.score > 5):
            raise ValidationError({"rating": ["Rating must be between 1 and 5"]})


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Review")
class HelpfulVote:
    """A customer who found the review helpful."""

    customer_id = Identifier(required=True)
    voted_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Review:
    product_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    review_key = String(required=True, max_length=300, unique=True)
    rating = ValueObject(Rating, required=True)
    comment = Text(required=True)
    votes = HasMany(HelpfulVote)
    helpful_count = Integer(default=0, min_value=0)
    status = String(choices=ReviewStatus, default=ReviewStatus.APPROVED.value)
    moderation_note = String(max_length=500)
    verified = Boolean(default=False)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def comment_within_limit(self):
        if self.comment is not None:
            if not self.comment.strip():
                raise ValidationError({"comment": ["Comment cannot be empty"]})
            if len(self.comment) > MAX_COMMENT_LENGTH:
                raise ValidationError({"comment": [f"Comment cannot exceed {MAX_COMMENT_LENGTH} characters"]})

    @invariant.post
    def helpful_count_matches_voters(self):
        if self.helpful_count != len(self.votes):
            raise ValidationError({"helpful_count": ["Helpful count must equal the number of voters"]})

    @property
    def score(self):
        return self.rating.score

    def is_written_by(self, customer_id):
        return str(self.customer_id) == str(customer_id)

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def submit(cls, product_id, customer_id, rating, comment, verified=False):
        now = utcnow()
        review = cls(
            product_id=product_id,
            customer_id=customer_id,
            review_key=review_key(customer_id, product_id),
            rating=Rating(score=rating),
            comment=comment.strip() if comment else comment,
            helpful_count=0,
            status=ReviewStatus.APPROVED.value,
            verified=verified,
            created_at=now,
            updated_at=now,
        )
        review.raise_(
            ReviewSubmitted(
                review_id=str(review.id),
                product_id=str(product_id),
                customer_id=str(customer_id),
                rating=rating,
                submitted_at=now,
            )
        )
        return review

    # -------------------------------------------------------------------
    # Edit
    # -------------------------------------------------------------------
    def edit(self, rating=_UNSET, comment=_UNSET):
        now = utcnow()
        if rating is not _UNSET and rating is not None:
            self.rating = Rating(score=rating)
        if comment is not _UNSET and comment is not None:
            self.comment = comment.strip()
        self.updated_at = now

        self.raise_(
            ReviewEdited(
                review_id=str(self.id),
                product_id=str(self.product_id),
                rating=self.rating.score,
                edited_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Helpful votes
    # -------------------------------------------------------------------
    def toggle_helpful(self, customer_id):
        """Add or withdraw the customer's helpful mark; returns whether it is now set."""
        existing = next((v for v in self.votes if str(v.customer_id) == str(customer_id)), None)

        with atomic_change(self):
            if existing:
                self.remove_votes(existing)
                self.helpful_count = max(0, self.helpful_count - 1)
            else:
                self.add_votes(HelpfulVote(customer_id=customer_id, voted_at=utcnow()))
                self.helpful_count = self.helpful_count + 1
            self.updated_at = utcnow()

        return existing is None

    # -------------------------------------------------------------------
    # Moderation
    # -------------------------------------------------------------------
    def moderate(self, status, note=None):
        status = ReviewStatus(status)
        self.status = status.value
        self.moderation_note = note
        self.updated_at = utcnow()

        self.raise_(
            ReviewModerated(
                review_id=str(self.id),
                status=status.value,
                note=note,
            )
        )


@storefront.repository(part_of=Review)
class ReviewRepository:
    def find_for(self, customer_id, product_id):
        return self._dao.query.filter(review_key=review_key(customer_id, product_id)).all().first
