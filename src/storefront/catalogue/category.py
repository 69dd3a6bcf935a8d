"""Category aggregate root for grouping products."""

import re

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, String, Text

from storefront.catalogue.events import CategoryCreated, CategoryUpdated
from storefront.domain import storefront
from storefront.shared.clock import utcnow


def slugify(name):
    """Lowercase, hyphenated, URL-safe form of a category name."""
    slug = (name or "").lower()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def default_description(name):
    return f"Browse our {name.lower()} collection"


@storefront.aggregate
class Category:
    """A named grouping of products with a unique, name-derived slug."""

    name: String(required=True, max_length=100, unique=True)
    slug: String(required=True, max_length=120, unique=True)
    description: Text()
    image: String(max_length=500)
    is_active: Boolean(default=True)
    created_at: DateTime()
    updated_at: DateTime()

    @classmethod
    def create(cls, name, description=None, image=None, slug=None):
        name = (name or "").strip()
        slug = slug or slugify(name)
        if not slug:
            raise ValidationError({"name": ["Category name must contain letters or digits"]})

        now = utcnow()
        category = cls(
            name=name,
            slug=slug,
            description=description or default_description(name),
            image=image,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        category.raise_(
            CategoryCreated(
                category_id=category.id,
                name=category.name,
                slug=category.slug,
            )
        )
        return category

    def update_details(self, name=None, description=None, image=None, is_active=None):
        if name is not None and name.strip() != self.name:
            new_slug = slugify(name)
            if not new_slug:
                raise ValidationError({"name": ["Category name must contain letters or digits"]})
            self.name = name.strip()
            self.slug = new_slug
        if description is not None:
            self.description = description
        if image is not None:
            self.image = image
        if is_active is not None:
            self.is_active = is_active

        self.updated_at = utcnow()

        self.raise_(
            CategoryUpdated(
                category_id=self.id,
                name=self.name,
                slug=self.slug,
                is_active=str(self.is_active),
            )
        )


@storefront.repository(part_of=Category)
class CategoryRepository:
    def find_by_name(self, name):
        """Case-insensitive lookup by name."""
        return self._dao.query.filter(name__iexact=(name or "").strip()).all().first

    def find_by_slug(self, slug):
        return self._dao.query.filter(slug=slug).all().first
