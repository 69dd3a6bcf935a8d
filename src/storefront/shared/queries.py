"""Query helpers over Protean DAOs."""

from dataclasses import dataclass
from math import ceil

from protean.utils.globals import current_domain


def fetch_all(aggregate_cls, *args, order_by=None, **filters):
    """Every record matching the filters.

    Protean caps a query at 100 rows unless told otherwise, so the query is
    re-issued with the reported total as its limit when there are more.
    """
    query = current_domain.repository_for(aggregate_cls)._dao.query.filter(*args, **filters)
    if order_by:
        query = query.order_by(order_by)

    result = query.all()
    if result.total > len(result.items):
        result = query.limit(result.total).all()
    return result.items


@dataclass(frozen=True)
class Page:
    items: list
    page: int
    limit: int
    total: int

    @property
    def total_pages(self):
        return ceil(self.total / self.limit) if self.limit else 0

    @property
    def has_next(self):
        return self.page < self.total_pages

    @property
    def has_prev(self):
        return self.page > 1


def paginate(aggregate_cls, *args, page=1, limit=10, order_by="-created_at", **filters):
    """One page of records, newest first by default."""
    page = max(1, int(page or 1))
    limit = max(1, int(limit or 10))

    query = current_domain.repository_for(aggregate_cls)._dao.query.filter(*args, **filters)
    if order_by:
        query = query.order_by(order_by)

    result = query.offset((page - 1) * limit).limit(limit).all()
    return Page(items=result.items, page=page, limit=limit, total=result.total)


def custom_setting(key, default):
    """Value from the domain's ``[custom]`` configuration section."""
    custom = current_domain.config.get("custom") or {}
    return custom.get(key, default)
