from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from orchestra.domain.status import TaskStatus

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


@dataclass(frozen=True, slots=True)
class PageRequest:
    offset: int = 0
    page_size: int = DEFAULT_PAGE_SIZE

    def __post_init__(self) -> None:
        if self.offset < 0:
            raise ValueError("offset must be >= 0")
        if self.page_size < 1:
            raise ValueError("page_size must be >= 1")
        if self.page_size > MAX_PAGE_SIZE:
            raise ValueError(f"page_size must be <= {MAX_PAGE_SIZE}")

    @classmethod
    def of(cls, page: int, page_size: int = DEFAULT_PAGE_SIZE) -> PageRequest:
        """Build a request from a zero-based page number."""
        if page < 0:
            raise ValueError("page must be >= 0")
        return cls(offset=page * page_size, page_size=page_size)


@dataclass(frozen=True, slots=True)
class QueryBounds:
    offset: int = 0
    limit: int | None = None


UNBOUNDED = QueryBounds()


def resolve_bounds(page: PageRequest | None) -> QueryBounds:
    """No page request means the whole result set."""
    if page is None:
        return UNBOUNDED
    return QueryBounds(offset=page.offset, limit=page.page_size)


@dataclass(frozen=True, slots=True)
class DeadlineFilter:
    """
    Deadline predicate of a task query.

    Both bounds absent selects tasks without a deadline; a single bound is an
    open range; both bounds form an inclusive range.
    """

    deadline_from: datetime | None = None
    deadline_to: datetime | None = None

    @property
    def requires_no_deadline(self) -> bool:
        return self.deadline_from is None and self.deadline_to is None


@dataclass(frozen=True, slots=True)
class TaskQuery:
    user_id: int
    status: TaskStatus | None = None
    exclude_status: TaskStatus | None = None
    deadline: DeadlineFilter | None = None
