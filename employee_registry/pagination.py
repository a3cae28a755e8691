"""Page windowing over a filtered, sorted select."""

import math
from dataclasses import dataclass
from typing import Any, Sequence

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session


@dataclass(frozen=True)
class PageWindow:
    """The ``[(page - 1) * size, page * size)`` slice and its metadata."""

    page_number: int
    page_size: int
    total_count: int = 0

    def __post_init__(self):
        if self.page_number < 1:
            raise ValueError("page_number must be >= 1")
        if self.page_size < 1:
            raise ValueError("page_size must be >= 1")

    @property
    def offset(self) -> int:
        return (self.page_number - 1) * self.page_size

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page_size)

    @property
    def has_previous_page(self) -> bool:
        return self.page_number > 1

    @property
    def has_next_page(self) -> bool:
        return self.page_number < self.total_pages

    def metadata(self) -> dict[str, Any]:
        return {
            "total_count": self.total_count,
            "page_number": self.page_number,
            "page_size": self.page_size,
            "total_pages": self.total_pages,
            "has_previous_page": self.has_previous_page,
            "has_next_page": self.has_next_page,
        }


@dataclass(frozen=True)
class Page:
    items: Sequence[Any]
    window: PageWindow


def count_rows(session: Session, stmt: Select) -> int:
    """Count the rows a select would return, ignoring its ordering."""
    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    return session.scalar(count_stmt) or 0


def paginate(session: Session, stmt: Select, page_number: int, page_size: int) -> Page:
    """
    Execute ``stmt`` for one page.

    The count and the windowed fetch run in the caller's session, so both
    observe the same transaction. A page past the end yields no items but
    still reports accurate totals.
    """
    total = count_rows(session, stmt)
    window = PageWindow(page_number=page_number, page_size=page_size, total_count=total)
    if total == 0 or window.offset >= total:
        return Page(items=[], window=window)
    items = session.scalars(stmt.offset(window.offset).limit(page_size)).all()
    return Page(items=items, window=window)
