"""
Page-number pagination over ordered collections.

Pages are 1-based. Page k holds items [(k-1)*per_page, k*per_page) of the
ordered collection; a page past the end is empty rather than an error.
"""

import math
from dataclasses import dataclass
from typing import Any, Generic, List, Optional, Sequence, TypeVar, Union

from sqlalchemy.orm import Query

from .exceptions import ValidationError

T = TypeVar("T")

DEFAULT_PER_PAGE = 30


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of results plus the metadata needed to render page links."""

    items: List[T]
    current_page: int
    per_page: int
    total_entries: int

    @property
    def total_pages(self) -> int:
        return max(1, math.ceil(self.total_entries / self.per_page))

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.current_page > 1

    @property
    def next_page(self) -> Optional[int]:
        return self.current_page + 1 if self.has_next else None

    @property
    def prev_page(self) -> Optional[int]:
        return self.current_page - 1 if self.has_prev else None

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


# PUBLIC_INTERFACE
def paginate(
    items: Union[Sequence[T], Query],
    page: int = 1,
    per_page: int = DEFAULT_PER_PAGE
) -> Page[T]:
    """
    Slice an ordered collection into a page.

    Args:
        items: An ordered sequence, or an ordered SQLAlchemy query
        page: 1-based page number
        per_page: Page size

    Returns:
        Page: The requested slice and page metadata

    Raises:
        ValidationError: If page or per_page is less than 1
    """
    if page < 1:
        raise ValidationError({"page": ["must be greater than or equal to 1"]})
    if per_page < 1:
        raise ValidationError({"per_page": ["must be greater than or equal to 1"]})

    offset = (page - 1) * per_page
    if isinstance(items, Query):
        total = items.order_by(None).count()
        sliced: List[Any] = items.offset(offset).limit(per_page).all()
    else:
        total = len(items)
        sliced = list(items[offset:offset + per_page])

    return Page(items=sliced, current_page=page, per_page=per_page, total_entries=total)
