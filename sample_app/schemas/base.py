"""
Base Pydantic schemas and common schema utilities.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from sample_app.core.pagination import Page


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(from_attributes=True)


class BaseDBSchema(BaseSchema):
    """Base schema for database models with common fields."""

    id: int
    created_at: datetime


class PageMeta(BaseSchema):
    """Pagination metadata rendered next to a list."""

    current_page: int
    per_page: int
    total_entries: int
    total_pages: int
    has_next: bool
    has_prev: bool
    next_page: Optional[int] = None
    prev_page: Optional[int] = None

    @classmethod
    def from_page(cls, page: Page) -> "PageMeta":
        return cls(
            current_page=page.current_page,
            per_page=page.per_page,
            total_entries=page.total_entries,
            total_pages=page.total_pages,
            has_next=page.has_next,
            has_prev=page.has_prev,
            next_page=page.next_page,
            prev_page=page.prev_page,
        )


class MessageResponse(BaseSchema):
    """Flash-style message returned by actions without a body."""

    flash: str
    messages: List[str] = []
