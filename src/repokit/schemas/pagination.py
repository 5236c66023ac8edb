"""Pagination schemas."""

import enum
import math
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class SortOrder(str, enum.Enum):
    """Sort direction for sorted reads."""

    ASC = "ASC"
    DESC = "DESC"

    @classmethod
    def coerce(cls, value: "SortOrder | str") -> "SortOrder":
        """Accept an enum member or a case-insensitive 'asc'/'desc' string."""
        if isinstance(value, cls):
            return value
        return cls(str(value).upper())


class Page(BaseModel, Generic[T]):
    """One page of entities plus totals for the whole result set."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    data: list[T]
    total: int = Field(..., ge=0)
    total_pages: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    items_per_page: int = Field(..., ge=1)

    @staticmethod
    def count_pages(total: int, items_per_page: int) -> int:
        """Number of pages needed for total items (ceiling division)."""
        return math.ceil(total / items_per_page)

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages
