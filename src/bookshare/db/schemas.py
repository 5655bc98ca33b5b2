"""Pydantic schemas shared across components."""

import math
from typing import Generic, TypeVar

import pydantic
from pydantic import BaseModel, Field

from ..errors import ValidationError

T = TypeVar("T")


class PageRequest(BaseModel):
    """Zero-based page number and page size."""

    page: int = Field(0, ge=0)
    size: int = Field(10, ge=1)

    @property
    def offset(self) -> int:
        return self.page * self.size


def page_request(page: int, size: int, max_size: int) -> PageRequest:
    """Validate paging arguments.

    Raises:
        ValidationError: page is negative or size is outside 1..max_size
    """
    try:
        request = PageRequest(page=page, size=size)
    except pydantic.ValidationError as e:
        raise ValidationError.from_pydantic(e) from e
    if request.size > max_size:
        raise ValidationError(f"page size must not exceed {max_size}")
    return request


class PageResponse(BaseModel, Generic[T]):
    """One page of results plus totals."""

    content: list[T]
    number: int
    size: int
    total_elements: int
    total_pages: int
    first: bool
    last: bool

    @classmethod
    def of(cls, content: list, request: PageRequest, total_elements: int) -> "PageResponse":
        """Assemble a page from its rows and the unpaged row count."""
        total_pages = math.ceil(total_elements / request.size) if total_elements else 0
        return cls(
            content=content,
            number=request.page,
            size=request.size,
            total_elements=total_elements,
            total_pages=total_pages,
            first=request.page == 0,
            last=request.page >= total_pages - 1,
        )
