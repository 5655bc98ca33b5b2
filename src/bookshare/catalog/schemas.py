"""Pydantic schemas for catalog books."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ..db.models import Book


class BookBase(BaseModel):
    """Base book fields."""

    title: str = Field(..., min_length=1, max_length=500)
    author_name: str = Field(..., min_length=1, max_length=500)
    isbn: Optional[str] = Field(None, max_length=20)
    synopsis: Optional[str] = None
    cover: Optional[str] = Field(None, description="FileStore reference")
    shareable: bool = False

    @field_validator("title", "author_name")
    @classmethod
    def not_blank(cls, v):
        """Reject whitespace-only values."""
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()

    @field_validator("isbn")
    @classmethod
    def normalize_isbn(cls, v):
        """Strip hyphens and spaces from the ISBN."""
        if v is None:
            return v
        v = v.replace("-", "").replace(" ", "")
        return v or None


class BookCreate(BookBase):
    """Schema for listing a new book."""

    pass


class BookResponse(BaseModel):
    """Book view with its computed rating."""

    id: str
    title: str
    author_name: str
    isbn: Optional[str]
    synopsis: Optional[str]
    owner_id: str
    cover_ref: Optional[str] = None
    cover: Optional[bytes] = None
    archived: bool
    shareable: bool
    rate: float = 0.0
    available: Optional[bool] = None

    @classmethod
    def from_book(
        cls,
        book: Book,
        rate: float = 0.0,
        cover: Optional[bytes] = None,
        available: Optional[bool] = None,
    ) -> "BookResponse":
        return cls(
            id=book.id,
            title=book.title,
            author_name=book.author_name,
            isbn=book.isbn,
            synopsis=book.synopsis,
            owner_id=book.owner_id,
            cover_ref=book.cover,
            cover=cover,
            archived=book.archived,
            shareable=book.shareable,
            rate=rate,
            available=available,
        )
