"""SQLAlchemy ORM models shared by every bookshare component.

Tables:
- books: Catalog entries owned by members

Loan and feedback tables live beside their managers and register
themselves against the same ``Base``.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


def generate_uuid() -> str:
    """Generate a UUID string for primary keys."""
    return str(uuid4())


def utcnow_iso() -> str:
    """Current UTC time as a fixed-width ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


class Book(Base):
    """Book model - a member's book listed in the catalog."""

    __tablename__ = "books"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)

    # Core fields
    title: Mapped[str] = mapped_column(String(500), nullable=False, index=True)
    author_name: Mapped[str] = mapped_column(String(500), nullable=False, index=True)
    isbn: Mapped[Optional[str]] = mapped_column(String(20), index=True)
    synopsis: Mapped[Optional[str]] = mapped_column(Text)
    cover: Mapped[Optional[str]] = mapped_column(Text)  # FileStore reference

    # Owner-controlled flags
    archived: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    shareable: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    owner_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    # Timestamps
    created_at: Mapped[str] = mapped_column(String(32), default=utcnow_iso, index=True)
    updated_at: Mapped[str] = mapped_column(
        String(32),
        default=utcnow_iso,
        onupdate=utcnow_iso,
    )

    def __repr__(self) -> str:
        return f"<Book(id={self.id}, title='{self.title}', owner={self.owner_id})>"

    @property
    def is_lendable(self) -> bool:
        """Shareable and not archived."""
        return self.shareable and not self.archived
