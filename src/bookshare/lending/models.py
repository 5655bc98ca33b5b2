"""SQLAlchemy models for book lending.

Tables:
- loans: Transaction history, one row per borrow
"""

from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    String,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from ..db.models import Base, generate_uuid, utcnow_iso
from .schemas import LoanStatus


class Loan(Base):
    """Loan model - one borrow of one book by one member.

    Rows are never deleted; they form the lending audit trail.
    """

    __tablename__ = "loans"
    __table_args__ = (
        # At most one unsettled (open or pending approval) loan per book
        Index(
            "uq_loans_book_unsettled",
            "book_id",
            unique=True,
            sqlite_where=text("return_approved = 0"),
            postgresql_where=text("NOT return_approved"),
        ),
        CheckConstraint(
            "NOT return_approved OR returned",
            name="ck_loans_approved_after_returned",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)

    book_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("books.id"),
        nullable=False,
        index=True,
    )
    borrower_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    # State
    returned: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    return_approved: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Dates
    borrowed_at: Mapped[str] = mapped_column(String(32), default=utcnow_iso, index=True)
    returned_at: Mapped[Optional[str]] = mapped_column(String(32))
    approved_at: Mapped[Optional[str]] = mapped_column(String(32))

    # Timestamps
    created_at: Mapped[str] = mapped_column(String(32), default=utcnow_iso)
    updated_at: Mapped[str] = mapped_column(
        String(32),
        default=utcnow_iso,
        onupdate=utcnow_iso,
    )

    def __repr__(self) -> str:
        return f"<Loan(id={self.id}, book_id={self.book_id}, status={self.status.value})>"

    @property
    def status(self) -> LoanStatus:
        """Lifecycle state derived from the two flags."""
        if self.return_approved:
            return LoanStatus.CLOSED
        if self.returned:
            return LoanStatus.RETURNED_PENDING
        return LoanStatus.OPEN

    @property
    def is_settled(self) -> bool:
        """Check if the owner has approved the return."""
        return self.status == LoanStatus.CLOSED
