"""Pydantic schemas for book lending."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class LoanStatus(str, Enum):
    """Lifecycle state of a loan."""

    OPEN = "open"  # Borrowed, not yet handed back
    RETURNED_PENDING = "returned_pending"  # Borrower returned, owner not confirmed
    CLOSED = "closed"  # Owner approved the return


class LoanResponse(BaseModel):
    """Schema for loan responses."""

    id: str
    book_id: str
    borrower_id: str
    status: LoanStatus
    returned: bool
    return_approved: bool
    borrowed_at: str
    returned_at: Optional[str] = None
    approved_at: Optional[str] = None

    model_config = {"from_attributes": True}


class BorrowedBookResponse(BaseModel):
    """A loan rendered with the book it concerns."""

    id: str  # book id
    loan_id: str
    title: str
    author_name: str
    isbn: Optional[str]
    rate: float
    borrower_id: str
    borrowed_at: str
    returned: bool
    return_approved: bool
    status: LoanStatus
