"""Book lending module.

Provides functionality for:
- Borrowing shareable books from other members
- Returning borrowed books
- Owner approval of returns
- Borrowed and lent-out listings
"""

from .manager import LendingLedger
from .models import Loan
from .schemas import BorrowedBookResponse, LoanResponse, LoanStatus

__all__ = [
    "LendingLedger",
    "Loan",
    "BorrowedBookResponse",
    "LoanResponse",
    "LoanStatus",
]
