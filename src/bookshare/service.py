"""BookNetwork: every operation a caller can perform, in one place.

Wires the catalog, lending ledger and feedback intake over one database
and one per-book lock registry.
"""

from typing import Optional

import pydantic

from .catalog import BookCreate, BookResponse, Catalog, FileStore
from .config import get_config
from .db.schemas import PageResponse
from .db.sqlite import Database
from .errors import ValidationError
from .feedback import FeedbackIntake
from .guard import Actor
from .lending import LendingLedger, LoanResponse
from .locks import BookLocks


class BookNetwork:
    """Application service for the book-lending catalog."""

    def __init__(
        self,
        db: Database,
        file_store: Optional[FileStore] = None,
        max_page_size: Optional[int] = None,
    ):
        max_page_size = max_page_size or get_config().max_page_size
        self.db = db
        self.locks = BookLocks()
        self.catalog = Catalog(db, self.locks, file_store=file_store, max_page_size=max_page_size)
        self.ledger = LendingLedger(db, self.catalog, self.locks, max_page_size=max_page_size)
        self.feedback = FeedbackIntake(db, self.catalog, self.locks, max_page_size=max_page_size)

    # -------------------------------------------------------------------------
    # Catalog
    # -------------------------------------------------------------------------

    def create_book(
        self,
        actor: Actor,
        title: str,
        author_name: str,
        isbn: Optional[str] = None,
        synopsis: Optional[str] = None,
        cover: Optional[str] = None,
        shareable: bool = False,
    ) -> str:
        """List a new book owned by ``actor``. Returns its id."""
        try:
            data = BookCreate(
                title=title,
                author_name=author_name,
                isbn=isbn,
                synopsis=synopsis,
                cover=cover,
                shareable=shareable,
            )
        except pydantic.ValidationError as e:
            raise ValidationError.from_pydantic(e) from e
        return self.catalog.register(data, actor)

    def get_book(self, book_id: str) -> BookResponse:
        """Book view with rating and availability."""
        with self.db.get_session() as session:
            book = self.catalog.require(book_id, session=session)
            available = self.ledger.is_available(book_id, session=session)
            return self.catalog.render(book, session, available=available)

    def list_books(self, page: int, size: int, actor: Actor) -> PageResponse:
        return self.catalog.list_displayable(page, size, actor)

    def list_owned_books(self, page: int, size: int, actor: Actor) -> PageResponse:
        return self.catalog.list_owned(page, size, actor)

    def set_shareable(self, book_id: str, actor: Actor) -> bool:
        return self.catalog.set_shareable(book_id, actor)

    def set_archived(self, book_id: str, actor: Actor) -> bool:
        return self.catalog.set_archived(book_id, actor)

    def set_cover(self, book_id: str, actor: Actor, cover_ref: Optional[str]) -> None:
        self.catalog.set_cover(book_id, actor, cover_ref)

    # -------------------------------------------------------------------------
    # Lending
    # -------------------------------------------------------------------------

    def borrow_book(self, book_id: str, actor: Actor) -> str:
        return self.ledger.open_loan(book_id, actor)

    def return_book(self, book_id: str, actor: Actor) -> str:
        return self.ledger.mark_returned(book_id, actor)

    def approve_return(self, book_id: str, actor: Actor) -> str:
        return self.ledger.approve_return(book_id, actor)

    def list_borrowed(self, page: int, size: int, actor: Actor) -> PageResponse:
        return self.ledger.list_borrowed(page, size, actor)

    def list_returned(self, page: int, size: int, actor: Actor) -> PageResponse:
        return self.ledger.list_returned(page, size, actor)

    def loan_history(self, book_id: str) -> list[LoanResponse]:
        """Every loan of a book, newest first."""
        self.catalog.require(book_id)
        return [LoanResponse.model_validate(loan) for loan in self.ledger.history_for_book(book_id)]

    # -------------------------------------------------------------------------
    # Feedback
    # -------------------------------------------------------------------------

    def submit_feedback(self, book_id: str, actor: Actor, note: float, comment: str) -> str:
        return self.feedback.submit(book_id, actor, note, comment)

    def list_feedback(self, book_id: str, page: int, size: int, actor: Actor) -> PageResponse:
        return self.feedback.list_for_book(book_id, page, size, actor)
