"""Lending ledger: the borrow, return and approve state machine.

A loan moves OPEN -> RETURNED_PENDING -> CLOSED. The borrower opens and
returns; only the owner closes. A book is available when none of its
loans is OPEN or RETURNED_PENDING.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..catalog.manager import Catalog
from ..config import get_config
from ..db.models import Book, utcnow_iso
from ..db.schemas import PageResponse, page_request
from ..db.sqlite import Database
from ..errors import InvalidState, NotFound
from ..guard import Actor, is_borrower, require_not_owner, require_owner
from ..locks import BookLocks
from ..rating import ratings_for
from .models import Loan
from .schemas import BorrowedBookResponse

logger = logging.getLogger(__name__)

NOT_LENDABLE = "not shareable or archived"
ALREADY_BORROWED = "already borrowed"
ALREADY_BORROWED_BY_YOU = "already borrowed by you"
NO_ACTIVE_LOAN = "no active loan for this user"
NOT_YET_RETURNED = "not yet returned"


class LendingLedger:
    """Manages loans of catalog books between members."""

    def __init__(
        self,
        db: Database,
        catalog: Catalog,
        locks: Optional[BookLocks] = None,
        max_page_size: Optional[int] = None,
    ):
        """Initialize lending ledger.

        Args:
            db: Database instance
            catalog: Catalog the lent books belong to
            locks: Per-book lock registry, shared with the catalog by default
            max_page_size: Largest page a listing may request
        """
        self.db = db
        self.catalog = catalog
        self.locks = locks if locks is not None else catalog.locks
        self.max_page_size = max_page_size or get_config().max_page_size

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def _lendable_book(self, session: Session, book_id: str) -> Book:
        book = self.catalog.require(book_id, session=session)
        if not book.is_lendable:
            logger.debug("Book %s rejected: %s", book_id, NOT_LENDABLE)
            raise InvalidState(NOT_LENDABLE)
        return book

    @staticmethod
    def _unsettled(
        session: Session,
        book_id: str,
        borrower_id: Optional[str] = None,
    ) -> Optional[Loan]:
        """The book's OPEN or RETURNED_PENDING loan, optionally for one borrower."""
        stmt = select(Loan).where(
            Loan.book_id == book_id,
            Loan.return_approved == False,  # noqa: E712
        )
        if borrower_id is not None:
            stmt = stmt.where(Loan.borrower_id == borrower_id)
        return session.execute(stmt).scalars().first()

    def get_loan(self, loan_id: str) -> Optional[Loan]:
        """Get a loan by ID, or None."""
        with self.db.get_session() as session:
            return session.get(Loan, loan_id)

    def active_loan(self, book_id: str, session: Optional[Session] = None) -> Optional[Loan]:
        """The book's unsettled loan, or None when the book is available."""
        if session:
            return self._unsettled(session, book_id)
        with self.db.get_session() as s:
            return self._unsettled(s, book_id)

    def is_available(self, book_id: str, session: Optional[Session] = None) -> bool:
        return self.active_loan(book_id, session=session) is None

    def history_for_book(self, book_id: str) -> list[Loan]:
        """All loans of a book, newest first."""
        with self.db.get_session() as session:
            stmt = (
                select(Loan)
                .where(Loan.book_id == book_id)
                .order_by(Loan.borrowed_at.desc())
            )
            return list(session.execute(stmt).scalars().all())

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def open_loan(self, book_id: str, actor: Actor) -> str:
        """Borrow a book.

        Returns:
            New loan id

        Raises:
            NotFound: No such book
            InvalidState: Book not lendable, actor owns it, or it is
                already borrowed (by the actor or someone else)
        """
        with self.locks.hold(book_id):
            try:
                with self.db.get_session() as session:
                    book = self._lendable_book(session, book_id)
                    require_not_owner(actor, book)

                    if self._unsettled(session, book_id, borrower_id=actor.id):
                        raise InvalidState(ALREADY_BORROWED_BY_YOU)
                    if self._unsettled(session, book_id):
                        raise InvalidState(ALREADY_BORROWED)

                    loan = Loan(
                        book_id=book.id,
                        borrower_id=actor.id,
                        returned=False,
                        return_approved=False,
                    )
                    session.add(loan)
                    session.flush()
                    loan_id = loan.id
            except IntegrityError as e:
                # Another process opened a loan between our check and insert
                logger.warning("Concurrent borrow of book %s by %s rejected", book_id, actor.id)
                raise InvalidState(ALREADY_BORROWED) from e

        logger.info("Loan %s opened: book %s borrowed by %s", loan_id, book_id, actor.id)
        return loan_id

    def mark_returned(self, book_id: str, actor: Actor) -> str:
        """Hand a borrowed book back, pending the owner's approval.

        Returns:
            Loan id

        Raises:
            NotFound: No such book, or the actor holds no open loan on it
            InvalidState: Book not lendable, or actor owns it
        """
        with self.locks.hold(book_id), self.db.get_session() as session:
            book = self._lendable_book(session, book_id)
            require_not_owner(actor, book)

            loan = self._unsettled(session, book_id)
            if loan is None or loan.returned or not is_borrower(actor, loan):
                logger.debug("Return of book %s by %s rejected: %s", book_id, actor.id, NO_ACTIVE_LOAN)
                raise NotFound(NO_ACTIVE_LOAN)

            loan.returned = True
            loan.returned_at = utcnow_iso()
            loan_id = loan.id

        logger.info("Loan %s returned by %s, awaiting approval", loan_id, actor.id)
        return loan_id

    def approve_return(self, book_id: str, actor: Actor) -> str:
        """Confirm a returned book is back. Owner only.

        Returns:
            Loan id

        Raises:
            NotFound: No such book
            PermissionDenied: Actor does not own the book
            InvalidState: Book not lendable, or no loan awaits approval
        """
        with self.locks.hold(book_id), self.db.get_session() as session:
            book = self._lendable_book(session, book_id)
            require_owner(actor, book, "only the owner can approve a return")

            loan = self._unsettled(session, book_id)
            if loan is None or not loan.returned:
                logger.debug("Approval on book %s rejected: %s", book_id, NOT_YET_RETURNED)
                raise InvalidState(NOT_YET_RETURNED)

            loan.return_approved = True
            loan.approved_at = utcnow_iso()
            loan_id = loan.id

        logger.info("Loan %s closed by owner %s", loan_id, actor.id)
        return loan_id

    # -------------------------------------------------------------------------
    # Listings
    # -------------------------------------------------------------------------

    def _render_page(self, session: Session, stmt, page: int, size: int) -> PageResponse:
        request = page_request(page, size, self.max_page_size)
        loans, total = self.db.fetch_page(session, stmt, request)

        book_ids = [loan.book_id for loan in loans]
        books = {
            b.id: b
            for b in session.execute(select(Book).where(Book.id.in_(book_ids))).scalars()
        }
        ratings = ratings_for(session, book_ids)

        content = []
        for loan in loans:
            book = books[loan.book_id]
            content.append(
                BorrowedBookResponse(
                    id=book.id,
                    loan_id=loan.id,
                    title=book.title,
                    author_name=book.author_name,
                    isbn=book.isbn,
                    rate=ratings[book.id],
                    borrower_id=loan.borrower_id,
                    borrowed_at=loan.borrowed_at,
                    returned=loan.returned,
                    return_approved=loan.return_approved,
                    status=loan.status,
                )
            )
        return PageResponse[BorrowedBookResponse].of(content, request, total)

    def list_borrowed(self, page: int, size: int, actor: Actor) -> PageResponse:
        """Loans where the actor is the borrower, newest first."""
        stmt = (
            select(Loan)
            .where(Loan.borrower_id == actor.id)
            .order_by(Loan.borrowed_at.desc(), Loan.id)
        )
        with self.db.get_session() as session:
            return self._render_page(session, stmt, page, size)

    def list_returned(self, page: int, size: int, actor: Actor) -> PageResponse:
        """Loans of books the actor owns, newest first."""
        stmt = (
            select(Loan)
            .join(Book, Book.id == Loan.book_id)
            .where(Book.owner_id == actor.id)
            .order_by(Loan.borrowed_at.desc(), Loan.id)
        )
        with self.db.get_session() as session:
            return self._render_page(session, stmt, page, size)
