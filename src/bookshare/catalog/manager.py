"""Catalog manager for book records and their owner flags."""

import logging
from typing import Optional, Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..config import get_config
from ..db.models import Book
from ..db.schemas import PageResponse, page_request
from ..db.sqlite import Database
from ..errors import NotFound
from ..guard import Actor, require_owner
from ..locks import BookLocks
from ..rating import notes_for, rate, ratings_for
from .schemas import BookCreate, BookResponse

logger = logging.getLogger(__name__)


class FileStore(Protocol):
    """Resolves a cover reference to its binary content."""

    def read(self, ref: str) -> Optional[bytes]:
        ...


class Catalog:
    """Manages books and their shareable/archived flags."""

    def __init__(
        self,
        db: Database,
        locks: Optional[BookLocks] = None,
        file_store: Optional[FileStore] = None,
        max_page_size: Optional[int] = None,
    ):
        """Initialize catalog.

        Args:
            db: Database instance
            locks: Per-book lock registry shared with the lending ledger
            file_store: Optional cover content lookup
            max_page_size: Largest page a listing may request
        """
        self.db = db
        self.locks = locks if locks is not None else BookLocks()
        self.file_store = file_store
        self.max_page_size = max_page_size or get_config().max_page_size

    # -------------------------------------------------------------------------
    # Books
    # -------------------------------------------------------------------------

    def register(self, data: BookCreate, actor: Actor) -> str:
        """List a new book owned by ``actor``.

        Returns:
            New book id
        """
        with self.db.get_session() as session:
            book = Book(
                title=data.title,
                author_name=data.author_name,
                isbn=data.isbn,
                synopsis=data.synopsis,
                cover=data.cover,
                shareable=data.shareable,
                archived=False,
                owner_id=actor.id,
            )
            session.add(book)
            session.flush()
            book_id = book.id

        logger.info("Book %s registered by %s", book_id, actor.id)
        return book_id

    def get(self, book_id: str, session: Optional[Session] = None) -> Optional[Book]:
        """Get a book by ID, or None."""

        def _get(s: Session) -> Optional[Book]:
            return s.get(Book, book_id)

        if session:
            return _get(session)
        else:
            with self.db.get_session() as s:
                return _get(s)

    def require(self, book_id: str, session: Optional[Session] = None) -> Book:
        """Get a book by ID.

        Raises:
            NotFound: No book has this ID
        """
        book = self.get(book_id, session=session)
        if book is None:
            raise NotFound(f"no book found with id {book_id}")
        return book

    # -------------------------------------------------------------------------
    # Owner flags
    # -------------------------------------------------------------------------

    def set_shareable(self, book_id: str, actor: Actor) -> bool:
        """Flip the shareable flag. Owner only.

        Returns:
            New shareable value
        """
        with self.locks.hold(book_id), self.db.get_session() as session:
            book = self.require(book_id, session=session)
            require_owner(actor, book, "you cannot update the shareable status of others' books")
            book.shareable = not book.shareable
            value = book.shareable

        logger.info("Book %s shareable=%s", book_id, value)
        return value

    def set_archived(self, book_id: str, actor: Actor) -> bool:
        """Flip the archived flag. Owner only.

        Returns:
            New archived value
        """
        with self.locks.hold(book_id), self.db.get_session() as session:
            book = self.require(book_id, session=session)
            require_owner(actor, book, "you cannot update the archived status of others' books")
            book.archived = not book.archived
            value = book.archived

        logger.info("Book %s archived=%s", book_id, value)
        return value

    def set_cover(self, book_id: str, actor: Actor, cover_ref: Optional[str]) -> None:
        """Attach a stored cover reference to a book. Owner only."""
        with self.locks.hold(book_id), self.db.get_session() as session:
            book = self.require(book_id, session=session)
            require_owner(actor, book, "you cannot change the cover of others' books")
            book.cover = cover_ref or None

        logger.info("Book %s cover set to %s", book_id, cover_ref)

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    def _cover_bytes(self, book: Book) -> Optional[bytes]:
        if self.file_store is None or not book.cover:
            return None
        return self.file_store.read(book.cover)

    def render(
        self,
        book: Book,
        session: Session,
        available: Optional[bool] = None,
    ) -> BookResponse:
        """Build the book view, computing its rating from feedback."""
        return BookResponse.from_book(
            book,
            rate=rate(notes_for(session, book.id)),
            cover=self._cover_bytes(book),
            available=available,
        )

    def _render_page(self, session: Session, stmt, page: int, size: int) -> PageResponse:
        request = page_request(page, size, self.max_page_size)
        books, total = self.db.fetch_page(session, stmt, request)
        ratings = ratings_for(session, [b.id for b in books])
        content = [
            BookResponse.from_book(b, rate=ratings[b.id], cover=self._cover_bytes(b))
            for b in books
        ]
        return PageResponse[BookResponse].of(content, request, total)

    def list_displayable(self, page: int, size: int, actor: Actor) -> PageResponse:
        """Books others can borrow: shareable, not archived, not the actor's own."""
        stmt = (
            select(Book)
            .where(
                Book.shareable == True,  # noqa: E712
                Book.archived == False,  # noqa: E712
                Book.owner_id != actor.id,
            )
            .order_by(Book.created_at.desc(), Book.id)
        )
        with self.db.get_session() as session:
            return self._render_page(session, stmt, page, size)

    def list_owned(self, page: int, size: int, actor: Actor) -> PageResponse:
        """Books owned by the actor, archived ones included."""
        stmt = (
            select(Book)
            .where(Book.owner_id == actor.id)
            .order_by(Book.created_at.desc(), Book.id)
        )
        with self.db.get_session() as session:
            return self._render_page(session, stmt, page, size)
