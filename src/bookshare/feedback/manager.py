"""Feedback intake for book notes and comments."""

import logging
from typing import TYPE_CHECKING, Optional

import pydantic
from sqlalchemy import select

from ..config import get_config
from ..db.schemas import PageResponse, page_request
from ..db.sqlite import Database
from ..errors import InvalidState, ValidationError
from ..guard import Actor, require_not_owner
from ..locks import BookLocks
from .models import Feedback
from .schemas import FeedbackCreate, FeedbackResponse

if TYPE_CHECKING:
    from ..catalog.manager import Catalog

logger = logging.getLogger(__name__)

NOT_RATEABLE = "not shareable or archived"
OWN_BOOK = "cannot give feedback on your own book"


class FeedbackIntake:
    """Validates and records feedback on catalog books.

    Any member other than the owner may rate a shareable, unarchived book.
    Having borrowed the book is not required.
    """

    def __init__(
        self,
        db: Database,
        catalog: "Catalog",
        locks: Optional[BookLocks] = None,
        max_page_size: Optional[int] = None,
    ):
        self.db = db
        self.catalog = catalog
        self.locks = locks if locks is not None else catalog.locks
        self.max_page_size = max_page_size or get_config().max_page_size

    def submit(self, book_id: str, actor: Actor, note: float, comment: str) -> str:
        """Record feedback on a book.

        Returns:
            New feedback id

        Raises:
            ValidationError: note outside 0.0-5.0 or empty comment
            NotFound: No such book
            InvalidState: Book not shareable or archived, or actor owns it
        """
        try:
            data = FeedbackCreate(note=note, comment=comment)
        except pydantic.ValidationError as e:
            raise ValidationError.from_pydantic(e) from e

        with self.locks.hold(book_id), self.db.get_session() as session:
            book = self.catalog.require(book_id, session=session)
            if not book.is_lendable:
                raise InvalidState(NOT_RATEABLE)
            require_not_owner(actor, book, OWN_BOOK)

            feedback = Feedback(
                book_id=book.id,
                rater_id=actor.id,
                note=data.note,
                comment=data.comment,
            )
            session.add(feedback)
            session.flush()
            feedback_id = feedback.id

        logger.info("Feedback %s on book %s by %s (note %.1f)", feedback_id, book_id, actor.id, data.note)
        return feedback_id

    def list_for_book(self, book_id: str, page: int, size: int, actor: Actor) -> PageResponse:
        """Feedback on a book, newest first, flagged when written by ``actor``."""
        request = page_request(page, size, self.max_page_size)
        stmt = (
            select(Feedback)
            .where(Feedback.book_id == book_id)
            .order_by(Feedback.created_at.desc(), Feedback.id)
        )
        with self.db.get_session() as session:
            self.catalog.require(book_id, session=session)
            rows, total = self.db.fetch_page(session, stmt, request)
            content = [
                FeedbackResponse(
                    id=f.id,
                    book_id=f.book_id,
                    note=f.note,
                    comment=f.comment,
                    own_feedback=f.rater_id == actor.id,
                    created_at=f.created_at,
                )
                for f in rows
            ]
        return PageResponse[FeedbackResponse].of(content, request, total)
