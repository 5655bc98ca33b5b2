"""Ownership and borrower checks.

Every catalog and lending mutation asks these predicates before acting.
The actor is resolved by the caller's authentication layer and passed in
as a plain value.
"""

import logging
from dataclasses import dataclass

from .db.models import Book
from .errors import InvalidState, PermissionDenied

logger = logging.getLogger(__name__)

SELF_LOAN = "self-loan"


@dataclass(frozen=True)
class Actor:
    """The authenticated member performing an operation."""

    id: str

    def __post_init__(self) -> None:
        if not self.id or not str(self.id).strip():
            raise ValueError("actor id must not be empty")


def is_owner(actor: Actor, book: Book) -> bool:
    """True when ``actor`` owns ``book``."""
    return book.owner_id == actor.id


def is_borrower(actor: Actor, loan) -> bool:
    """True when ``actor`` is the borrower on ``loan``."""
    return loan.borrower_id == actor.id


def require_owner(actor: Actor, book: Book, message: str = "not the owner of this book") -> None:
    """Raise PermissionDenied unless ``actor`` owns ``book``."""
    if not is_owner(actor, book):
        logger.warning("Actor %s denied on book %s: %s", actor.id, book.id, message)
        raise PermissionDenied(message)


def require_not_owner(actor: Actor, book: Book, message: str = SELF_LOAN) -> None:
    """Raise InvalidState when ``actor`` owns ``book``."""
    if is_owner(actor, book):
        logger.debug("Actor %s rejected on own book %s: %s", actor.id, book.id, message)
        raise InvalidState(message)
