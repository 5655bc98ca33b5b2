"""Displayed book rating derived from feedback notes."""

import math
from collections import defaultdict
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from .feedback.models import Feedback


def rate(notes: Iterable[float]) -> float:
    """Mean of the feedback notes, rounded half-up to one decimal.

    A book without feedback rates 0.0.
    """
    values = [float(note) for note in notes]
    if not values:
        return 0.0
    mean = sum(values) / len(values)
    return math.floor(mean * 10.0 + 0.5) / 10.0


def notes_for(session: Session, book_id: str) -> list[float]:
    """All feedback notes recorded for one book."""
    stmt = select(Feedback.note).where(Feedback.book_id == book_id)
    return list(session.execute(stmt).scalars().all())


def ratings_for(session: Session, book_ids: Iterable[str]) -> dict[str, float]:
    """Rating of each book id, 0.0 for books without feedback."""
    ids = list(dict.fromkeys(book_ids))
    if not ids:
        return {}

    notes: dict[str, list[float]] = defaultdict(list)
    stmt = select(Feedback.book_id, Feedback.note).where(Feedback.book_id.in_(ids))
    for book_id, note in session.execute(stmt):
        notes[book_id].append(note)

    return {book_id: rate(notes.get(book_id, [])) for book_id in ids}
