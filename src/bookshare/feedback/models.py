"""SQLAlchemy models for book feedback.

Tables:
- feedbacks: Notes and comments left by members on books
"""

from sqlalchemy import CheckConstraint, Float, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..db.models import Base, generate_uuid, utcnow_iso

MIN_NOTE = 0.0
MAX_NOTE = 5.0


class Feedback(Base):
    """Feedback model - immutable once recorded."""

    __tablename__ = "feedbacks"
    __table_args__ = (
        CheckConstraint(
            f"note >= {MIN_NOTE} AND note <= {MAX_NOTE}",
            name="ck_feedbacks_note_range",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)

    book_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("books.id"),
        nullable=False,
        index=True,
    )
    rater_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    note: Mapped[float] = mapped_column(Float, nullable=False)
    comment: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[str] = mapped_column(String(32), default=utcnow_iso, index=True)

    def __repr__(self) -> str:
        return f"<Feedback(id={self.id}, book_id={self.book_id}, note={self.note})>"
