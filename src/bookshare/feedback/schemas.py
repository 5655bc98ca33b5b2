"""Pydantic schemas for book feedback."""

from pydantic import BaseModel, Field, field_validator

from .models import MAX_NOTE, MIN_NOTE


class FeedbackCreate(BaseModel):
    """Schema for submitting feedback."""

    note: float = Field(..., ge=MIN_NOTE, le=MAX_NOTE, allow_inf_nan=False)
    comment: str = Field(..., min_length=1)

    @field_validator("comment")
    @classmethod
    def comment_not_blank(cls, v):
        """Reject whitespace-only comments."""
        if not v.strip():
            raise ValueError("comment must not be blank")
        return v.strip()


class FeedbackResponse(BaseModel):
    """Feedback as seen by a given member."""

    id: str
    book_id: str
    note: float
    comment: str
    own_feedback: bool
    created_at: str
