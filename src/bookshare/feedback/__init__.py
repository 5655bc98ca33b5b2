"""Book feedback module."""

from .manager import FeedbackIntake
from .models import Feedback
from .schemas import FeedbackCreate, FeedbackResponse

__all__ = [
    "FeedbackIntake",
    "Feedback",
    "FeedbackCreate",
    "FeedbackResponse",
]
