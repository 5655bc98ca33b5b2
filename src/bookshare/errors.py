"""Typed failures raised by bookshare operations.

Every failure carries a stable ``kind`` and a human-readable description.
"""

from typing import Any, Optional


class BookshareError(Exception):
    """Base class for all bookshare failures."""

    kind = "error"

    def __init__(self, description: str):
        super().__init__(description)
        self.description = description

    def to_dict(self) -> dict[str, Any]:
        """Serialize as an error response body."""
        return {"kind": self.kind, "description": self.description}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.description!r})"


class NotFound(BookshareError):
    """Referenced entity does not exist."""

    kind = "not_found"


class PermissionDenied(BookshareError):
    """Actor is not the owner or borrower the operation requires."""

    kind = "permission_denied"


class InvalidState(BookshareError):
    """Transition preconditions are not met."""

    kind = "invalid_state"


class ValidationError(BookshareError):
    """Malformed input or out-of-range value."""

    kind = "validation_error"

    def __init__(self, description: str, errors: Optional[list[str]] = None):
        super().__init__(description)
        self.errors = errors or []

    def to_dict(self) -> dict[str, Any]:
        body = super().to_dict()
        if self.errors:
            body["errors"] = list(self.errors)
        return body

    @classmethod
    def from_pydantic(cls, exc) -> "ValidationError":
        """Build from a ``pydantic.ValidationError``."""
        messages = []
        for error in exc.errors():
            field = ".".join(str(part) for part in error.get("loc", ()))
            messages.append(f"{field}: {error.get('msg')}" if field else error.get("msg"))
        return cls("invalid input: " + "; ".join(messages), errors=messages)
