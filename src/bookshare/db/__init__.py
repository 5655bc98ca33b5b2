"""Database module for local SQLite storage."""

from .models import Base, Book
from .schemas import PageRequest, PageResponse, page_request
from .sqlite import Database, get_db, reset_db

__all__ = [
    "Base",
    "Book",
    "PageRequest",
    "PageResponse",
    "page_request",
    "Database",
    "get_db",
    "reset_db",
]
