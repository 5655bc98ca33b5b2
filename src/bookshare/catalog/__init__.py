"""Book catalog module.

Provides functionality for:
- Listing books owned by members
- Shareable and archived flags, toggled by the owner
- Book views with computed ratings
"""

from .manager import Catalog, FileStore
from .schemas import BookCreate, BookResponse

__all__ = [
    "Catalog",
    "FileStore",
    "BookCreate",
    "BookResponse",
]
