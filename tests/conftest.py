"""Pytest configuration and shared fixtures.

This module provides fixtures for testing bookshare, including in-memory
and file-backed databases, wired managers, and sample members and books.
"""

import os
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from bookshare.catalog import BookCreate, Catalog
from bookshare.config import reset_config
from bookshare.db.sqlite import Database, reset_db
from bookshare.feedback import FeedbackIntake
from bookshare.guard import Actor
from bookshare.lending import LendingLedger
from bookshare.locks import BookLocks
from bookshare.service import BookNetwork


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def clean_config(monkeypatch) -> Generator[None, None, None]:
    """Isolate tests from the developer's BOOKSHARE_* environment."""
    for key in list(os.environ):
        if key.startswith("BOOKSHARE_"):
            monkeypatch.delenv(key)
    reset_config()
    reset_db()
    yield
    reset_db()
    reset_config()


@pytest.fixture
def db() -> Database:
    """Create an in-memory database for testing."""
    database = Database(":memory:")
    database.create_tables()
    return database


@pytest.fixture
def temp_db_path() -> Generator[Path, None, None]:
    """Create a temporary database file path."""
    with tempfile.TemporaryDirectory() as tmp:
        yield Path(tmp) / "bookshare.db"


@pytest.fixture
def file_db(temp_db_path: Path) -> Generator[Database, None, None]:
    """File-backed database, needed when several threads write at once."""
    database = Database(str(temp_db_path))
    database.create_tables()
    yield database
    database.engine.dispose()


# ============================================================================
# Manager Fixtures
# ============================================================================


@pytest.fixture
def locks() -> BookLocks:
    return BookLocks()


@pytest.fixture
def catalog(db: Database, locks: BookLocks) -> Catalog:
    return Catalog(db, locks)


@pytest.fixture
def ledger(db: Database, catalog: Catalog) -> LendingLedger:
    return LendingLedger(db, catalog)


@pytest.fixture
def intake(db: Database, catalog: Catalog) -> FeedbackIntake:
    return FeedbackIntake(db, catalog)


@pytest.fixture
def network(db: Database) -> BookNetwork:
    return BookNetwork(db)


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def owner() -> Actor:
    return Actor("owner-1")


@pytest.fixture
def borrower() -> Actor:
    return Actor("borrower-1")


@pytest.fixture
def stranger() -> Actor:
    return Actor("stranger-1")


@pytest.fixture
def sample_book_data() -> BookCreate:
    """Create sample book data for testing."""
    return BookCreate(
        title="The Left Hand of Darkness",
        author_name="Ursula K. Le Guin",
        isbn="978-0-441-47812-5",
        synopsis="An envoy visits the planet Gethen.",
        shareable=True,
    )


@pytest.fixture
def shareable_book(catalog: Catalog, owner: Actor, sample_book_data: BookCreate) -> str:
    """A shareable, unarchived book owned by ``owner``."""
    return catalog.register(sample_book_data, owner)


@pytest.fixture
def private_book(catalog: Catalog, owner: Actor) -> str:
    """A book its owner has not shared."""
    return catalog.register(
        BookCreate(title="Private Diary", author_name="Owner", shareable=False),
        owner,
    )
