"""SQLite database connection and session management."""

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator, Optional

from sqlalchemy import Select, create_engine, func, select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..config import get_config
from .models import Base
from .schemas import PageRequest


class Database:
    """Database connection and session manager."""

    def __init__(self, db_path: Optional[str] = None, busy_timeout: Optional[float] = None):
        """Initialize database connection.

        Args:
            db_path: Path to SQLite database file, or ":memory:". If None,
                     uses BOOKSHARE_DB_PATH or the default location.
            busy_timeout: Seconds a writer waits on a locked database.
        """
        config = get_config()
        if db_path is None:
            db_path = str(config.db_path)
        if busy_timeout is None:
            busy_timeout = config.busy_timeout

        self.db_path = Path(db_path)
        self._is_memory = str(db_path) == ":memory:"

        if not self._is_memory:
            self._ensure_directory()

        # For in-memory databases, use StaticPool to reuse the same connection
        # This ensures all sessions share the same in-memory database
        if self._is_memory:
            self.engine = create_engine(
                "sqlite:///:memory:",
                echo=False,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            self.engine = create_engine(
                f"sqlite:///{self.db_path}",
                echo=False,
                connect_args={"check_same_thread": False, "timeout": busy_timeout},
            )
        self.SessionLocal = sessionmaker(
            bind=self.engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )

    def _ensure_directory(self) -> None:
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def create_tables(self) -> None:
        """Create all database tables."""
        # Import component models to register them with Base
        from ..lending.models import Loan  # noqa: F401
        from ..feedback.models import Feedback  # noqa: F401

        Base.metadata.create_all(self.engine)

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """Get a database session context manager.

        Commits when the block exits normally and rolls back on any
        exception, so an operation either applies fully or not at all.
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    @staticmethod
    def fetch_page(session: Session, stmt: Select, request: PageRequest) -> tuple[list[Any], int]:
        """Run ``stmt`` for one page and count its unpaged rows."""
        total = session.execute(
            select(func.count()).select_from(stmt.order_by(None).subquery())
        ).scalar() or 0
        rows = session.execute(
            stmt.offset(request.offset).limit(request.size)
        ).scalars().all()
        return list(rows), total


# Global database instance
_db: Optional[Database] = None


def get_db(db_path: Optional[str] = None) -> Database:
    """Get or create the global database instance."""
    global _db
    if _db is None:
        _db = Database(db_path)
        _db.create_tables()
    return _db


def reset_db() -> None:
    """Reset the global database instance. Used for testing."""
    global _db
    if _db is not None:
        _db.engine.dispose()
    _db = None
