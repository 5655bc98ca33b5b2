"""Configuration management for bookshare.

Loads configuration from environment variables and provides defaults.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env file if present
load_dotenv()

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Config:
    """Application configuration."""

    # Database
    db_path: Path
    busy_timeout: float  # seconds

    # Logging
    log_level: str

    # Paging
    default_page_size: int
    max_page_size: int

    # CLI identity
    actor_id: Optional[str]

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        db_path_str = os.environ.get(
            "BOOKSHARE_DB_PATH",
            str(Path.home() / ".bookshare" / "bookshare.db"),
        )
        db_path = Path(db_path_str).expanduser() if db_path_str != ":memory:" else Path(db_path_str)

        return cls(
            db_path=db_path,
            busy_timeout=float(os.environ.get("BOOKSHARE_BUSY_TIMEOUT", "30")),
            log_level=os.environ.get("BOOKSHARE_LOG_LEVEL", "WARNING").upper(),
            default_page_size=int(os.environ.get("BOOKSHARE_DEFAULT_PAGE_SIZE", "10")),
            max_page_size=int(os.environ.get("BOOKSHARE_MAX_PAGE_SIZE", "100")),
            actor_id=os.environ.get("BOOKSHARE_ACTOR"),
        )

    @property
    def is_memory(self) -> bool:
        return str(self.db_path) == ":memory:"

    def validate(self) -> list[str]:
        """Validate configuration, return list of errors."""
        errors = []

        if self.log_level not in LOG_LEVELS:
            errors.append(f"Unknown log level: {self.log_level}")

        if self.default_page_size < 1:
            errors.append("Default page size must be at least 1")
        if self.max_page_size < self.default_page_size:
            errors.append("Max page size must not be smaller than the default page size")

        if self.busy_timeout < 0:
            errors.append("Busy timeout must not be negative")

        # Check database directory is writable
        if not self.is_memory and not self.db_path.parent.exists():
            try:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
            except PermissionError:
                errors.append(f"Cannot create database directory: {self.db_path.parent}")

        return errors


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the global config instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reset_config() -> None:
    """Reset the global config instance. Used for testing."""
    global _config
    _config = None
