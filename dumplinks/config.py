"""Centralised settings for dumplinks.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (two levels up from this file)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Workspace / storage
    # ------------------------------------------------------------------
    workspace_dir: Path = field(
        default_factory=lambda: Path(
            os.environ.get("DUMPLINKS_WORKSPACE", Path.home() / ".dumplinks_data")
        )
    )

    @property
    def db_path(self) -> Path:
        """Absolute path to the SQLite graph database."""
        return self.workspace_dir / "graph.db"

    @property
    def schema_path(self) -> Path:
        """Absolute path to the schema SQL file bundled with the package."""
        return Path(__file__).resolve().parent / "db" / "schema.sql"

    # ------------------------------------------------------------------
    # Parse pipeline
    # ------------------------------------------------------------------
    queue_size: int = field(
        default_factory=lambda: int(os.environ.get("DUMPLINKS_QUEUE_SIZE", "1"))
    )
    max_line_bytes: int = field(
        default_factory=lambda: int(
            os.environ.get("DUMPLINKS_MAX_LINE_BYTES", str(16 * 1024 * 1024))
        )
    )
    max_read_errors: int = field(
        default_factory=lambda: int(os.environ.get("DUMPLINKS_MAX_READ_ERRORS", "100"))
    )
    poll_interval: float = field(
        default_factory=lambda: float(os.environ.get("DUMPLINKS_POLL_INTERVAL", "0.1"))
    )

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = field(
        default_factory=lambda: os.environ.get("DUMPLINKS_LOG_LEVEL", "WARNING")
    )

    # ------------------------------------------------------------------
    # Graph storage
    # ------------------------------------------------------------------
    commit_every: int = field(
        default_factory=lambda: int(os.environ.get("DUMPLINKS_COMMIT_EVERY", "500"))
    )

    def ensure_workspace(self) -> None:
        """Create the workspace directory if it does not exist."""
        self.workspace_dir.mkdir(parents=True, exist_ok=True)


# Module-level singleton, import this everywhere:
#   from dumplinks.config import settings
settings = Settings()
