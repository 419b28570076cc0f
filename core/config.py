"""Application settings.

Reads configuration from environment variables, loading a `.env` file from
the repository root first if one exists:

- DOCS_STORAGE_ROOT: App-private storage root (PDFs live in <root>/facturas)
- DOCS_SNAPSHOT_DIR: Directory for persisted snapshots (default <root>/.state)
- DOCS_LOG_LEVEL: Logging level name (default "INFO")
- DOCS_LOG_JSON: "1"/"true" for JSON log lines
- DOCS_COUNTRY_CODE: Country used to seed the tax configuration on first run
"""

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

REPO_ROOT = Path(__file__).resolve().parents[1]

_TRUTHY = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Resolved settings for one process."""
    storage_root: Optional[Path] = Field(default=None, description="App-private storage root")
    snapshot_dir: Optional[Path] = Field(default=None, description="Directory for snapshot files")
    log_level: str = Field(default="INFO", description="Logging level name")
    log_json: bool = Field(default=False, description="Emit JSON log lines")
    country_code: Optional[str] = Field(default=None, description="Country for first-run tax seeding")

    @property
    def log_level_value(self) -> int:
        value = logging.getLevelName(self.log_level.upper())
        return value if isinstance(value, int) else logging.INFO

    def resolved_snapshot_dir(self) -> Optional[Path]:
        """Snapshot directory, defaulting to a hidden folder under the storage root."""
        if self.snapshot_dir is not None:
            return self.snapshot_dir
        if self.storage_root is not None:
            return self.storage_root / ".state"
        return None


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """Build Settings from the environment.

    Args:
        env_file: Optional .env path (defaults to <repo>/.env)

    Returns:
        Settings instance
    """
    env_path = env_file or (REPO_ROOT / ".env")
    if env_path.exists():
        load_dotenv(env_path)

    storage_root = os.getenv("DOCS_STORAGE_ROOT")
    snapshot_dir = os.getenv("DOCS_SNAPSHOT_DIR")

    return Settings(
        storage_root=Path(storage_root).expanduser() if storage_root else None,
        snapshot_dir=Path(snapshot_dir).expanduser() if snapshot_dir else None,
        log_level=os.getenv("DOCS_LOG_LEVEL", "INFO"),
        log_json=os.getenv("DOCS_LOG_JSON", "").strip().lower() in _TRUTHY,
        country_code=os.getenv("DOCS_COUNTRY_CODE") or None,
    )
