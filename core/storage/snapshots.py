"""Snapshot persistence backends.

Stateful services (document registry, tax engine) persist one opaque
snapshot under a fixed logical key after every mutation and load it once at
start-up. Payloads are wrapped in a versioned envelope:

    {"schema_version": 1, "data": {...}}

so loaders can migrate older shapes forward.

- InMemorySnapshotStore: For development/testing
- FileSnapshotStore: One JSON file per key
"""

import json
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from core.observability.logging import get_logger

logger = get_logger(__name__)

Migration = Callable[[Dict[str, Any]], Dict[str, Any]]


class SnapshotError(Exception):
    """A persisted snapshot cannot be read or migrated."""

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.key = key


# =============================================================================
# Envelope
# =============================================================================

def wrap_snapshot(data: Dict[str, Any], schema_version: int) -> Dict[str, Any]:
    """Wrap a payload in a versioned envelope."""
    return {"schema_version": schema_version, "data": data}


def unwrap_snapshot(
    payload: Dict[str, Any],
    current_version: int,
    migrations: Optional[Dict[int, Migration]] = None,
    key: Optional[str] = None,
) -> Dict[str, Any]:
    """Return the payload data migrated to current_version.

    A payload without an envelope is treated as schema version 0.
    migrations[n] converts data from version n to n + 1.

    Raises:
        SnapshotError: If the version is newer than supported or a migration is missing
    """
    migrations = migrations or {}

    if isinstance(payload, dict) and "schema_version" in payload and "data" in payload:
        version = payload["schema_version"]
        data = payload["data"]
    else:
        version = 0
        data = payload

    if not isinstance(version, int) or not isinstance(data, dict):
        raise SnapshotError("Malformed snapshot envelope", key=key)

    if version > current_version:
        raise SnapshotError(
            f"Snapshot version {version} is newer than supported version {current_version}",
            key=key,
        )

    while version < current_version:
        migrate = migrations.get(version)
        if migrate is None:
            raise SnapshotError(f"No migration from snapshot version {version}", key=key)
        data = migrate(data)
        logger.info(
            f"Migrated snapshot from version {version} to {version + 1}",
            extra_fields={"key": key},
        )
        version += 1

    return data


# =============================================================================
# Backends
# =============================================================================

class SnapshotStore(ABC):
    """Abstract base class for snapshot storage."""

    @abstractmethod
    async def load(self, key: str) -> Optional[Dict[str, Any]]:
        """Load the snapshot stored under key, or None."""
        pass

    @abstractmethod
    async def save(self, key: str, payload: Dict[str, Any]) -> None:
        """Replace the snapshot stored under key."""
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete the snapshot stored under key."""
        pass


class InMemorySnapshotStore(SnapshotStore):
    """In-memory snapshot storage for development/testing.

    WARNING: Snapshots are lost on restart. Use only for development.
    """

    def __init__(self, initial: Optional[Dict[str, Dict[str, Any]]] = None):
        self._snapshots: Dict[str, str] = {}
        for key, payload in (initial or {}).items():
            self._snapshots[key] = json.dumps(payload)

    async def load(self, key: str) -> Optional[Dict[str, Any]]:
        raw = self._snapshots.get(key)
        return json.loads(raw) if raw is not None else None

    async def save(self, key: str, payload: Dict[str, Any]) -> None:
        # Serialize so callers cannot mutate the stored copy
        self._snapshots[key] = json.dumps(payload, default=str)

    async def delete(self, key: str) -> bool:
        return self._snapshots.pop(key, None) is not None

    def keys(self):
        return list(self._snapshots)


class FileSnapshotStore(SnapshotStore):
    """File-based snapshot storage.

    Directory structure:
        {base_path}/
            tax_config.json
            documents.json
    """

    def __init__(self, base_path: Union[str, Path] = ".state"):
        self._base_path = Path(base_path)

    def _snapshot_path(self, key: str) -> Path:
        safe_key = "".join(c if c.isalnum() or c in "-_" else "_" for c in key)
        return self._base_path / f"{safe_key}.json"

    async def load(self, key: str) -> Optional[Dict[str, Any]]:
        path = self._snapshot_path(key)

        if not path.exists():
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise SnapshotError(f"Unreadable snapshot file {path.name}: {e}", key=key) from e

    async def save(self, key: str, payload: Dict[str, Any]) -> None:
        self._base_path.mkdir(parents=True, exist_ok=True)
        path = self._snapshot_path(key)
        tmp_path = path.with_suffix(".json.tmp")

        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, default=str)
        os.replace(tmp_path, path)

    async def delete(self, key: str) -> bool:
        path = self._snapshot_path(key)
        if path.exists():
            path.unlink()
            return True
        return False
