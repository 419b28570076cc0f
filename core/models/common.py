"""Shared helpers for model identity and timestamps."""

import uuid
from datetime import datetime, timezone


def new_id() -> str:
    """Generate a random identifier for persisted records."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)
