"""Core storage - PDF artifact store, share boundary and snapshot persistence."""

from core.storage.artifacts import (
    PdfArtifactStore,
    ArtifactStoreError,
    StorageUnavailableError,
    SourceMissingError,
    WriteVerificationFailedError,
    ArtifactNotFoundError,
    SharingUnavailableError,
    ARTIFACT_DIR_NAME,
)
from core.storage.sharing import (
    ShareProvider,
    UnavailableShareProvider,
    PDF_MIME_TYPE,
)
from core.storage.snapshots import (
    SnapshotStore,
    InMemorySnapshotStore,
    FileSnapshotStore,
    SnapshotError,
    wrap_snapshot,
    unwrap_snapshot,
)

__all__ = [
    # Artifacts
    "PdfArtifactStore",
    "ArtifactStoreError",
    "StorageUnavailableError",
    "SourceMissingError",
    "WriteVerificationFailedError",
    "ArtifactNotFoundError",
    "SharingUnavailableError",
    "ARTIFACT_DIR_NAME",
    # Sharing
    "ShareProvider",
    "UnavailableShareProvider",
    "PDF_MIME_TYPE",
    # Snapshots
    "SnapshotStore",
    "InMemorySnapshotStore",
    "FileSnapshotStore",
    "SnapshotError",
    "wrap_snapshot",
    "unwrap_snapshot",
]
