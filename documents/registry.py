"""Document Registry.

Owns the DocumentMetadata records, one per generated invoice or quote, in
insertion order. The registry is a thin index: it never touches PDF files,
and apart from id uniqueness it accepts whatever the caller records.
"""

from typing import Any, Dict, List, Optional, Union

from core.models.documents import DocumentMetadata, DocumentType
from core.observability.logging import get_logger
from core.storage.snapshots import SnapshotStore, unwrap_snapshot, wrap_snapshot

logger = get_logger(__name__)

SNAPSHOT_KEY = "documents"
SCHEMA_VERSION = 1


class DocumentError(Exception):
    """Base exception for document registry / lifecycle errors."""

    def __init__(self, message: str, document_id: Optional[str] = None):
        super().__init__(message)
        self.document_id = document_id


class DuplicateDocumentError(DocumentError):
    """A record with the same id is already registered."""
    pass


# =============================================================================
# Snapshot Migrations
# =============================================================================

_LEGACY_KEYS = {
    "numeroDocumento": "numero_documento",
    "fechaDocumento": "fecha_documento",
    "clienteId": "cliente_id",
    "clienteNombre": "cliente_nombre",
    "clienteNifCif": "cliente_nif_cif",
    "pdfFileName": "pdf_file_name",
    "createdAt": "created_at",
}


def _migrate_v0_to_v1(data: Dict[str, Any]) -> Dict[str, Any]:
    """Convert the unversioned camelCase document list to the v1 shape.

    The legacy list is stored newest first; v1 keeps insertion order.
    """
    if "state" in data and isinstance(data["state"], dict):
        data = data["state"]

    documents = [
        {_LEGACY_KEYS.get(k, k): v for k, v in doc.items()}
        for doc in data.get("documents", [])
    ]
    documents.reverse()
    return {"documents": documents}


MIGRATIONS = {0: _migrate_v0_to_v1}


# =============================================================================
# Registry
# =============================================================================

class DocumentRegistry:
    """Insertion-ordered index of generated documents.

    Lookups return None for unknown ids; removal of an unknown id is a
    no-op. Mutations update memory first and then flush to the snapshot
    store.
    """

    def __init__(self, snapshot_store: Optional[SnapshotStore] = None):
        """Initialize the registry.

        Args:
            snapshot_store: Persistence port (None keeps records in memory only)
        """
        self._snapshot_store = snapshot_store
        self._documents: Dict[str, DocumentMetadata] = {}

    def __len__(self) -> int:
        return len(self._documents)

    def __contains__(self, document_id: object) -> bool:
        return document_id in self._documents

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    async def load(self) -> int:
        """Restore records from the snapshot store.

        Returns:
            Number of records loaded
        """
        if self._snapshot_store is None:
            return len(self._documents)

        payload = await self._snapshot_store.load(SNAPSHOT_KEY)
        if payload is None:
            return len(self._documents)

        data = unwrap_snapshot(payload, SCHEMA_VERSION, MIGRATIONS, key=SNAPSHOT_KEY)
        documents: Dict[str, DocumentMetadata] = {}
        for raw in data.get("documents", []):
            record = DocumentMetadata.model_validate(raw)
            documents[record.id] = record

        self._documents = documents
        logger.info(f"Loaded {len(documents)} document records")
        return len(documents)

    async def flush(self) -> None:
        """Write all records to the snapshot store."""
        if self._snapshot_store is None:
            return
        data = {"documents": [d.model_dump(mode="json") for d in self._documents.values()]}
        await self._snapshot_store.save(SNAPSHOT_KEY, wrap_snapshot(data, SCHEMA_VERSION))

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def add(self, metadata: DocumentMetadata) -> DocumentMetadata:
        """Append a record.

        Raises:
            DuplicateDocumentError: If the id is already registered
        """
        if metadata.id in self._documents:
            raise DuplicateDocumentError(
                f"Document {metadata.id} already registered",
                document_id=metadata.id,
            )

        self._documents[metadata.id] = metadata
        await self.flush()

        logger.info(
            f"Registered {metadata.tipo.value} {metadata.numero_documento}",
            extra_fields={"document_id": metadata.id},
        )
        return metadata

    def get_by_id(self, document_id: str) -> Optional[DocumentMetadata]:
        return self._documents.get(document_id)

    def list(self, tipo: Optional[Union[DocumentType, str]] = None) -> List[DocumentMetadata]:
        """Records in insertion order, optionally restricted to one type."""
        if tipo is None:
            return [d for d in self._documents.values()]
        wanted = DocumentType(tipo)
        return [d for d in self._documents.values() if d.tipo == wanted]

    async def remove(self, document_id: str) -> bool:
        """Remove a record. Unknown ids are a no-op.

        Returns:
            True if a record was removed
        """
        if document_id not in self._documents:
            return False

        del self._documents[document_id]
        await self.flush()

        logger.info("Removed document record", extra_fields={"document_id": document_id})
        return True

    def all_document_numbers(self) -> List[str]:
        """Business numbers of every registered document."""
        return [d.numero_documento for d in self._documents.values()]
