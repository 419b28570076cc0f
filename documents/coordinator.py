"""Document Lifecycle Coordinator.

Keeps the document registry and the PDF artifact store in agreement. The
two are reconciled lazily, when a document is opened or deleted; there is
no start-up scan.

Open flow:
1. Look up the record (DocumentNotFoundError if absent)
2. Check the artifact exists
3. Missing artifact = orphan metadata: the caller chooses keep or purge

Delete flow:
1. Best-effort artifact delete
2. Registry removal, whatever happened in step 1

An orphaned file on disk is harmless; a record pointing at a file the user
asked to delete is not, so the record is always removed.
"""

import inspect
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, Optional, Union

from core.models.common import new_id, utcnow
from core.models.documents import DocumentMetadata, DocumentType
from core.observability.logging import get_logger, log_document_event, with_correlation
from core.storage.artifacts import PdfArtifactStore
from documents.naming import generate_pdf_file_name
from documents.registry import DocumentError, DocumentRegistry

logger = get_logger(__name__)


class DocumentNotFoundError(DocumentError):
    """No registry record exists for the requested id."""
    pass


class OpenStatus(str, Enum):
    """Outcome of opening a document."""
    OPENED = "opened"      # Artifact present, path handed back
    ORPHANED = "orphaned"  # Artifact missing, record kept
    PURGED = "purged"      # Artifact missing, record removed


class OrphanAction(str, Enum):
    """Caller's choice for a record whose artifact is missing."""
    KEEP = "keep"
    PURGE = "purge"


OrphanResolver = Callable[
    [DocumentMetadata],
    Union[OrphanAction, Awaitable[OrphanAction]],
]


@dataclass
class OpenResult:
    """Result of DocumentLifecycleCoordinator.open_document."""
    status: OpenStatus
    document: DocumentMetadata
    path: Optional[str] = None

    @property
    def is_orphan(self) -> bool:
        return self.status in (OpenStatus.ORPHANED, OpenStatus.PURGED)


class DocumentLifecycleCoordinator:
    """Coordinates registry records with their PDF artifacts.

    Example:
        coordinator = DocumentLifecycleCoordinator(registry, store)

        result = await coordinator.open_document(doc_id, resolve_orphan=ask_user)
        if result.status == OpenStatus.OPENED:
            viewer.show(result.path)
    """

    def __init__(self, registry: DocumentRegistry, store: PdfArtifactStore):
        self._registry = registry
        self._store = store

    def _require(self, document_id: str) -> DocumentMetadata:
        record = self._registry.get_by_id(document_id)
        if record is None:
            raise DocumentNotFoundError(
                f"Document {document_id} not found",
                document_id=document_id,
            )
        return record

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------

    async def register_generated_document(
        self,
        temp_path: Union[str, Path],
        tipo: Union[DocumentType, str],
        numero_documento: str,
        *,
        fecha_documento: Optional[str] = None,
        cliente_id: Optional[str] = None,
        cliente_nombre: Optional[str] = None,
        cliente_nif_cif: Optional[str] = None,
        total: Optional[Decimal] = None,
        file_name: Optional[str] = None,
    ) -> DocumentMetadata:
        """Store a freshly rendered PDF and record its metadata.

        The record is created only after the artifact is saved; save errors
        propagate and leave the registry untouched.

        Args:
            temp_path: Temporary PDF produced by the renderer
            tipo: factura or presupuesto
            numero_documento: Business document number
            file_name: Artifact name; generated from type, number and client if omitted

        Returns:
            The new DocumentMetadata
        """
        tipo = DocumentType(tipo)
        name = file_name or generate_pdf_file_name(tipo, numero_documento, cliente_nombre)

        with with_correlation(numero_documento=numero_documento, operation="register"):
            final_path = await self._store.save(temp_path, name)

            metadata = DocumentMetadata(
                id=new_id(),
                tipo=tipo,
                numero_documento=numero_documento,
                pdf_file_name=final_path,
                created_at=utcnow(),
                fecha_documento=fecha_documento,
                cliente_id=cliente_id,
                cliente_nombre=cliente_nombre,
                cliente_nif_cif=cliente_nif_cif,
                total=total,
            )
            await self._registry.add(metadata)
            log_document_event("Document generated", document_id=metadata.id, path=final_path)

        return metadata

    # -------------------------------------------------------------------------
    # Open / share
    # -------------------------------------------------------------------------

    async def open_document(
        self,
        document_id: str,
        resolve_orphan: Optional[OrphanResolver] = None,
    ) -> OpenResult:
        """Open a document, reconciling against the artifact store.

        Args:
            document_id: Registry id
            resolve_orphan: Called with the record when its artifact is
                missing; returns OrphanAction.KEEP or OrphanAction.PURGE
                (may be a coroutine function). Without it the record is kept.

        Returns:
            OpenResult with OPENED (and the path), ORPHANED or PURGED

        Raises:
            DocumentNotFoundError: If no record exists for document_id
        """
        with with_correlation(document_id=document_id, operation="open"):
            record = self._require(document_id)

            if await self._store.exists(record.pdf_file_name):
                return OpenResult(
                    status=OpenStatus.OPENED,
                    document=record,
                    path=record.pdf_file_name,
                )

            logger.warning(
                "Artifact missing for document",
                extra_fields={"path": record.pdf_file_name},
            )

            action = OrphanAction.KEEP
            if resolve_orphan is not None:
                choice = resolve_orphan(record)
                if inspect.isawaitable(choice):
                    choice = await choice
                action = OrphanAction(choice)

            if action == OrphanAction.PURGE:
                await self._registry.remove(document_id)
                log_document_event("Orphan record purged", document_id=document_id)
                return OpenResult(status=OpenStatus.PURGED, document=record)

            return OpenResult(status=OpenStatus.ORPHANED, document=record)

    async def purge_orphan(self, document_id: str) -> bool:
        """Remove a record if its artifact is (still) missing.

        Returns:
            True if the record was removed
        """
        with with_correlation(document_id=document_id, operation="purge_orphan"):
            record = self._registry.get_by_id(document_id)
            if record is None:
                return False

            if await self._store.exists(record.pdf_file_name):
                logger.info("Artifact present again, keeping record")
                return False

            removed = await self._registry.remove(document_id)
            if removed:
                log_document_event("Orphan record purged", document_id=document_id)
            return removed

    async def share_document(self, document_id: str, dialog_title: Optional[str] = None) -> None:
        """Share a document's PDF through the platform share dialog.

        Raises:
            DocumentNotFoundError: If no record exists for document_id
            ArtifactNotFoundError: If the PDF is missing
            SharingUnavailableError: If the platform cannot share
        """
        with with_correlation(document_id=document_id, operation="share"):
            record = self._require(document_id)
            await self._store.share(record.pdf_file_name, dialog_title=dialog_title)

    # -------------------------------------------------------------------------
    # Delete
    # -------------------------------------------------------------------------

    async def delete_document(self, document_id: str) -> bool:
        """Delete a document: artifact first (best effort), then the record.

        The record is removed even if the artifact delete fails.

        Returns:
            True if a record was removed
        """
        with with_correlation(document_id=document_id, operation="delete"):
            record = self._registry.get_by_id(document_id)
            if record is None:
                logger.debug("delete_document: unknown id")
                return False

            try:
                await self._store.delete(record.pdf_file_name)
            except Exception as e:
                logger.error(
                    f"Artifact delete failed, removing record anyway: {e}",
                    extra_fields={"path": record.pdf_file_name},
                )

            removed = await self._registry.remove(document_id)
            log_document_event("Document deleted", document_id=document_id)
            return removed
