"""Documents - registry of generated invoices/quotes and their lifecycle.

Keeps DocumentMetadata records in agreement with the PDF artifacts stored by
core.storage.PdfArtifactStore.

Usage:
    from documents import DocumentRegistry, DocumentLifecycleCoordinator, OrphanAction

    coordinator = DocumentLifecycleCoordinator(registry, store)
    doc = await coordinator.register_generated_document(tmp_pdf, "factura", "FA-0001")

    result = await coordinator.open_document(doc.id, resolve_orphan=lambda d: OrphanAction.PURGE)
    await coordinator.delete_document(doc.id)
"""

from documents.naming import generate_pdf_file_name, sanitize_name_part
from documents.registry import (
    DocumentRegistry,
    DocumentError,
    DuplicateDocumentError,
)
from documents.coordinator import (
    DocumentLifecycleCoordinator,
    DocumentNotFoundError,
    OpenResult,
    OpenStatus,
    OrphanAction,
)

__all__ = [
    # Naming
    "generate_pdf_file_name",
    "sanitize_name_part",
    # Registry
    "DocumentRegistry",
    "DocumentError",
    "DuplicateDocumentError",
    # Coordinator
    "DocumentLifecycleCoordinator",
    "DocumentNotFoundError",
    "OpenResult",
    "OpenStatus",
    "OrphanAction",
]
