"""
Document Lifecycle Tests

Validates the registry and the lifecycle coordinator:
1. Registry add / list / remove / lookups
2. Open with orphan detection (keep / purge)
3. Delete: record removed even when the artifact delete fails
4. Registration of freshly rendered PDFs
5. File naming
"""

import asyncio
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from core.models.documents import DocumentMetadata, DocumentType
from core.storage.artifacts import ArtifactNotFoundError, PdfArtifactStore, SourceMissingError
from core.storage.snapshots import InMemorySnapshotStore
from documents import (
    DocumentLifecycleCoordinator,
    DocumentNotFoundError,
    DocumentRegistry,
    DuplicateDocumentError,
    OpenStatus,
    OrphanAction,
    generate_pdf_file_name,
    sanitize_name_part,
)
from documents.registry import SNAPSHOT_KEY


def run(coro):
    return asyncio.run(coro)


def make_metadata(doc_id: str, tipo: str = "factura", numero: str = "FA-0001",
                  pdf_file_name: str = "/nonexistent/doc.pdf") -> DocumentMetadata:
    return DocumentMetadata(
        id=doc_id,
        tipo=tipo,
        numero_documento=numero,
        pdf_file_name=pdf_file_name,
        created_at=datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc),
        cliente_nombre="ACME",
    )


class SharingStub:
    def __init__(self):
        self.calls = []

    async def is_available(self):
        return True

    async def share(self, path, mime_type, dialog_title):
        self.calls.append(path)


@pytest.fixture
def snapshot_store():
    return InMemorySnapshotStore()


@pytest.fixture
def registry(snapshot_store):
    return DocumentRegistry(snapshot_store=snapshot_store)


@pytest.fixture
def share_provider():
    return SharingStub()


@pytest.fixture
def store(tmp_path, share_provider):
    return PdfArtifactStore(tmp_path / "app", share_provider=share_provider)


@pytest.fixture
def coordinator(registry, store):
    return DocumentLifecycleCoordinator(registry, store)


@pytest.fixture
def temp_pdf(tmp_path):
    path = tmp_path / "render.pdf"
    path.write_bytes(b"%PDF-1.4 factura")
    return path


# =============================================================================
# Registry
# =============================================================================

class TestRegistry:
    """DocumentRegistry operations."""

    def test_add_and_lookup(self, registry):
        record = make_metadata("doc-1")
        run(registry.add(record))

        assert registry.get_by_id("doc-1") == record
        assert "doc-1" in registry
        assert len(registry) == 1

    def test_list_keeps_insertion_order(self, registry):
        for doc_id in ["doc-1", "doc-2", "doc-3"]:
            run(registry.add(make_metadata(doc_id)))

        assert [d.id for d in registry.list()] == ["doc-1", "doc-2", "doc-3"]

    def test_list_filtered_by_type(self, registry):
        run(registry.add(make_metadata("f-1", tipo="factura")))
        run(registry.add(make_metadata("p-1", tipo="presupuesto", numero="PRE-1")))
        run(registry.add(make_metadata("f-2", tipo="factura", numero="FA-0002")))

        assert [d.id for d in registry.list(DocumentType.FACTURA)] == ["f-1", "f-2"]
        assert [d.id for d in registry.list("presupuesto")] == ["p-1"]

    def test_duplicate_id_rejected(self, registry):
        run(registry.add(make_metadata("doc-1")))
        with pytest.raises(DuplicateDocumentError) as exc_info:
            run(registry.add(make_metadata("doc-1", numero="FA-0009")))

        assert exc_info.value.document_id == "doc-1"
        assert registry.get_by_id("doc-1").numero_documento == "FA-0001"

    def test_remove(self, registry):
        run(registry.add(make_metadata("doc-1")))

        assert run(registry.remove("doc-1")) is True
        assert registry.get_by_id("doc-1") is None
        assert run(registry.remove("doc-1")) is False

    def test_unknown_lookups(self, registry):
        assert registry.get_by_id("missing") is None
        assert registry.list() == []

    def test_document_numbers(self, registry):
        run(registry.add(make_metadata("doc-1", numero="FA-0001")))
        run(registry.add(make_metadata("doc-2", numero="FA-0002")))
        assert registry.all_document_numbers() == ["FA-0001", "FA-0002"]

    def test_records_survive_restart(self, registry, snapshot_store):
        run(registry.add(make_metadata("doc-1")))
        run(registry.add(make_metadata("doc-2", numero="FA-0002")))
        run(registry.remove("doc-1"))

        restarted = DocumentRegistry(snapshot_store=snapshot_store)
        assert run(restarted.load()) == 1
        assert [d.id for d in restarted.list()] == ["doc-2"]

    def test_load_legacy_snapshot_restores_insertion_order(self):
        legacy = {
            "state": {
                "documents": [
                    {"id": "newest", "tipo": "presupuesto", "numeroDocumento": "PRE-2",
                     "pdfFileName": "/data/facturas/b.pdf", "createdAt": "2025-03-02T10:00:00.000Z",
                     "clienteNombre": "Beta"},
                    {"id": "oldest", "tipo": "factura", "numeroDocumento": "FA-1",
                     "pdfFileName": "/data/facturas/a.pdf", "createdAt": "2025-03-01T10:00:00.000Z"},
                ]
            },
            "version": 0,
        }
        registry = DocumentRegistry(snapshot_store=InMemorySnapshotStore({SNAPSHOT_KEY: legacy}))

        run(registry.load())

        assert [d.id for d in registry.list()] == ["oldest", "newest"]
        assert registry.get_by_id("newest").cliente_nombre == "Beta"
        assert registry.get_by_id("oldest").pdf_file_name == "/data/facturas/a.pdf"


# =============================================================================
# Coordinator: open
# =============================================================================

class TestOpenDocument:
    """Open flow with lazy orphan reconciliation."""

    def test_open_existing_artifact(self, coordinator, temp_pdf):
        doc = run(coordinator.register_generated_document(temp_pdf, "factura", "FA-0001"))

        result = run(coordinator.open_document(doc.id))

        assert result.status == OpenStatus.OPENED
        assert result.path == doc.pdf_file_name
        assert result.is_orphan is False

    def test_open_unknown_id_raises(self, coordinator):
        with pytest.raises(DocumentNotFoundError):
            run(coordinator.open_document("missing"))

    def test_orphan_kept_without_resolver(self, coordinator, registry):
        run(registry.add(make_metadata("doc-1")))

        result = run(coordinator.open_document("doc-1"))

        assert result.status == OpenStatus.ORPHANED
        assert result.is_orphan is True
        assert registry.get_by_id("doc-1") is not None

    def test_orphan_kept_when_user_chooses_keep(self, coordinator, registry):
        run(registry.add(make_metadata("doc-1")))
        seen = []

        def keep(record):
            seen.append(record.id)
            return OrphanAction.KEEP

        result = run(coordinator.open_document("doc-1", resolve_orphan=keep))

        assert seen == ["doc-1"]
        assert result.status == OpenStatus.ORPHANED
        assert "doc-1" in registry

    def test_orphan_purged_by_async_resolver(self, coordinator, registry):
        """Deleted file outside the app, user confirms removal."""
        run(registry.add(make_metadata("doc-1")))

        async def purge(record):
            return OrphanAction.PURGE

        result = run(coordinator.open_document("doc-1", resolve_orphan=purge))

        assert result.status == OpenStatus.PURGED
        assert result.document.id == "doc-1"
        assert registry.get_by_id("doc-1") is None
        assert registry.list() == []

    def test_resolver_not_called_when_artifact_exists(self, coordinator, temp_pdf):
        doc = run(coordinator.register_generated_document(temp_pdf, "factura", "FA-0001"))

        def fail(record):
            raise AssertionError("resolver should not run")

        assert run(coordinator.open_document(doc.id, resolve_orphan=fail)).status == OpenStatus.OPENED

    def test_purge_orphan(self, coordinator, registry, temp_pdf):
        run(registry.add(make_metadata("orphan")))
        present = run(coordinator.register_generated_document(temp_pdf, "factura", "FA-0002"))

        assert run(coordinator.purge_orphan("orphan")) is True
        assert run(coordinator.purge_orphan(present.id)) is False
        assert run(coordinator.purge_orphan("missing")) is False
        assert [d.id for d in registry.list()] == [present.id]


# =============================================================================
# Coordinator: delete
# =============================================================================

class TestDeleteDocument:
    """Delete flow: artifact best effort, record always removed."""

    def test_delete_removes_artifact_and_record(self, coordinator, registry, temp_pdf):
        doc = run(coordinator.register_generated_document(temp_pdf, "presupuesto", "PRE-1"))

        assert run(coordinator.delete_document(doc.id)) is True

        assert registry.get_by_id(doc.id) is None
        assert not Path(doc.pdf_file_name).exists()

    def test_delete_with_missing_artifact(self, coordinator, registry):
        run(registry.add(make_metadata("doc-1")))

        assert run(coordinator.delete_document("doc-1")) is True
        assert registry.get_by_id("doc-1") is None

    def test_record_removed_when_artifact_delete_raises(self, coordinator, registry, store, temp_pdf):
        doc = run(coordinator.register_generated_document(temp_pdf, "factura", "FA-0001"))

        with patch.object(store, "delete", AsyncMock(side_effect=OSError("disk error"))):
            assert run(coordinator.delete_document(doc.id)) is True

        assert registry.get_by_id(doc.id) is None
        assert Path(doc.pdf_file_name).exists()

    def test_delete_unknown_id(self, coordinator):
        assert run(coordinator.delete_document("missing")) is False


# =============================================================================
# Coordinator: register / share
# =============================================================================

class TestRegisterAndShare:
    """Registration of rendered PDFs and sharing."""

    def test_register_stores_artifact_and_record(self, coordinator, registry, store, temp_pdf):
        doc = run(coordinator.register_generated_document(
            temp_pdf,
            DocumentType.FACTURA,
            "FA-0001",
            fecha_documento="2025-03-01",
            cliente_id="cli-1",
            cliente_nombre="José García",
            cliente_nif_cif="12345678Z",
            total=Decimal("121.00"),
        ))

        assert registry.list() == [doc]
        assert doc.tipo == DocumentType.FACTURA
        assert doc.total == Decimal("121.00")
        assert Path(doc.pdf_file_name).name == "FACTURA_FA-0001_Jose_Garcia.pdf"
        assert run(store.list()) == ["FACTURA_FA-0001_Jose_Garcia.pdf"]

    def test_register_with_explicit_file_name(self, coordinator, temp_pdf):
        doc = run(coordinator.register_generated_document(
            temp_pdf, "presupuesto", "PRE-7", file_name="custom",
        ))
        assert Path(doc.pdf_file_name).name == "custom.pdf"

    def test_failed_save_leaves_registry_untouched(self, coordinator, registry, tmp_path):
        with pytest.raises(SourceMissingError):
            run(coordinator.register_generated_document(tmp_path / "missing.pdf", "factura", "FA-1"))
        assert len(registry) == 0

    def test_share_document(self, coordinator, share_provider, temp_pdf):
        doc = run(coordinator.register_generated_document(temp_pdf, "factura", "FA-0001"))

        run(coordinator.share_document(doc.id))

        assert share_provider.calls == [doc.pdf_file_name]

    def test_share_orphan_raises(self, coordinator, registry):
        run(registry.add(make_metadata("doc-1")))
        with pytest.raises(ArtifactNotFoundError):
            run(coordinator.share_document("doc-1"))

    def test_share_unknown_id_raises(self, coordinator):
        with pytest.raises(DocumentNotFoundError):
            run(coordinator.share_document("missing"))


# =============================================================================
# Naming
# =============================================================================

class TestNaming:
    """Artifact file names."""

    def test_factura_name(self):
        assert generate_pdf_file_name("factura", "FA-0001", "José García") == "FACTURA_FA-0001_Jose_Garcia"

    def test_presupuesto_without_client(self):
        assert generate_pdf_file_name(DocumentType.PRESUPUESTO, "PRE-3", None) == "PRESUPUESTO_PRE-3_"

    def test_client_truncated(self):
        name = generate_pdf_file_name("factura", "1", "Construcciones y Reformas del Norte SL")
        assert name == "FACTURA_1_" + "Construcciones_y_Ref"

    def test_empty_number_uses_timestamp(self):
        parts = generate_pdf_file_name("factura", "", "ACME").split("_")
        assert parts[1].isdigit()

    def test_number_with_separators(self):
        assert generate_pdf_file_name("factura", "2025/001", "") == "FACTURA_2025_001_"

    def test_sanitize(self):
        assert sanitize_name_part("Peña & Cía.") == "Pena___Cia_"
        assert sanitize_name_part(None) == ""
