"""Service container.

Builds the document core once at process start: artifact store, document
registry, lifecycle coordinator and tax engine, wired to one snapshot store.
UI event handlers receive the container instead of reaching for globals.

Usage:
    services = build_services(load_settings(), share_provider=platform_share)
    await services.start()

    await services.tax_engine.add_preset("IVA Especial", 5)
    await services.coordinator.delete_document(doc_id)
"""

from dataclasses import dataclass
from typing import Optional

from core.config import Settings, load_settings
from core.observability.logging import configure_logging, get_logger, with_correlation
from core.storage.artifacts import PdfArtifactStore
from core.storage.sharing import ShareProvider
from core.storage.snapshots import FileSnapshotStore, InMemorySnapshotStore, SnapshotStore
from country_defaults import CountryDefaultsResolver
from documents import DocumentLifecycleCoordinator, DocumentRegistry
from tax_engine import TaxConfigEngine

logger = get_logger(__name__)


@dataclass
class AppServices:
    """All stateful services of one process."""
    settings: Settings
    snapshot_store: SnapshotStore
    artifact_store: PdfArtifactStore
    registry: DocumentRegistry
    coordinator: DocumentLifecycleCoordinator
    resolver: CountryDefaultsResolver
    tax_engine: TaxConfigEngine

    async def start(self) -> None:
        """Load persisted state; seed the tax config on first run if a country is set."""
        with with_correlation(operation="startup"):
            await self.registry.load()
            await self.tax_engine.load()

            if not self.tax_engine.restored and self.settings.country_code:
                logger.info(f"Seeding tax configuration for {self.settings.country_code}")
                await self.tax_engine.initialize_from_country_defaults(self.settings.country_code)


def build_services(
    settings: Optional[Settings] = None,
    share_provider: Optional[ShareProvider] = None,
    snapshot_store: Optional[SnapshotStore] = None,
) -> AppServices:
    """
    Construct the service graph.

    Args:
        settings: Settings (loaded from the environment if omitted)
        share_provider: Platform share capability
        snapshot_store: Persistence port; defaults to files under the
            snapshot directory, or memory when no directory is configured

    Returns:
        AppServices (call start() before use)
    """
    settings = settings or load_settings()
    configure_logging(level=settings.log_level_value, json_format=settings.log_json)

    if snapshot_store is None:
        snapshot_dir = settings.resolved_snapshot_dir()
        if snapshot_dir is not None:
            snapshot_store = FileSnapshotStore(snapshot_dir)
        else:
            logger.warning("No snapshot directory configured, state will not persist")
            snapshot_store = InMemorySnapshotStore()

    artifact_store = PdfArtifactStore(
        storage_root=lambda: settings.storage_root,
        share_provider=share_provider,
    )
    registry = DocumentRegistry(snapshot_store=snapshot_store)
    resolver = CountryDefaultsResolver()

    return AppServices(
        settings=settings,
        snapshot_store=snapshot_store,
        artifact_store=artifact_store,
        registry=registry,
        coordinator=DocumentLifecycleCoordinator(registry, artifact_store),
        resolver=resolver,
        tax_engine=TaxConfigEngine(resolver=resolver, snapshot_store=snapshot_store),
    )
