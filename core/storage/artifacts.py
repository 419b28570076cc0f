"""PDF artifact storage.

Owns the binary PDF files of generated documents, kept in a dedicated
subdirectory of the app-private storage root:

    <storage_root>/facturas/<name>.pdf

Save and share failures are raised to the caller; delete failures are
logged and swallowed so that metadata cleanup can always proceed.
"""

import hashlib
import logging
import shutil
from pathlib import Path
from typing import Callable, List, Optional, Union

from core.observability.logging import get_logger
from core.storage.sharing import (
    DEFAULT_SHARE_TITLE,
    PDF_MIME_TYPE,
    ShareProvider,
    UnavailableShareProvider,
)

logger = get_logger(__name__)

ARTIFACT_DIR_NAME = "facturas"
PDF_EXTENSION = ".pdf"

RootResolver = Union[str, Path, Callable[[], Optional[Union[str, Path]]], None]


# =============================================================================
# Errors
# =============================================================================

class ArtifactStoreError(Exception):
    """Base exception for artifact store failures."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class StorageUnavailableError(ArtifactStoreError):
    """The app-private storage root cannot be resolved."""
    pass


class SourceMissingError(ArtifactStoreError):
    """The temporary PDF to save does not exist."""
    pass


class WriteVerificationFailedError(ArtifactStoreError):
    """The copy reported success but the destination is not readable."""
    pass


class ArtifactNotFoundError(ArtifactStoreError):
    """The artifact requested for share/open does not exist."""
    pass


class SharingUnavailableError(ArtifactStoreError):
    """The platform share capability is unavailable."""
    pass


def _compute_sha256(path: Path) -> str:
    """Compute SHA256 hash of a file."""
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            digest.update(chunk)
    return digest.hexdigest()


# =============================================================================
# Store
# =============================================================================

class PdfArtifactStore:
    """Artifact store for document PDFs.

    The storage root may be given as a path or as a callable that resolves
    it lazily (returning None when the platform cannot provide one).

    Example:
        store = PdfArtifactStore("/data/app", share_provider=provider)
        path = await store.save("/tmp/print-123.pdf", "FACTURA_FA-0001_ACME")
        await store.share(path)
    """

    def __init__(
        self,
        storage_root: RootResolver,
        share_provider: Optional[ShareProvider] = None,
    ):
        """Initialize artifact store.

        Args:
            storage_root: App-private root directory, or a resolver for it
            share_provider: Platform share capability
        """
        self._storage_root = storage_root
        self._share_provider = share_provider or UnavailableShareProvider()

    # -------------------------------------------------------------------------
    # Paths
    # -------------------------------------------------------------------------

    def _resolve_root(self) -> Optional[Path]:
        root = self._storage_root
        if callable(root):
            try:
                root = root()
            except OSError as e:
                logger.warning(f"Storage root resolver failed: {e}")
                return None
        if root is None or str(root) == "":
            return None
        return Path(root)

    @property
    def directory(self) -> Optional[Path]:
        """Artifact directory, or None if the storage root is unresolved."""
        root = self._resolve_root()
        return root / ARTIFACT_DIR_NAME if root is not None else None

    def resolve_path(self, name: str) -> Path:
        """Final path for an artifact name (without extension)."""
        directory = self.directory
        if directory is None:
            raise StorageUnavailableError("No se pudo acceder al almacenamiento")
        return directory / f"{name}{PDF_EXTENSION}"

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def ensure_directory(self) -> Path:
        """Create the artifact directory if needed and return it.

        Raises:
            StorageUnavailableError: If the storage root cannot be resolved or created
        """
        directory = self.directory
        if directory is None:
            raise StorageUnavailableError("No se pudo acceder al almacenamiento")
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageUnavailableError(
                "No se pudo acceder al almacenamiento",
                path=str(directory),
            ) from e
        return directory

    async def save(self, temp_path: Union[str, Path], name: str) -> str:
        """Copy a freshly rendered PDF into the artifact directory.

        An existing artifact with the same name is replaced.

        Args:
            temp_path: Path of the temporary PDF produced by the renderer
            name: Artifact name without extension

        Returns:
            Final path of the stored artifact

        Raises:
            SourceMissingError: If temp_path does not exist
            StorageUnavailableError: If the artifact directory cannot be resolved or created
            WriteVerificationFailedError: If the replace or copy fails (no partial
                file is left behind) or the destination is missing after copy
        """
        source = Path(temp_path)
        logger.debug(f"Saving PDF {source} as {name}")

        if not source.is_file():
            raise SourceMissingError(
                "El archivo PDF temporal no se generó correctamente",
                path=str(source),
            )

        directory = await self.ensure_directory()
        final_path = directory / f"{name}{PDF_EXTENSION}"

        try:
            if final_path.exists():
                final_path.unlink()
                logger.info(f"Replacing existing artifact {final_path.name}")
            shutil.copyfile(source, final_path)
        except OSError as e:
            self._discard_partial(final_path)
            raise WriteVerificationFailedError(
                "Error al guardar el archivo",
                path=str(final_path),
            ) from e

        if not await self.exists(final_path):
            raise WriteVerificationFailedError(
                "Error al guardar el archivo",
                path=str(final_path),
            )

        logger.info(
            f"Saved artifact {final_path.name}",
            extra_fields={"path": str(final_path), "size_bytes": final_path.stat().st_size},
        )
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Artifact content hash",
                extra_fields={"content_hash": _compute_sha256(final_path)},
            )
        return str(final_path)

    def _discard_partial(self, path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove partial artifact {path.name}: {e}")

    async def exists(self, path: Union[str, Path]) -> bool:
        """Check whether an artifact exists. Never raises."""
        try:
            return Path(path).is_file()
        except (OSError, ValueError, TypeError):
            return False

    async def delete(self, path: Union[str, Path]) -> bool:
        """Best-effort delete.

        Missing files are a silent success. Failures are logged and not
        propagated.

        Returns:
            True if a file was removed by this call
        """
        try:
            target = Path(path)
            if not target.exists():
                return False
            target.unlink()
        except (OSError, ValueError, TypeError) as e:
            logger.error(
                f"Failed to delete artifact: {e}",
                extra_fields={"path": str(path)},
            )
            return False

        logger.info(f"Deleted artifact {target.name}")
        return True

    async def share(self, path: Union[str, Path], dialog_title: Optional[str] = None) -> None:
        """Hand an artifact to the platform share dialog.

        Returns once the user dismisses the dialog.

        Raises:
            ArtifactNotFoundError: If the artifact does not exist at call time
            SharingUnavailableError: If the platform cannot share
        """
        if not await self.exists(path):
            raise ArtifactNotFoundError("El archivo no existe", path=str(path))

        if not await self._share_provider.is_available():
            raise SharingUnavailableError(
                "Compartir no está disponible en este dispositivo",
                path=str(path),
            )

        await self._share_provider.share(
            str(path),
            mime_type=PDF_MIME_TYPE,
            dialog_title=dialog_title or DEFAULT_SHARE_TITLE,
        )

    async def list(self) -> List[str]:
        """List stored PDF file names.

        Returns an empty list when the directory does not exist; listing
        never creates it.
        """
        directory = self.directory
        if directory is None or not directory.is_dir():
            return []

        try:
            return sorted(
                entry.name
                for entry in directory.iterdir()
                if entry.name.endswith(PDF_EXTENSION) and entry.is_file()
            )
        except OSError as e:
            logger.warning(f"Failed to list artifacts: {e}")
            return []
