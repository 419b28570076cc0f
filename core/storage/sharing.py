"""Platform share boundary.

The system share sheet lives outside this library. Hosts wire in an object
implementing ShareProvider; the artifact store only relies on its binary
available / unavailable contract.
"""

from typing import Optional, Protocol


PDF_MIME_TYPE = "application/pdf"
DEFAULT_SHARE_TITLE = "Compartir documento"


class ShareProvider(Protocol):
    """Protocol for handing a file to the platform share mechanism."""

    async def is_available(self) -> bool:
        """Whether sharing is possible on this device."""
        ...

    async def share(
        self,
        path: str,
        mime_type: str = PDF_MIME_TYPE,
        dialog_title: Optional[str] = None,
    ) -> None:
        """Show the share dialog and return once the user dismisses it."""
        ...


class UnavailableShareProvider:
    """Share provider for hosts without a share capability."""

    async def is_available(self) -> bool:
        return False

    async def share(
        self,
        path: str,
        mime_type: str = PDF_MIME_TYPE,
        dialog_title: Optional[str] = None,
    ) -> None:
        raise RuntimeError("Sharing is not available on this host")
