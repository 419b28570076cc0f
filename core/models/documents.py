"""Document metadata models.

A DocumentMetadata record is a thin index entry for one generated invoice
(factura) or quote (presupuesto). It references its PDF artifact by path and
never owns the bytes.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from core.models.common import new_id, utcnow


class DocumentType(str, Enum):
    """Kind of business document."""
    FACTURA = "factura"          # Invoice
    PRESUPUESTO = "presupuesto"  # Quote


class DocumentMetadata(BaseModel):
    """Registry record for one generated document.

    Immutable once created; the only lifecycle transition after creation
    is removal from the registry.

    Attributes:
        id: Unique record identifier
        tipo: Document type (factura / presupuesto)
        numero_documento: Business-formatted document number (e.g. "FA-0001")
        pdf_file_name: Path of the PDF artifact (non-owning reference)
        created_at: When the record was created
        fecha_documento: Document date as shown on the PDF
        cliente_id: Client record the document was issued to
        cliente_nombre: Client display name
        cliente_nif_cif: Client tax identifier
        total: Document grand total
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id, description="Unique record identifier")
    tipo: DocumentType = Field(..., description="factura or presupuesto")
    numero_documento: str = Field(..., description="Business-formatted document number")
    pdf_file_name: str = Field(..., description="Path of the PDF artifact")
    created_at: datetime = Field(default_factory=utcnow, description="Creation timestamp")

    fecha_documento: Optional[str] = Field(default=None, description="Document date")
    cliente_id: Optional[str] = Field(default=None, description="Client identifier")
    cliente_nombre: Optional[str] = Field(default=None, description="Client name")
    cliente_nif_cif: Optional[str] = Field(default=None, description="Client tax id")
    total: Optional[Decimal] = Field(default=None, description="Document total")
