"""PDF file naming for generated documents."""

import re
import time
import unicodedata
from typing import Optional, Union

from core.models.documents import DocumentType

MAX_CLIENT_CHARS = 20

_TYPE_LABELS = {
    DocumentType.FACTURA: "FACTURA",
    DocumentType.PRESUPUESTO: "PRESUPUESTO",
}


def sanitize_name_part(value: Optional[str], max_length: Optional[int] = None) -> str:
    """Strip accents and replace anything outside [A-Za-z0-9] with '_'."""
    if not value:
        return ""
    decomposed = unicodedata.normalize("NFD", value)
    without_marks = "".join(c for c in decomposed if not unicodedata.combining(c))
    cleaned = re.sub(r"[^a-zA-Z0-9]", "_", without_marks)
    return cleaned[:max_length] if max_length else cleaned


def generate_pdf_file_name(
    tipo: Union[DocumentType, str],
    numero: Optional[str],
    cliente_nombre: Optional[str],
) -> str:
    """
    Build a filesystem-safe artifact name (without extension).

    Format: <TYPE>_<number>_<client>, e.g. FACTURA_FA-0001_Jose_Garcia.
    The current timestamp in milliseconds stands in for an empty number.

    Args:
        tipo: Document type
        numero: Business document number
        cliente_nombre: Client name, truncated to 20 characters

    Returns:
        Artifact name
    """
    label = _TYPE_LABELS[DocumentType(tipo)]
    numero_part = (numero or "").strip() or str(int(time.time() * 1000))
    numero_part = re.sub(r"[\\/:*?\"<>|\s]", "_", numero_part)
    cliente_part = sanitize_name_part(cliente_nombre, MAX_CLIENT_CHARS)
    return f"{label}_{numero_part}_{cliente_part}"
