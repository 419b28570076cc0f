"""Core data models.

This package contains the pydantic models shared by the document registry,
the tax engine and the country defaults resolver.
"""

from core.models.common import new_id, utcnow

from core.models.documents import (
    DocumentType,
    DocumentMetadata,
)

from core.models.tax import (
    DEFAULT_TAX_NAME,
    DEFAULT_REVERSE_CHARGE_LABEL,
    TaxPreset,
    TaxConfig,
)

from core.models.country import (
    TaxPresetTemplate,
    CountryDefaults,
    SupportedCountry,
)

__all__ = [
    # Helpers
    "new_id",
    "utcnow",
    # Documents
    "DocumentType",
    "DocumentMetadata",
    # Tax
    "DEFAULT_TAX_NAME",
    "DEFAULT_REVERSE_CHARGE_LABEL",
    "TaxPreset",
    "TaxConfig",
    # Country defaults
    "TaxPresetTemplate",
    "CountryDefaults",
    "SupportedCountry",
]
