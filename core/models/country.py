"""Country defaults models."""

from __future__ import annotations

from decimal import Decimal
from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field


class TaxPresetTemplate(BaseModel):
    """A preset seed: name and rate only, no identity."""
    model_config = ConfigDict(frozen=True)

    name: str
    rate: Decimal


class CountryDefaults(BaseModel):
    """Static per-jurisdiction bundle used to seed onboarding and tax config.

    Attributes:
        tax_id_label: Label of the business tax id ("NIF", "VAT", "EIN")
        tax_name: Tax display name ("IVA", "VAT", "GST")
        default_tax_rate: Primary tax rate (percentage)
        currency: ISO 4217 currency code
        locale: BCP 47 locale code
        tax_presets: Common tax rates, first one is the default
        invoice_prefix: Suggested invoice numbering prefix
        quote_prefix: Suggested quote numbering prefix
    """
    model_config = ConfigDict(frozen=True)

    tax_id_label: str
    tax_name: str
    default_tax_rate: Decimal
    currency: str = Field(..., min_length=3, max_length=3)
    locale: str
    tax_presets: Tuple[TaxPresetTemplate, ...]
    invoice_prefix: str
    quote_prefix: str


class SupportedCountry(BaseModel):
    """Entry of the country picker."""
    model_config = ConfigDict(frozen=True)

    code: str
    name: str
