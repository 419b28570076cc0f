"""
Country Defaults Table

Static per-country bundle of tax label, tax presets, currency, locale and
numbering prefixes, keyed by ISO 3166-1 alpha-2 code.
"""

from decimal import Decimal
from types import MappingProxyType
from typing import Mapping, Tuple

from core.models.country import CountryDefaults, SupportedCountry, TaxPresetTemplate


def _presets(*entries: Tuple[str, str]) -> Tuple[TaxPresetTemplate, ...]:
    return tuple(TaxPresetTemplate(name=name, rate=Decimal(rate)) for name, rate in entries)


# =============================================================================
# Lookup Table
# =============================================================================

COUNTRY_DEFAULTS: Mapping[str, CountryDefaults] = MappingProxyType({
    "ES": CountryDefaults(
        tax_id_label="NIF",
        tax_name="IVA",
        default_tax_rate=Decimal("21"),
        currency="EUR",
        locale="es-ES",
        tax_presets=_presets(
            ("IVA General", "21"),
            ("IVA Reducido", "10"),
            ("IVA Superreducido", "4"),
            ("Exento (ISP)", "0"),
        ),
        invoice_prefix="FA-",
        quote_prefix="PRE-",
    ),
    "GB": CountryDefaults(
        tax_id_label="VAT",
        tax_name="VAT",
        default_tax_rate=Decimal("20"),
        currency="GBP",
        locale="en-GB",
        tax_presets=_presets(
            ("Standard VAT", "20"),
            ("Reduced VAT", "5"),
            ("Zero Rate", "0"),
        ),
        invoice_prefix="INV-",
        quote_prefix="QUO-",
    ),
    "US": CountryDefaults(
        tax_id_label="EIN",
        tax_name="Sales Tax",
        default_tax_rate=Decimal("0"),  # Varies by state
        currency="USD",
        locale="en-US",
        tax_presets=_presets(
            ("No Tax", "0"),
            ("State Tax", "7"),
        ),
        invoice_prefix="INV-",
        quote_prefix="QUO-",
    ),
    "DE": CountryDefaults(
        tax_id_label="USt-IdNr",
        tax_name="MwSt",
        default_tax_rate=Decimal("19"),
        currency="EUR",
        locale="de-DE",
        tax_presets=_presets(
            ("Standard MwSt", "19"),
            ("Ermäßigt", "7"),
            ("Befreit", "0"),
        ),
        invoice_prefix="RE-",
        quote_prefix="AN-",
    ),
    "FR": CountryDefaults(
        tax_id_label="TVA",
        tax_name="TVA",
        default_tax_rate=Decimal("20"),
        currency="EUR",
        locale="fr-FR",
        tax_presets=_presets(
            ("TVA Normale", "20"),
            ("TVA Réduite", "10"),
            ("TVA Super-réduite", "5.5"),
            ("Exonéré", "0"),
        ),
        invoice_prefix="FACT-",
        quote_prefix="DEVIS-",
    ),
    "IT": CountryDefaults(
        tax_id_label="P.IVA",
        tax_name="IVA",
        default_tax_rate=Decimal("22"),
        currency="EUR",
        locale="it-IT",
        tax_presets=_presets(
            ("IVA Ordinaria", "22"),
            ("IVA Ridotta", "10"),
            ("IVA Minima", "4"),
            ("Esente", "0"),
        ),
        invoice_prefix="FATT-",
        quote_prefix="PREV-",
    ),
    "PT": CountryDefaults(
        tax_id_label="NIF",
        tax_name="IVA",
        default_tax_rate=Decimal("23"),
        currency="EUR",
        locale="pt-PT",
        tax_presets=_presets(
            ("IVA Normal", "23"),
            ("IVA Intermédio", "13"),
            ("IVA Reduzido", "6"),
            ("Isento", "0"),
        ),
        invoice_prefix="FAT-",
        quote_prefix="ORC-",
    ),
    "CA": CountryDefaults(
        tax_id_label="GST/HST",
        tax_name="GST",
        default_tax_rate=Decimal("5"),
        currency="CAD",
        locale="en-CA",
        tax_presets=_presets(
            ("GST", "5"),
            ("HST", "13"),
            ("No Tax", "0"),
        ),
        invoice_prefix="INV-",
        quote_prefix="QUO-",
    ),
    "AU": CountryDefaults(
        tax_id_label="ABN",
        tax_name="GST",
        default_tax_rate=Decimal("10"),
        currency="AUD",
        locale="en-AU",
        tax_presets=_presets(
            ("GST", "10"),
            ("GST-Free", "0"),
        ),
        invoice_prefix="INV-",
        quote_prefix="QUO-",
    ),
    "MX": CountryDefaults(
        tax_id_label="RFC",
        tax_name="IVA",
        default_tax_rate=Decimal("16"),
        currency="MXN",
        locale="es-MX",
        tax_presets=_presets(
            ("IVA General", "16"),
            ("Exento", "0"),
        ),
        invoice_prefix="FACT-",
        quote_prefix="COT-",
    ),
})


# Returned for unknown or empty country codes
FALLBACK_DEFAULTS = CountryDefaults(
    tax_id_label="Tax ID",
    tax_name="Tax",
    default_tax_rate=Decimal("0"),
    currency="USD",
    locale="en-US",
    tax_presets=_presets(
        ("Standard Rate", "0"),
        ("No Tax", "0"),
    ),
    invoice_prefix="INV-",
    quote_prefix="QUO-",
)


# Country picker order
SUPPORTED_COUNTRIES: Tuple[SupportedCountry, ...] = (
    SupportedCountry(code="ES", name="Spain"),
    SupportedCountry(code="GB", name="United Kingdom"),
    SupportedCountry(code="US", name="United States"),
    SupportedCountry(code="DE", name="Germany"),
    SupportedCountry(code="FR", name="France"),
    SupportedCountry(code="IT", name="Italy"),
    SupportedCountry(code="PT", name="Portugal"),
    SupportedCountry(code="CA", name="Canada"),
    SupportedCountry(code="AU", name="Australia"),
    SupportedCountry(code="MX", name="Mexico"),
)

