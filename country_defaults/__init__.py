"""Country Defaults - static per-jurisdiction settings.

Drives currency, tax-id label, numbering prefixes and tax presets for a
country. Used by onboarding and to seed the tax engine.

Usage:
    from country_defaults import CountryDefaultsResolver

    resolver = CountryDefaultsResolver()
    defaults = resolver.get("es")
    defaults.tax_name        # "IVA"
    defaults.invoice_prefix  # "FA-"

    resolver.get("ZZ").currency  # "USD" (generic fallback)
"""

from country_defaults.table import (
    COUNTRY_DEFAULTS,
    FALLBACK_DEFAULTS,
    SUPPORTED_COUNTRIES,
)
from country_defaults.resolver import (
    CountryDefaultsResolver,
    DEFAULT_RESOLVER,
    get_country_defaults,
    normalize_country_code,
)

__all__ = [
    # Table
    "COUNTRY_DEFAULTS",
    "FALLBACK_DEFAULTS",
    "SUPPORTED_COUNTRIES",
    # Resolver
    "CountryDefaultsResolver",
    "DEFAULT_RESOLVER",
    "get_country_defaults",
    "normalize_country_code",
]
