"""Country Defaults Resolver.

Pure, stateless lookup from a country code to its CountryDefaults bundle.
Lookups are case-insensitive and never raise: unknown or empty codes
resolve to a generic fallback.
"""

from typing import List, Mapping, Optional, Sequence

from core.models.country import CountryDefaults, SupportedCountry
from country_defaults.table import (
    COUNTRY_DEFAULTS,
    FALLBACK_DEFAULTS,
    SUPPORTED_COUNTRIES,
)


def normalize_country_code(code: Optional[str]) -> str:
    """Uppercase and strip a country code; None becomes ''."""
    if not code:
        return ""
    return str(code).strip().upper()


class CountryDefaultsResolver:
    """Resolves country codes to static defaults.

    Example:
        resolver = CountryDefaultsResolver()
        defaults = resolver.get("es")
        print(defaults.currency)  # EUR
    """

    def __init__(
        self,
        table: Mapping[str, CountryDefaults] = COUNTRY_DEFAULTS,
        fallback: CountryDefaults = FALLBACK_DEFAULTS,
        supported: Sequence[SupportedCountry] = SUPPORTED_COUNTRIES,
    ):
        """Initialize the resolver.

        Args:
            table: Country code -> defaults mapping (keys uppercase)
            fallback: Defaults for unknown codes
            supported: Country picker entries; every code must be a table key
        """
        missing = [c.code for c in supported if c.code not in table]
        if missing:
            raise ValueError(f"Supported countries missing from table: {missing}")

        self._table = table
        self._fallback = fallback
        self._supported = tuple(supported)

    def get(self, code: Optional[str]) -> CountryDefaults:
        """Defaults for a country code, or the generic fallback."""
        return self._table.get(normalize_country_code(code), self._fallback)

    def is_supported(self, code: Optional[str]) -> bool:
        return normalize_country_code(code) in self._table

    def list_supported(self) -> List[SupportedCountry]:
        """Countries offered by the country picker."""
        return list(self._supported)


DEFAULT_RESOLVER = CountryDefaultsResolver()


def get_country_defaults(code: Optional[str]) -> CountryDefaults:
    """Convenience lookup on the resolver over the static table."""
    return DEFAULT_RESOLVER.get(code)
