"""
Reverse Charge Policy

Jurisdictions where reverse charge (Inversión del Sujeto Pasivo / Reverse
Charge) is offered by default, with the label printed on documents.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from core.models.tax import DEFAULT_REVERSE_CHARGE_LABEL


@dataclass(frozen=True)
class ReverseChargePolicy:
    """Reverse charge setting applied when seeding a country."""
    enabled: bool
    label: str


REVERSE_CHARGE_POLICIES: Mapping[str, ReverseChargePolicy] = MappingProxyType({
    "ES": ReverseChargePolicy(enabled=True, label="Inversión del Sujeto Pasivo"),
    "GB": ReverseChargePolicy(enabled=True, label=DEFAULT_REVERSE_CHARGE_LABEL),
})

DEFAULT_REVERSE_CHARGE_POLICY = ReverseChargePolicy(
    enabled=False,
    label=DEFAULT_REVERSE_CHARGE_LABEL,
)


def reverse_charge_policy_for(
    country_code: Optional[str],
    policies: Mapping[str, ReverseChargePolicy] = REVERSE_CHARGE_POLICIES,
) -> ReverseChargePolicy:
    """
    Reverse charge policy for a country.

    Args:
        country_code: ISO 3166-1 alpha-2 code, any case
        policies: Policy table

    Returns:
        The country's policy, or the disabled default
    """
    code = (country_code or "").strip().upper()
    return policies.get(code, DEFAULT_REVERSE_CHARGE_POLICY)
