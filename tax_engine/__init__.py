"""
Tax Engine Package

Manages named tax-rate presets with a single-default invariant, seeded from
country defaults.

Usage:
    from country_defaults import CountryDefaultsResolver
    from tax_engine import TaxConfigEngine

    engine = TaxConfigEngine(resolver=CountryDefaultsResolver())
    await engine.initialize_from_country_defaults("ES")
    preset = await engine.add_preset("IVA Especial", 5)
    await engine.set_default_preset(preset.id)
"""

from .policy import (
    ReverseChargePolicy,
    REVERSE_CHARGE_POLICIES,
    DEFAULT_REVERSE_CHARGE_POLICY,
    reverse_charge_policy_for,
)

from .engine import (
    TaxConfigEngine,
    CountryDefaultsSource,
    SNAPSHOT_KEY,
    SCHEMA_VERSION,
)

__all__ = [
    # Policy
    "ReverseChargePolicy",
    "REVERSE_CHARGE_POLICIES",
    "DEFAULT_REVERSE_CHARGE_POLICY",
    "reverse_charge_policy_for",

    # Engine
    "TaxConfigEngine",
    "CountryDefaultsSource",
    "SNAPSHOT_KEY",
    "SCHEMA_VERSION",
]
