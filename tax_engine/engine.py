"""
Tax Configuration Engine

Owns the business TaxConfig: named tax-rate presets, the tax display name
and the reverse charge setting.

Invariant: set_default_preset leaves exactly one preset flagged as default
(or none when the id is unknown). add_preset does not clear existing
defaults; callers creating a default preset are expected to follow up with
set_default_preset.

State changes happen in memory first and are then flushed to the injected
SnapshotStore, so reads always reflect the latest call.
"""

from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Protocol, Union

from core.models.common import new_id, utcnow
from core.models.country import CountryDefaults
from core.models.tax import TaxConfig, TaxPreset
from core.observability.logging import get_logger, with_correlation
from core.storage.snapshots import SnapshotStore, unwrap_snapshot, wrap_snapshot
from tax_engine.policy import (
    REVERSE_CHARGE_POLICIES,
    ReverseChargePolicy,
    reverse_charge_policy_for,
)

logger = get_logger(__name__)

SNAPSHOT_KEY = "tax_config"
SCHEMA_VERSION = 1

UPDATABLE_FIELDS = frozenset({"name", "rate", "is_default"})
PROTECTED_FIELDS = frozenset({"id", "created_at"})


class CountryDefaultsSource(Protocol):
    """Anything that resolves a country code to CountryDefaults."""

    def get(self, code: Optional[str]) -> CountryDefaults:
        ...


# =============================================================================
# Snapshot Migrations
# =============================================================================

_LEGACY_CONFIG_KEYS = {
    "taxName": "tax_name",
    "allowPerLineItemTax": "allow_per_line_item_tax",
    "reverseChargeEnabled": "reverse_charge_enabled",
    "reverseChargeLabel": "reverse_charge_label",
}

_LEGACY_PRESET_KEYS = {
    "isDefault": "is_default",
    "createdAt": "created_at",
}


def _migrate_v0_to_v1(data: Dict[str, Any]) -> Dict[str, Any]:
    """Convert the unversioned camelCase snapshot to the v1 shape.

    Accepts the bare config, {"config": ...} or the persisted store wrapper
    {"state": {"config": ...}, "version": 0}.
    """
    if "state" in data and isinstance(data["state"], dict):
        data = data["state"]
    if "config" in data and isinstance(data["config"], dict):
        data = data["config"]

    config = {_LEGACY_CONFIG_KEYS.get(k, k): v for k, v in data.items()}
    config["presets"] = [
        {_LEGACY_PRESET_KEYS.get(k, k): v for k, v in preset.items()}
        for preset in data.get("presets", [])
    ]
    return config


MIGRATIONS = {0: _migrate_v0_to_v1}


# =============================================================================
# Engine
# =============================================================================

class TaxConfigEngine:
    """Manages tax presets for one business.

    Example:
        engine = TaxConfigEngine(resolver=CountryDefaultsResolver(), snapshot_store=store)
        await engine.load()
        await engine.initialize_from_country_defaults("ES")
        engine.get_default_preset().rate  # Decimal("21")
    """

    def __init__(
        self,
        resolver: CountryDefaultsSource,
        snapshot_store: Optional[SnapshotStore] = None,
        reverse_charge_policies: Mapping[str, ReverseChargePolicy] = REVERSE_CHARGE_POLICIES,
        config: Optional[TaxConfig] = None,
    ):
        """Initialize the engine.

        Args:
            resolver: Country defaults source used by initialize_from_country_defaults
            snapshot_store: Persistence port (None keeps state in memory only)
            reverse_charge_policies: Per-country reverse charge settings
            config: Initial configuration (defaults to the factory config)
        """
        self._resolver = resolver
        self._snapshot_store = snapshot_store
        self._policies = reverse_charge_policies
        self._config = config or TaxConfig()
        self._restored = False

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    async def load(self) -> TaxConfig:
        """Restore the configuration from the snapshot store.

        A missing snapshot leaves the factory configuration in place.
        """
        if self._snapshot_store is None:
            return self.config

        payload = await self._snapshot_store.load(SNAPSHOT_KEY)
        if payload is None:
            self._restored = False
            logger.info("No persisted tax configuration, using defaults")
            return self.config

        data = unwrap_snapshot(payload, SCHEMA_VERSION, MIGRATIONS, key=SNAPSHOT_KEY)
        self._config = TaxConfig.model_validate(data)
        self._restored = True
        logger.info(
            "Loaded tax configuration",
            extra_fields={"presets": len(self._config.presets), "tax_name": self._config.tax_name},
        )
        return self.config

    @property
    def restored(self) -> bool:
        """Whether the last load() found a persisted configuration.

        A persisted configuration may legitimately have no presets, so this
        is the first-run test, not an empty preset list.
        """
        return self._restored

    async def flush(self) -> None:
        """Write the current configuration to the snapshot store."""
        if self._snapshot_store is None:
            return
        payload = wrap_snapshot(self._config.model_dump(mode="json"), SCHEMA_VERSION)
        await self._snapshot_store.save(SNAPSHOT_KEY, payload)

    async def _commit(self, config: TaxConfig) -> None:
        self._config = config
        await self.flush()

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @property
    def config(self) -> TaxConfig:
        """Copy of the current configuration."""
        return self._config.model_copy(deep=True)

    def get_preset_by_id(self, preset_id: str) -> Optional[TaxPreset]:
        preset = self._config.find_preset(preset_id)
        return preset.model_copy() if preset else None

    def get_default_preset(self) -> Optional[TaxPreset]:
        """First preset flagged as default, or None."""
        preset = self._config.default_preset()
        return preset.model_copy() if preset else None

    # -------------------------------------------------------------------------
    # Preset mutations
    # -------------------------------------------------------------------------

    async def add_preset(
        self,
        name: str,
        rate: Union[Decimal, int, float, str],
        is_default: bool = False,
    ) -> TaxPreset:
        """Append a new preset.

        The rate is not range-checked here. Passing is_default=True does
        not clear an existing default.
        """
        preset = TaxPreset(
            id=new_id(),
            name=name,
            rate=Decimal(str(rate)),
            is_default=is_default,
            created_at=utcnow(),
        )
        presets = list(self._config.presets) + [preset]

        if is_default and any(p.is_default for p in self._config.presets):
            logger.warning(
                "Added a default preset while another default exists",
                extra_fields={"preset_id": preset.id},
            )

        await self._commit(self._config.model_copy(update={"presets": presets}))
        logger.info(f"Added tax preset '{name}'", extra_fields={"preset_id": preset.id})
        return preset.model_copy()

    async def update_preset(self, preset_id: str, **updates: Any) -> Optional[TaxPreset]:
        """Merge fields into a preset.

        id and created_at are never changed. Unknown ids are a no-op.

        Returns:
            The updated preset, or None if not found

        Raises:
            ValueError: If an unknown field name is given
        """
        unknown = set(updates) - UPDATABLE_FIELDS - PROTECTED_FIELDS
        if unknown:
            raise ValueError(f"Unknown preset fields: {sorted(unknown)}")

        changes = {k: v for k, v in updates.items() if k in UPDATABLE_FIELDS}
        if "rate" in changes:
            changes["rate"] = Decimal(str(changes["rate"]))

        updated: Optional[TaxPreset] = None
        presets = []
        for preset in self._config.presets:
            if preset.id == preset_id:
                updated = TaxPreset.model_validate({**preset.model_dump(), **changes})
                presets.append(updated)
            else:
                presets.append(preset)

        if updated is None:
            logger.debug(f"update_preset: unknown preset {preset_id}")
            return None

        await self._commit(self._config.model_copy(update={"presets": presets}))
        return updated.model_copy()

    async def delete_preset(self, preset_id: str) -> bool:
        """Remove a preset. Default status is not reassigned."""
        presets = [p for p in self._config.presets if p.id != preset_id]
        if len(presets) == len(self._config.presets):
            return False

        await self._commit(self._config.model_copy(update={"presets": presets}))
        logger.info("Deleted tax preset", extra_fields={"preset_id": preset_id})
        return True

    async def set_default_preset(self, preset_id: str) -> bool:
        """Make one preset the default and clear every other default.

        An unknown id clears all defaults.

        Returns:
            True if a preset with that id exists
        """
        presets = [
            p.model_copy(update={"is_default": p.id == preset_id})
            for p in self._config.presets
        ]
        found = any(p.is_default for p in presets)

        await self._commit(self._config.model_copy(update={"presets": presets}))
        if not found:
            logger.warning(
                "set_default_preset: unknown preset, no default remains",
                extra_fields={"preset_id": preset_id},
            )
        return found

    # -------------------------------------------------------------------------
    # Config-level mutations
    # -------------------------------------------------------------------------

    async def set_tax_name(self, tax_name: str) -> None:
        await self._commit(self._config.model_copy(update={"tax_name": tax_name}))

    async def set_reverse_charge(self, enabled: bool, label: Optional[str] = None) -> None:
        """Toggle reverse charge and optionally change its document label."""
        update: Dict[str, Any] = {"reverse_charge_enabled": enabled}
        if label is not None:
            update["reverse_charge_label"] = label
        await self._commit(self._config.model_copy(update=update))

    async def initialize_from_country_defaults(self, country_code: str) -> TaxConfig:
        """Replace the whole configuration with a country's defaults.

        One preset per country template (fresh ids and timestamps), the
        first one flagged as default. Prior presets are discarded.
        """
        with with_correlation(country_code=country_code, operation="initialize_tax_config"):
            defaults = self._resolver.get(country_code)
            policy = reverse_charge_policy_for(country_code, self._policies)

            presets = [
                TaxPreset(
                    id=new_id(),
                    name=template.name,
                    rate=template.rate,
                    is_default=index == 0,
                    created_at=utcnow(),
                )
                for index, template in enumerate(defaults.tax_presets)
            ]

            config = TaxConfig(
                tax_name=defaults.tax_name,
                presets=presets,
                allow_per_line_item_tax=False,
                reverse_charge_enabled=policy.enabled,
                reverse_charge_label=policy.label,
            )
            await self._commit(config)

            logger.info(
                f"Initialized tax configuration ({defaults.tax_name})",
                extra_fields={"presets": len(presets), "reverse_charge": policy.enabled},
            )
        return self.config

    async def reset(self) -> None:
        """Restore the factory configuration."""
        await self._commit(TaxConfig())
        logger.info("Tax configuration reset")
