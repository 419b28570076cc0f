"""Tax configuration models."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from core.models.common import new_id, utcnow


DEFAULT_TAX_NAME = "Tax"
DEFAULT_REVERSE_CHARGE_LABEL = "Reverse Charge"


class TaxPreset(BaseModel):
    """A named, reusable tax rate.

    The rate is a percentage in 0-100. The UI validates the range before
    calling the engine; the model does not re-check it.
    """
    id: str = Field(default_factory=new_id)
    name: str = Field(..., description="Display name, e.g. 'IVA Reducido'")
    rate: Decimal = Field(..., description="Percentage 0-100")
    is_default: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utcnow)


class TaxConfig(BaseModel):
    """Tax configuration for the business.

    At most one preset carries is_default=True once set_default_preset has
    run; see TaxConfigEngine.
    """
    tax_name: str = Field(default=DEFAULT_TAX_NAME, description="Display label, e.g. 'IVA'")
    presets: List[TaxPreset] = Field(default_factory=list)
    allow_per_line_item_tax: bool = Field(default=False, description="Reserved")
    reverse_charge_enabled: bool = Field(default=False)
    reverse_charge_label: str = Field(default=DEFAULT_REVERSE_CHARGE_LABEL)

    def find_preset(self, preset_id: str) -> Optional[TaxPreset]:
        for preset in self.presets:
            if preset.id == preset_id:
                return preset
        return None

    def default_preset(self) -> Optional[TaxPreset]:
        for preset in self.presets:
            if preset.is_default:
                return preset
        return None
