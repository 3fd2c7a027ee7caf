"""
Print option and pricing result models.

Option records are immutable: they come from the option tables (built-in
defaults or a JSON file) and are shared by every request.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class MaterialOption:
    id: str
    name: str
    price_multiplier: float
    description: str = ""


@dataclass(frozen=True)
class ColorOption:
    """Filament color. Does not affect price or time."""
    id: str
    name: str
    hex: str


@dataclass(frozen=True)
class QualityOption:
    """Layer-height tier."""
    id: str
    name: str
    price_multiplier: float
    time_multiplier: float
    description: str = ""


@dataclass(frozen=True)
class SizeOption:
    """Print scale relative to the model's reference size."""
    id: str
    name: str
    scale: float
    price_multiplier: float


@dataclass(frozen=True)
class PrintOptions:
    """
    Resolved print configuration for one order line.

    quantity and infill are clamped by the pricing engine, so values coming
    straight from a form are safe to pass through.
    """

    material: MaterialOption
    quality: QualityOption
    size: SizeOption
    quantity: int = 1
    infill: int = 20
    supports: bool = False
    color: Optional[ColorOption] = None

    def to_choices(self) -> Dict[str, Any]:
        """Option ids and scalar values, for session storage."""
        return {
            "material": self.material.id,
            "quality": self.quality.id,
            "size": self.size.id,
            "color": self.color.id if self.color else None,
            "quantity": self.quantity,
            "infill": self.infill,
            "supports": self.supports,
        }


@dataclass(frozen=True)
class PricingResult:
    """Rounded price (currency units) and print time (hours)."""

    total: int
    print_time_hours: int

    def to_dict(self) -> Dict[str, int]:
        return {"price": self.total, "time": self.print_time_hours}
