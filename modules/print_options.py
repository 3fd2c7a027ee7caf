"""
Print option tables.

Provides the materials, colors, qualities and sizes offered on the print
specifications page, with support for:
- Built-in default tables (PLA/ABS/PETG/TPU/Resin, Draft..Ultra, XS..XXL)
- Loading replacement tables from a JSON file (PRICING_OPTIONS_FILE)
- Resolving raw form values into PrintOptions for the pricing engine

The pricing engine never reads these module constants directly; it is handed
an OptionTables instance so a different catalogue can reuse the same engine.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple, TypeVar

from core.exceptions import UnknownOptionError
from logging_config import get_logger
from models.pricing import (
    ColorOption,
    MaterialOption,
    PrintOptions,
    QualityOption,
    SizeOption,
)


logger = get_logger(__name__)

# Form bounds (the engine clamps to the same range)
MIN_QUANTITY = 1
MAX_QUANTITY = 100
MIN_INFILL = 10
MAX_INFILL = 100
INFILL_STEP = 5
DEFAULT_INFILL = 20


DEFAULT_MATERIALS = (
    MaterialOption("pla", "PLA", 1.0, "Standard, eco-friendly material. Good for most prints."),
    MaterialOption("abs", "ABS", 1.2, "Durable and heat-resistant. Good for functional parts."),
    MaterialOption("petg", "PETG", 1.3, "Strong and flexible. Good for mechanical parts."),
    MaterialOption("tpu", "TPU", 1.5, "Flexible and elastic. Good for parts that need to bend."),
    MaterialOption("resin", "Resin", 2.0, "High detail and smooth finish. Good for intricate models."),
)

DEFAULT_COLORS = (
    ColorOption("white", "White", "#FFFFFF"),
    ColorOption("black", "Black", "#000000"),
    ColorOption("red", "Red", "#FF0000"),
    ColorOption("blue", "Blue", "#0000FF"),
    ColorOption("green", "Green", "#00FF00"),
    ColorOption("yellow", "Yellow", "#FFFF00"),
    ColorOption("orange", "Orange", "#FFA500"),
    ColorOption("purple", "Purple", "#800080"),
)

DEFAULT_QUALITIES = (
    QualityOption("draft", "Draft (0.3mm)", 0.8, 0.7, "Faster printing, visible layer lines"),
    QualityOption("standard", "Standard (0.2mm)", 1.0, 1.0, "Balanced quality and speed"),
    QualityOption("high", "High (0.1mm)", 1.3, 1.5, "Higher quality, less visible layer lines"),
    QualityOption("ultra", "Ultra (0.05mm)", 1.8, 2.2, "Maximum quality, minimal layer lines"),
)

DEFAULT_SIZES = (
    SizeOption("xs", "XS (50%)", 0.5, 0.5),
    SizeOption("sm", "Small (75%)", 0.75, 0.75),
    SizeOption("md", "Medium (100%)", 1.0, 1.0),
    SizeOption("lg", "Large (125%)", 1.25, 1.5),
    SizeOption("xl", "XL (150%)", 1.5, 2.0),
    SizeOption("xxl", "XXL (200%)", 2.0, 3.0),
)


T = TypeVar("T")


def _find(kind: str, options: Sequence[T], option_id: str) -> T:
    for option in options:
        if option.id == option_id:
            return option
    raise UnknownOptionError(kind, option_id, [o.id for o in options])


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "on", "yes")


def _parse_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class OptionTables:
    """The option sets offered for printing, with their multipliers."""

    materials: Tuple[MaterialOption, ...] = DEFAULT_MATERIALS
    qualities: Tuple[QualityOption, ...] = DEFAULT_QUALITIES
    sizes: Tuple[SizeOption, ...] = DEFAULT_SIZES
    colors: Tuple[ColorOption, ...] = DEFAULT_COLORS

    defaults: Dict[str, Any] = field(default_factory=lambda: {
        "material": "pla",
        "quality": "standard",
        "size": "md",
        "color": "white",
        "quantity": 1,
        "infill": DEFAULT_INFILL,
        "supports": True,
    })
    """Initial form values."""

    def material(self, option_id: str) -> MaterialOption:
        return _find("material", self.materials, option_id)

    def quality(self, option_id: str) -> QualityOption:
        return _find("quality", self.qualities, option_id)

    def size(self, option_id: str) -> SizeOption:
        return _find("size", self.sizes, option_id)

    def color(self, option_id: str) -> ColorOption:
        return _find("color", self.colors, option_id)

    def resolve(
        self,
        material: str,
        quality: str,
        size: str,
        quantity: Any = 1,
        infill: Any = DEFAULT_INFILL,
        supports: Any = False,
        color: Optional[str] = None,
    ) -> PrintOptions:
        """
        Resolve raw form values into PrintOptions.

        Option ids must exist in the tables (UnknownOptionError otherwise).
        Quantity and infill fall back to their defaults when not numeric;
        range clamping is left to the pricing engine.

        Raises:
            UnknownOptionError: If any option id is not in the tables
        """
        return PrintOptions(
            material=self.material(material),
            quality=self.quality(quality),
            size=self.size(size),
            quantity=_parse_int(quantity, MIN_QUANTITY),
            infill=_parse_int(infill, DEFAULT_INFILL),
            supports=_parse_bool(supports),
            color=self.color(color) if color else None,
        )

    def resolve_choices(self, choices: Dict[str, Any]) -> PrintOptions:
        """Resolve a choices dict as stored in the session order."""
        return self.resolve(
            material=choices.get("material", self.defaults["material"]),
            quality=choices.get("quality", self.defaults["quality"]),
            size=choices.get("size", self.defaults["size"]),
            quantity=choices.get("quantity", self.defaults["quantity"]),
            infill=choices.get("infill", self.defaults["infill"]),
            supports=choices.get("supports", False),
            color=choices.get("color"),
        )

    def describe(self, choices: Dict[str, Any]) -> Dict[str, str]:
        """Display names for stored option ids; unknown ids are shown as-is."""
        tables = {
            "material": self.materials,
            "quality": self.qualities,
            "size": self.sizes,
            "color": self.colors,
        }
        labels = {}
        for kind, options in tables.items():
            option_id = choices.get(kind)
            if option_id:
                names = {o.id: o.name for o in options}
                labels[kind] = names.get(option_id, option_id)
        return labels

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for template rendering and the quote API."""
        return {
            "materials": [vars_of(m) for m in self.materials],
            "qualities": [vars_of(q) for q in self.qualities],
            "sizes": [vars_of(s) for s in self.sizes],
            "colors": [vars_of(c) for c in self.colors],
            "defaults": dict(self.defaults),
            "limits": {
                "quantity": [MIN_QUANTITY, MAX_QUANTITY],
                "infill": [MIN_INFILL, MAX_INFILL, INFILL_STEP],
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OptionTables":
        """
        Build tables from a JSON-style dict.

        Missing sections keep the built-in defaults, so a file may override
        only the materials, for example.
        """
        def build(key: str, factory, fallback: Iterable):
            rows = data.get(key)
            if rows is None:
                return tuple(fallback)
            return tuple(factory(row) for row in rows)

        materials = build("materials", lambda r: MaterialOption(
            r["id"], r.get("name", r["id"]), float(r["priceMultiplier"]), r.get("description", "")
        ), DEFAULT_MATERIALS)
        qualities = build("qualities", lambda r: QualityOption(
            r["id"], r.get("name", r["id"]),
            float(r["priceMultiplier"]), float(r["timeMultiplier"]), r.get("description", "")
        ), DEFAULT_QUALITIES)
        sizes = build("sizes", lambda r: SizeOption(
            r["id"], r.get("name", r["id"]), float(r["scale"]), float(r["priceMultiplier"])
        ), DEFAULT_SIZES)
        colors = build("colors", lambda r: ColorOption(
            r["id"], r.get("name", r["id"]), r.get("hex", "#FFFFFF")
        ), DEFAULT_COLORS)

        tables = cls(materials=materials, qualities=qualities, sizes=sizes, colors=colors)
        tables.defaults.update(data.get("defaults", {}))
        return tables


def vars_of(option: Any) -> Dict[str, Any]:
    return dict(vars(option))


def load_option_tables(path: Optional[str] = None) -> OptionTables:
    """
    Load option tables from a JSON file, or return the built-in defaults.

    Args:
        path: JSON file path; empty/None means built-in defaults

    Returns:
        OptionTables instance
    """
    if not path:
        return OptionTables()

    with open(Path(path), "r", encoding="utf-8") as f:
        data = json.load(f)

    tables = OptionTables.from_dict(data)
    logger.info(
        f"Loaded print options from {path}: {len(tables.materials)} materials, "
        f"{len(tables.qualities)} qualities, {len(tables.sizes)} sizes"
    )
    return tables
