"""Price and print-time calculation for 3D print orders."""

from __future__ import annotations

import math
from typing import Any, Dict

from logging_config import get_logger
from models.catalog import PrintModel
from models.pricing import PrintOptions, PricingResult

from .print_options import MAX_INFILL, MAX_QUANTITY, MIN_INFILL, MIN_QUANTITY, OptionTables


logger = get_logger(__name__)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positive values."""
    return int(math.floor(value + 0.5))


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


class PricingEngine:
    """
    Derives total price and estimated print duration from a model and options.

    Pure: no I/O, no state beyond the injected option tables, and identical
    inputs always give identical outputs.

    Formulas:
        price = basePrice × material × qualityPrice × sizePrice × supports × infill × quantity
        time  = basePrintTime × qualityTime × sizeScale × supportsTime × infillTime × quantity

    Both are rounded to the nearest integer.
    """

    # Supports add material and print time
    SUPPORTS_PRICE_MULTIPLIER = 1.10
    SUPPORTS_TIME_MULTIPLIER = 1.15

    # Infill is measured against a 20% baseline: each point above or below
    # moves price by 1% and time by 0.5%
    BASELINE_INFILL = 20
    INFILL_PRICE_RATE = 1 / 100
    INFILL_TIME_RATE = 1 / 200

    def __init__(self, option_tables: OptionTables) -> None:
        self.option_tables = option_tables

    def price(self, model: PrintModel, options: PrintOptions) -> PricingResult:
        factors = self.factors(options)

        price = (
            model.base_price
            * options.material.price_multiplier
            * options.quality.price_multiplier
            * options.size.price_multiplier
            * factors["supports_price"]
            * factors["infill_price"]
            * factors["quantity"]
        )
        time_multiplier = (
            options.quality.time_multiplier
            * options.size.scale
            * factors["supports_time"]
            * factors["infill_time"]
        )
        hours = model.base_print_time * time_multiplier * factors["quantity"]

        result = PricingResult(
            total=max(round_half_up(price), 0),
            print_time_hours=max(round_half_up(hours), 0),
        )
        logger.debug(
            f"Priced model {model.id}: {options.to_choices()} -> "
            f"{result.total} / {result.print_time_hours}h"
        )
        return result

    def quote(self, model: PrintModel, choices: Dict[str, Any]) -> PricingResult:
        """
        Price raw choices (option ids and form values).

        Raises:
            UnknownOptionError: If an option id is not in the tables
        """
        return self.price(model, self.option_tables.resolve_choices(choices))

    def factors(self, options: PrintOptions) -> Dict[str, float]:
        """Non-catalogue multipliers after clamping quantity and infill."""
        quantity = clamp(options.quantity, MIN_QUANTITY, MAX_QUANTITY)
        infill = clamp(options.infill, MIN_INFILL, MAX_INFILL)
        offset = infill - self.BASELINE_INFILL

        return {
            "quantity": quantity,
            "infill": infill,
            "supports_price": self.SUPPORTS_PRICE_MULTIPLIER if options.supports else 1.0,
            "supports_time": self.SUPPORTS_TIME_MULTIPLIER if options.supports else 1.0,
            "infill_price": 1 + offset * self.INFILL_PRICE_RATE,
            "infill_time": 1 + offset * self.INFILL_TIME_RATE,
        }

    def breakdown(self, model: PrintModel, options: PrintOptions) -> Dict[str, Any]:
        """Price, time and every multiplier that went into them, for display."""
        factors = self.factors(options)
        result = self.price(model, options)
        return {
            "price": result.total,
            "time": result.print_time_hours,
            "base_price": model.base_price,
            "base_print_time": model.base_print_time,
            "quantity": factors["quantity"],
            "infill": factors["infill"],
            "multipliers": {
                "material": options.material.price_multiplier,
                "quality_price": options.quality.price_multiplier,
                "quality_time": options.quality.time_multiplier,
                "size_price": options.size.price_multiplier,
                "size_scale": options.size.scale,
                "supports_price": factors["supports_price"],
                "supports_time": factors["supports_time"],
                "infill_price": round(factors["infill_price"], 4),
                "infill_time": round(factors["infill_time"], 4),
            },
        }
