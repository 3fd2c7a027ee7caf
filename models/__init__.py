"""
Data models for Innoprint.

This module contains dataclasses for:
- PrintModel: Catalogue record (read-only to the ordering flow)
- Option records and PrintOptions/PricingResult for the pricing engine
- User: Signed-in account
- Address: A user's delivery address
- Order: Checkout state held in the session
- OrderConfirmation: Paid order as shown to the customer

Option records and PricingResult are frozen; they are shared across requests.
"""

from .address import Address
from .user import User
from .catalog import PrintModel
from .order import Order, OrderChoices, OrderTotals, OrderConfirmation, DELIVERY_METHODS
from .pricing import (
    MaterialOption,
    ColorOption,
    QualityOption,
    SizeOption,
    PrintOptions,
    PricingResult,
)

__all__ = [
    # Catalogue
    "PrintModel",
    # Pricing
    "MaterialOption",
    "ColorOption",
    "QualityOption",
    "SizeOption",
    "PrintOptions",
    "PricingResult",
    # Users
    "User",
    # Addresses
    "Address",
    # Orders
    "Order",
    "OrderChoices",
    "OrderTotals",
    "OrderConfirmation",
    "DELIVERY_METHODS",
]
