"""
Order data models.

These models represent a customer's print order as it flows through the
application: model -> print specifications -> delivery -> payment -> confirmation.

Storage:
    - Order is mutable and lives in the Flask session as a dict
    - OrderConfirmation is built from the persisted OrderRecord after payment
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from datetime import date, datetime
from typing import Dict, Any, List, Optional

from .address import Address
from .pricing import PricingResult


DELIVERY_METHODS = ("HOME", "OFFICE", "PICKUP")


@dataclass
class OrderChoices:
    """
    Customer's print choices, stored as option ids.

    Captured on the print specifications page.
    """

    material: str
    quality: str
    size: str
    quantity: int = 1
    infill: int = 20
    supports: bool = False
    color: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for session storage."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OrderChoices":
        """Create from dictionary (e.g., from session)."""
        return cls(
            material=data.get("material", ""),
            quality=data.get("quality", ""),
            size=data.get("size", ""),
            quantity=int(data.get("quantity", 1)),
            infill=int(data.get("infill", 20)),
            supports=bool(data.get("supports", False)),
            color=data.get("color"),
        )


@dataclass(frozen=True)
class OrderTotals:
    """Amounts shown at checkout, all in whole currency units."""

    subtotal: int
    shipping: int
    tax: int
    total: int
    currency: str = "INR"

    @property
    def amount_minor_units(self) -> int:
        """Total in the currency's minor unit (paise for INR)."""
        return self.total * 100

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Order:
    """
    A print order in progress.

    Lifecycle:
        1. Created on the print specifications page with model and choices
        2. Updated on the delivery page with method and address snapshot
        3. Consumed by the payment callback, which persists it
    """

    model_id: str = ""
    model_title: str = ""

    choices: Optional[OrderChoices] = None
    """Print choices (set on print specifications)."""

    pricing: Optional[PricingResult] = None
    """Price and time for the choices."""

    delivery_method: str = ""
    """One of DELIVERY_METHODS, set on the delivery page."""

    address: Optional[Address] = None
    """Snapshot of the delivery address (HOME only)."""

    @property
    def has_specifications(self) -> bool:
        return bool(self.model_id) and self.choices is not None and self.pricing is not None

    @property
    def has_delivery(self) -> bool:
        if self.delivery_method == "HOME":
            return self.address is not None
        return self.delivery_method in DELIVERY_METHODS

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for session storage."""
        data: Dict[str, Any] = {
            "model_id": self.model_id,
            "model_title": self.model_title,
        }
        if self.choices:
            data["choices"] = self.choices.to_dict()
        if self.pricing:
            data["pricing"] = self.pricing.to_dict()
        if self.delivery_method:
            data["delivery"] = {
                "method": self.delivery_method,
                "address": self.address.to_dict() if self.address else None,
            }
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Order":
        """
        Create Order from dictionary (e.g., from session).

        Args:
            data: Dictionary from session['order']

        Returns:
            Order instance
        """
        order = cls(
            model_id=data.get("model_id", ""),
            model_title=data.get("model_title", ""),
        )

        if "choices" in data:
            order.choices = OrderChoices.from_dict(data["choices"])

        if "pricing" in data:
            pricing = data["pricing"]
            order.pricing = PricingResult(
                total=int(pricing.get("price", 0)),
                print_time_hours=int(pricing.get("time", 0)),
            )

        delivery = data.get("delivery")
        if delivery:
            order.delivery_method = delivery.get("method", "")
            if delivery.get("address"):
                order.address = Address.from_dict(delivery["address"])

        return order


@dataclass(frozen=True)
class OrderConfirmation:
    """What the confirmation page shows for a paid order."""

    order_id: str
    order_date: datetime
    estimated_delivery: date
    payment_method: str
    payment_id: str
    model_id: str
    model_title: str
    choices: Dict[str, Any]
    print_time_hours: int
    delivery_method: str
    shipping_address: Optional[Dict[str, Any]]
    totals: OrderTotals

    @property
    def items(self) -> List[Dict[str, Any]]:
        return [{
            "id": self.model_id,
            "name": self.model_title,
            "price": self.totals.subtotal,
            "quantity": self.choices.get("quantity", 1),
        }]
