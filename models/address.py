"""
Delivery address model.

The store-facing shape (to_dict / from_dict) uses the persisted field names
userId, line1, line2, zipCode, isDefault. Forms and templates use the
Python attribute names.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional


@dataclass
class Address:
    """
    A user's delivery address.

    Lifecycle:
        1. Created when a delivery form is submitted without picking a saved address
        2. Mutated when the user edits it or toggles default status
        3. Deleted on explicit removal from the profile page
    """

    user_id: str
    """Owning user id. Addresses are never shared across users."""

    name: str
    """Recipient display name."""

    line1: str
    """Street address (required)."""

    city: str
    state: str
    zip_code: str
    country: str

    line2: Optional[str] = None
    """Apartment, suite, landmark (optional)."""

    is_default: bool = False
    """Whether checkout pre-selects this address."""

    id: Optional[str] = None
    """Store-assigned id; None until first saved."""

    @property
    def one_line(self) -> str:
        """Address formatted on a single line for summaries."""
        parts = [self.line1, self.line2, self.city, self.state, self.zip_code, self.country]
        return ", ".join(p for p in parts if p)

    def with_changes(self, **changes: Any) -> "Address":
        """Copy with the given fields replaced."""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted field shape (also used for session storage)."""
        data = {
            "userId": self.user_id,
            "name": self.name,
            "line1": self.line1,
            "line2": self.line2,
            "city": self.city,
            "state": self.state,
            "zipCode": self.zip_code,
            "country": self.country,
            "isDefault": self.is_default,
        }
        if self.id:
            data["id"] = self.id
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Address":
        """Create from the persisted field shape (e.g. from session)."""
        return cls(
            id=data.get("id"),
            user_id=data.get("userId", ""),
            name=data.get("name", ""),
            line1=data.get("line1", ""),
            line2=data.get("line2") or None,
            city=data.get("city", ""),
            state=data.get("state", ""),
            zip_code=data.get("zipCode", ""),
            country=data.get("country", ""),
            is_default=bool(data.get("isDefault", False)),
        )
