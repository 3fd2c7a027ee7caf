"""
Catalogue model records.

A PrintModel is read-only from the ordering flow's point of view. Only the
catalogue itself mutates counters (downloads, prints) and adds records for
uploads.
"""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from datetime import date
from typing import Any, Dict, List, Optional


@dataclass
class PrintModel:
    """A 3D model that can be previewed and ordered as a print."""

    id: str
    title: str
    description: str
    creator: str

    created_at: str
    """ISO date (YYYY-MM-DD) the model was published."""

    file_url: str
    """URL of the model file handed to the in-browser viewer."""

    thumbnail_url: str

    base_price: float
    """Price of one Medium/Standard/PLA print at 20% infill, no supports."""

    base_print_time: float
    """Hours for the same reference print."""

    category: str = "decoration"
    download_count: int = 0
    print_count: int = 0
    tags: List[str] = field(default_factory=list)
    license: str = "cc-by"
    allow_derivatives: bool = True
    allow_commercial_use: bool = False

    owner_id: Optional[str] = None
    """Uploader's user id; None for curated catalogue models."""

    is_public: bool = True
    """Quick-print uploads are private to their owner."""

    @property
    def created_date(self) -> date:
        return date.fromisoformat(self.created_at)

    @property
    def print_time_label(self) -> str:
        """Display string for the base print time (e.g. '8 Hrs')."""
        hours = self.base_print_time
        return f"{int(hours) if float(hours).is_integer() else hours} Hrs"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the catalogue JSON shape."""
        data = asdict(self)
        data["basePrice"] = data.pop("base_price")
        data["basePrintTime"] = data.pop("base_print_time")
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PrintModel":
        """Create from the catalogue JSON shape (camelCase or snake_case keys)."""
        def pick(*keys, default=None):
            for key in keys:
                if key in data:
                    return data[key]
            return default

        return cls(
            id=str(data["id"]),
            title=data.get("title", ""),
            description=data.get("description", ""),
            creator=data.get("creator", ""),
            created_at=pick("createdAt", "created_at", default=date.today().isoformat()),
            file_url=pick("fileUrl", "file_url", default=""),
            thumbnail_url=pick("thumbnailUrl", "thumbnail_url", default=""),
            base_price=float(pick("basePrice", "base_price", default=0)),
            base_print_time=float(pick("basePrintTime", "base_print_time", default=0)),
            category=data.get("category", "decoration"),
            download_count=int(pick("downloadCount", "download_count", default=0)),
            print_count=int(pick("printCount", "print_count", default=0)),
            tags=list(data.get("tags", [])),
            license=data.get("license", "cc-by"),
            allow_derivatives=bool(pick("allowDerivatives", "allow_derivatives", default=True)),
            allow_commercial_use=bool(pick("allowCommercialUse", "allow_commercial_use", default=False)),
            owner_id=pick("ownerId", "owner_id"),
            is_public=bool(pick("isPublic", "is_public", default=True)),
        )
