"""Signed-in user as seen by routes and templates."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class User:
    id: str
    email: str
    display_name: str
    created_at: datetime

    @property
    def initial(self) -> str:
        """Avatar letter: display name, else email, else 'U'."""
        source = self.display_name or self.email
        return source[0].upper() if source else "U"
