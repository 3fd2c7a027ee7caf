"""
Services layer for Innoprint.

This module contains the business logic services:
- AddressContext: Per-user address cache over the AddressStore
- AuthService: Account registration and sign-in
- OrderService: Paid order persistence

Request Model:
    Services are plain objects. Shared ones (AuthService, OrderService) are
    created once in create_app() and hold no per-user state; an
    AddressContext is built per request for the signed-in user.
"""

from .address_context import AddressContext, AddressStatus
from .auth_service import AuthService
from .order_service import OrderService

__all__ = [
    "AddressContext",
    "AddressStatus",
    "AuthService",
    "OrderService",
]
