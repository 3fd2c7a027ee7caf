"""
Per-user address cache.

An AddressContext mirrors the signed-in user's addresses in memory so pages
can read them without a store round trip, and funnels every mutation through
the AddressStore followed by a full re-fetch.

State machine:
    idle ──set_user(uid)──> loading ──> ready
    ready ──mutation──> loading ──> ready        (always ends with a re-fetch)
    any ──set_user(None)──> idle, addresses == []  (no store call)

Ownership:
    The context is created for one identity and thrown away with it; routes
    build a fresh one per request from the session user id. It is never a
    process-wide singleton, so two users' address lists cannot mix.

Usage:
    context = AddressContext(address_store, user_id)
    address_id = context.add_address(name="Asha", line1="12 MG Road", ...)
    context.set_as_default(address_id)
    default = context.get_default_address()
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from core.address_store import AddressStore
from core.exceptions import (
    AddressNotFoundError,
    AddressOwnershipError,
    AuthenticationRequiredError,
)
from logging_config import get_logger
from models.address import Address


logger = get_logger(__name__)


class AddressStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"


class AddressContext:
    """
    In-memory view of one user's addresses.

    Attributes:
        addresses: Last fetched list (empty when signed out)
        status: AddressStatus
        error: Last user-visible failure message, or None
    """

    def __init__(self, store: AddressStore, user_id: Optional[str] = None):
        self._store = store
        self._user_id: Optional[str] = None
        self.addresses: List[Address] = []
        self.status = AddressStatus.IDLE
        self.error: Optional[str] = None

        if user_id:
            self.set_user(user_id)

    @property
    def user_id(self) -> Optional[str]:
        return self._user_id

    @property
    def loading(self) -> bool:
        return self.status == AddressStatus.LOADING

    # =========================================================================
    # IDENTITY
    # =========================================================================

    def set_user(self, user_id: Optional[str]) -> None:
        """
        React to an identity change.

        A new user triggers a fetch; None (sign-out) clears the cache
        without touching the store.
        """
        if user_id == self._user_id and self.status != AddressStatus.IDLE:
            return

        self._user_id = user_id
        if user_id:
            self.refresh_addresses()
        else:
            self.sign_out()

    def sign_out(self) -> None:
        self._user_id = None
        self.addresses = []
        self.error = None
        self.status = AddressStatus.IDLE

    # =========================================================================
    # READS
    # =========================================================================

    def refresh_addresses(self) -> None:
        """
        Re-fetch the user's addresses.

        A failed fetch is recorded in self.error and leaves the previous
        list in place; it is not raised.
        """
        if not self._user_id:
            return

        self.status = AddressStatus.LOADING
        self.error = None
        try:
            self.addresses = self._store.get_user_addresses(self._user_id)
            logger.debug(f"Loaded {len(self.addresses)} addresses")
        except Exception as e:
            logger.error(f"Error fetching addresses: {e}")
            self.error = str(e) or "Failed to load addresses"
        finally:
            self.status = AddressStatus.READY

    def get_default_address(self) -> Optional[Address]:
        """Default address from the cache, or None."""
        for address in self.addresses:
            if address.is_default:
                return address
        return None

    def find(self, address_id: Optional[str]) -> Optional[Address]:
        for address in self.addresses:
            if address.id == address_id:
                return address
        return None

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def add_address(
        self,
        name: str,
        line1: str,
        city: str,
        state: str,
        zip_code: str,
        country: str,
        line2: Optional[str] = None,
        is_default: bool = False,
    ) -> str:
        """
        Save a new address for the signed-in user.

        The user's first address is always made default, whatever
        is_default says.

        Returns:
            The new address id

        Raises:
            AuthenticationRequiredError: If no user is signed in
        """
        user_id = self._require_user("add an address")

        address = Address(
            user_id=user_id,
            name=name,
            line1=line1,
            line2=line2,
            city=city,
            state=state,
            zip_code=zip_code,
            country=country,
            is_default=True if not self.addresses else bool(is_default),
        )
        return self._mutate(
            "add address",
            lambda: self._store.save_address(address),
        )

    def update_address(self, address: Address) -> str:
        """
        Save changes to one of the signed-in user's addresses.

        Raises:
            AuthenticationRequiredError: If no user is signed in
            AddressOwnershipError: If the address belongs to someone else
            AddressNotFoundError: If the address id does not exist
        """
        user_id = self._require_user("update an address")
        if address.user_id != user_id:
            raise AddressOwnershipError(address.id, user_id)
        if address.id:
            self._require_owned(address.id, user_id)

        return self._mutate(
            "update address",
            lambda: self._store.save_address(address),
        )

    def remove_address(self, address_id: str) -> None:
        """
        Delete one of the signed-in user's addresses.

        Removing the default address does not promote another one.

        Raises:
            AuthenticationRequiredError: If no user is signed in
            AddressOwnershipError: If the address belongs to someone else
            AddressNotFoundError: If the address id does not exist
        """
        user_id = self._require_user("remove an address")
        self._require_owned(address_id, user_id)

        self._mutate(
            "remove address",
            lambda: self._store.delete_address(address_id),
        )

    def set_as_default(self, address_id: str) -> bool:
        """
        Make one of the signed-in user's addresses their only default.

        Raises:
            AuthenticationRequiredError: If no user is signed in
            AddressOwnershipError: If the address belongs to someone else
            AddressNotFoundError: If the address id does not exist
        """
        user_id = self._require_user("set a default address")
        self._require_owned(address_id, user_id)

        return self._mutate(
            "set default address",
            lambda: self._store.set_default_address(address_id, user_id),
        )

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _require_user(self, action: str) -> str:
        if not self._user_id:
            raise AuthenticationRequiredError(action)
        return self._user_id

    def _require_owned(self, address_id: str, user_id: str) -> None:
        if self.find(address_id) is not None:
            return

        # Not in the cache: it may have been added from another tab
        stored = self._store.get_address(address_id)
        if stored is None:
            raise AddressNotFoundError(address_id)
        if stored.user_id != user_id:
            logger.warning(f"User {user_id[:8]} attempted to modify address {address_id[:8]}")
            raise AddressOwnershipError(address_id, user_id)

    def _mutate(self, action: str, operation):
        self.status = AddressStatus.LOADING
        self.error = None
        try:
            result = operation()
            self.refresh_addresses()
            return result
        except Exception as e:
            logger.error(f"Error during {action}: {e}")
            self.error = str(e) or f"Failed to {action}"
            raise
        finally:
            self.status = AddressStatus.READY
