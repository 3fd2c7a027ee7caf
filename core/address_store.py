"""
Address store client.

Persists and retrieves delivery addresses in the user_addresses table. Every
operation runs in its own transaction; the operations that touch the default
flag lock the user's rows, clear the flag, then set it, all inside that one
transaction. Two concurrent default changes for the same user therefore
serialize instead of leaving zero or two defaults behind, and the partial
unique index on (user_id WHERE is_default) rejects any write that would.

FAILURE SEMANTICS:
    Store errors are logged and re-raised unmodified. There is no retry;
    the caller decides whether to show the error and let the user resubmit.

Usage:
    store = AddressStore(database)

    address_id = store.save_address(address)
    addresses = store.get_user_addresses(user_id)
    store.set_default_address(address_id, user_id)
"""

from __future__ import annotations

import uuid
from typing import List, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from logging_config import get_logger
from models.address import Address

from .database import AddressRecord, Database


logger = get_logger(__name__)


def _to_address(record: AddressRecord) -> Address:
    return Address(
        id=record.id,
        user_id=record.user_id,
        name=record.name,
        line1=record.line1,
        line2=record.line2,
        city=record.city,
        state=record.state,
        zip_code=record.zip_code,
        country=record.country,
        is_default=bool(record.is_default),
    )


def _apply(record: AddressRecord, address: Address) -> None:
    record.user_id = address.user_id
    record.name = address.name
    record.line1 = address.line1
    record.line2 = address.line2 or None
    record.city = address.city
    record.state = address.state
    record.zip_code = address.zip_code
    record.country = address.country
    record.is_default = bool(address.is_default)


class AddressStore:
    """
    CRUD for Address records, keyed by store-generated ids.

    Queries are always filtered by owning user id; no operation here checks
    ownership itself. That is the AddressContext's job.
    """

    def __init__(self, database: Database):
        self._database = database

    # =========================================================================
    # READS
    # =========================================================================

    def get_user_addresses(self, user_id: str) -> List[Address]:
        """All addresses owned by user_id, in insertion order."""
        try:
            with self._database.session_scope() as session:
                records = session.scalars(
                    select(AddressRecord)
                    .where(AddressRecord.user_id == user_id)
                    .order_by(AddressRecord.created_at)
                ).all()
                return [_to_address(r) for r in records]
        except Exception as e:
            logger.error(f"Error getting user addresses: {e}")
            raise

    def get_default_address(self, user_id: str) -> Optional[Address]:
        """The user's default address, or None if they have none."""
        try:
            with self._database.session_scope() as session:
                record = session.scalars(
                    select(AddressRecord)
                    .where(AddressRecord.user_id == user_id, AddressRecord.is_default.is_(True))
                    .limit(1)
                ).first()
                return _to_address(record) if record else None
        except Exception as e:
            logger.error(f"Error getting default address: {e}")
            raise

    def get_address(self, address_id: str) -> Optional[Address]:
        """Single address by id, or None."""
        try:
            with self._database.session_scope() as session:
                record = session.get(AddressRecord, address_id)
                return _to_address(record) if record else None
        except Exception as e:
            logger.error(f"Error getting address {address_id}: {e}")
            raise

    # =========================================================================
    # WRITES
    # =========================================================================

    def save_address(self, address: Address) -> str:
        """
        Insert or update an address.

        If address.is_default is set, every other address of the same user
        loses its default flag in the same transaction.

        Args:
            address: Address to write; updated in place by id when id is set

        Returns:
            The address id (newly generated on insert)
        """
        try:
            with self._database.session_scope() as session:
                if address.is_default:
                    self._clear_defaults(session, address.user_id)

                if address.id:
                    address_id = address.id
                    record = session.get(AddressRecord, address_id)
                    if record is None:
                        record = AddressRecord(id=address_id)
                        session.add(record)
                else:
                    address_id = uuid.uuid4().hex
                    record = AddressRecord(id=address_id)
                    session.add(record)

                _apply(record, address)

            logger.info(
                f"Saved address {address_id[:8]} for user {address.user_id[:8]}"
                f"{' (default)' if address.is_default else ''}"
            )
            return address_id
        except Exception as e:
            logger.error(f"Error saving address: {e}")
            raise

    def delete_address(self, address_id: str) -> None:
        """
        Remove an address.

        Unconditional: no ownership check, and no other address is promoted
        to default if this one was the default. Deleting a missing id is a
        no-op.
        """
        try:
            with self._database.session_scope() as session:
                session.execute(delete(AddressRecord).where(AddressRecord.id == address_id))
            logger.info(f"Deleted address {address_id[:8]}")
        except Exception as e:
            logger.error(f"Error deleting address: {e}")
            raise

    def set_default_address(self, address_id: str, user_id: str) -> bool:
        """
        Make address_id the user's only default address.

        Writes is_default = (id == address_id) on each of the user's
        addresses. An address_id the user does not own leaves them with no
        default at all.

        Returns:
            True once the transaction commits
        """
        try:
            with self._database.session_scope() as session:
                records = self._lock_user_addresses(session, user_id)

                for record in records:
                    if record.id != address_id:
                        record.is_default = False
                # Clear before set so the one-default index never sees two
                session.flush()

                for record in records:
                    if record.id == address_id:
                        record.is_default = True

            logger.info(f"Default address for user {user_id[:8]} is now {address_id[:8]}")
            return True
        except Exception as e:
            logger.error(f"Error setting default address: {e}")
            raise

    # =========================================================================
    # HELPERS
    # =========================================================================

    @staticmethod
    def _lock_user_addresses(session: Session, user_id: str) -> Sequence[AddressRecord]:
        # FOR UPDATE is ignored by SQLite, which serializes writers anyway
        return session.scalars(
            select(AddressRecord)
            .where(AddressRecord.user_id == user_id)
            .with_for_update()
        ).all()

    def _clear_defaults(self, session: Session, user_id: str) -> None:
        for record in self._lock_user_addresses(session, user_id):
            record.is_default = False
        session.flush()
