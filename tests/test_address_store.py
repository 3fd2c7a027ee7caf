"""
Unit tests for the AddressStore against an in-memory SQLite database.
"""

import pytest
from sqlalchemy.exc import IntegrityError

from core.database import AddressRecord
from models.address import Address


# Fixtures

def _address(user_id="user-a", name="Asha", is_default=False, **overrides):
    values = dict(
        user_id=user_id,
        name=name,
        line1="12 MG Road",
        city="Bangalore",
        state="Karnataka",
        zip_code="560001",
        country="India",
        is_default=is_default,
    )
    values.update(overrides)
    return Address(**values)


def _defaults(store, user_id="user-a"):
    return [a for a in store.get_user_addresses(user_id) if a.is_default]


# Tests

class TestReads:
    """Reads are always scoped to one user."""

    def test_empty_user_has_no_addresses(self, address_store):
        assert address_store.get_user_addresses("nobody") == []
        assert address_store.get_default_address("nobody") is None

    def test_addresses_are_scoped_by_user(self, address_store):
        address_store.save_address(_address("user-a"))
        address_store.save_address(_address("user-b", name="Ravi"))

        addresses = address_store.get_user_addresses("user-a")

        assert len(addresses) == 1
        assert addresses[0].user_id == "user-a"

    def test_get_address_round_trips_fields(self, address_store):
        address_id = address_store.save_address(_address(line2="Flat 4B"))

        stored = address_store.get_address(address_id)

        assert stored.id == address_id
        assert stored.line2 == "Flat 4B"
        assert stored.zip_code == "560001"
        assert stored.is_default is False

    def test_get_missing_address_returns_none(self, address_store):
        assert address_store.get_address("missing") is None


class TestSaveAddress:
    """Insert, update and default clearing."""

    def test_insert_generates_id(self, address_store):
        address_id = address_store.save_address(_address())
        assert address_id
        assert len(address_id) == 32

    def test_update_by_id_keeps_single_record(self, address_store):
        address_id = address_store.save_address(_address())

        address_store.save_address(_address(id=address_id, city="Mysore"))

        addresses = address_store.get_user_addresses("user-a")
        assert len(addresses) == 1
        assert addresses[0].city == "Mysore"

    def test_saving_default_clears_other_defaults(self, address_store):
        first = address_store.save_address(_address(is_default=True))
        second = address_store.save_address(_address(name="Office", is_default=True))

        defaults = _defaults(address_store)

        assert [a.id for a in defaults] == [second]
        assert address_store.get_address(first).is_default is False

    def test_default_clearing_does_not_touch_other_users(self, address_store):
        other = address_store.save_address(_address("user-b", is_default=True))
        address_store.save_address(_address("user-a", is_default=True))

        assert address_store.get_address(other).is_default is True

    def test_resaving_current_default_keeps_it(self, address_store):
        address_id = address_store.save_address(_address(is_default=True))

        address_store.save_address(_address(id=address_id, name="Asha K", is_default=True))

        assert address_store.get_default_address("user-a").id == address_id

    def test_database_rejects_two_defaults_for_one_user(self, database):
        """The partial unique index is the last line against concurrent writers."""
        with pytest.raises(IntegrityError):
            with database.session_scope() as session:
                for record_id in ("a" * 32, "b" * 32):
                    session.add(AddressRecord(
                        id=record_id, user_id="user-a", name="x", line1="x",
                        city="x", state="x", zip_code="000000", country="India",
                        is_default=True,
                    ))


class TestSetDefaultAddress:
    """Exactly one default after set_default_address."""

    def test_set_default_moves_flag(self, address_store):
        first = address_store.save_address(_address(is_default=True))
        second = address_store.save_address(_address(name="Office"))

        assert address_store.set_default_address(second, "user-a") is True

        assert [a.id for a in _defaults(address_store)] == [second]
        assert address_store.get_address(first).is_default is False

    def test_repeated_switching_keeps_one_default(self, address_store):
        ids = [address_store.save_address(_address(name=f"A{i}")) for i in range(4)]

        for address_id in ids + list(reversed(ids)):
            address_store.set_default_address(address_id, "user-a")
            assert [a.id for a in _defaults(address_store)] == [address_id]

    def test_unowned_id_leaves_user_without_default(self, address_store):
        address_store.save_address(_address(is_default=True))
        foreign = address_store.save_address(_address("user-b"))

        address_store.set_default_address(foreign, "user-a")

        assert _defaults(address_store) == []
        assert address_store.get_address(foreign).is_default is False


class TestDeleteAddress:
    """Deletes are unconditional and never promote another default."""

    def test_delete_removes_address(self, address_store):
        address_id = address_store.save_address(_address())

        address_store.delete_address(address_id)

        assert address_store.get_address(address_id) is None

    def test_deleting_default_does_not_promote(self, address_store):
        default_id = address_store.save_address(_address(is_default=True))
        address_store.save_address(_address(name="Office"))

        address_store.delete_address(default_id)

        remaining = address_store.get_user_addresses("user-a")
        assert len(remaining) == 1
        assert remaining[0].is_default is False
        assert address_store.get_default_address("user-a") is None

    def test_deleting_missing_id_is_noop(self, address_store):
        address_store.delete_address("missing")
