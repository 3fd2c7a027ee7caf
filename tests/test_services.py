"""
Unit tests for AuthService and OrderService on in-memory SQLite.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from core.database import UserRecord, utcnow
from core.exceptions import EmailAlreadyRegisteredError, InvalidCredentialsError
from models.address import Address
from models.order import Order, OrderChoices
from models.pricing import PricingResult
from modules.checkout import compute_totals
from services.auth_service import AuthService
from services.order_service import OrderService


# Fixtures

@pytest.fixture
def auth_service(database):
    return AuthService(database)


@pytest.fixture
def order_service(database):
    return OrderService(database, delivery_days=7)


@pytest.fixture
def home_order():
    """Order with specifications and a home delivery address."""
    return Order(
        model_id="1",
        model_title="Model 01",
        choices=OrderChoices(material="pla", quality="high", size="lg", quantity=2, infill=50, supports=True),
        pricing=PricingResult(total=4462, print_time_hours=40),
        delivery_method="HOME",
        address=Address(
            user_id="user-a",
            name="Asha",
            line1="12 MG Road",
            city="Bangalore",
            state="Karnataka",
            zip_code="560001",
            country="India",
            is_default=True,
            id="addr-1",
        ),
    )


# Tests

class TestAuthService:
    """Registration and credential checks."""

    def test_register_and_authenticate(self, auth_service):
        user = auth_service.register("Asha@Example.com ", "secret123", "Asha")

        assert user.email == "asha@example.com"
        assert auth_service.authenticate("ASHA@example.com", "secret123").id == user.id

    def test_password_is_not_stored_in_plain_text(self, auth_service, database):
        user = auth_service.register("asha@example.com", "secret123")
        with database.session_scope() as session:
            assert session.get(UserRecord, user.id).password_hash != "secret123"

    def test_duplicate_email_is_rejected(self, auth_service):
        auth_service.register("asha@example.com", "secret123")
        with pytest.raises(EmailAlreadyRegisteredError):
            auth_service.register("ASHA@example.com", "other-pass")

    @pytest.mark.parametrize("email,password", [
        ("", "secret123"),
        ("not-an-email", "secret123"),
        ("asha@example.com", "123"),
    ])
    def test_invalid_registration(self, auth_service, email, password):
        with pytest.raises(ValueError):
            auth_service.register(email, password)

    def test_wrong_password(self, auth_service):
        auth_service.register("asha@example.com", "secret123")
        with pytest.raises(InvalidCredentialsError):
            auth_service.authenticate("asha@example.com", "wrong")

    def test_unknown_email(self, auth_service):
        with pytest.raises(InvalidCredentialsError):
            auth_service.authenticate("nobody@example.com", "secret123")

    def test_get_user(self, auth_service):
        user = auth_service.register("asha@example.com", "secret123", "Asha")

        assert auth_service.get_user(user.id).display_name == "Asha"
        assert auth_service.get_user(user.id).initial == "A"
        assert auth_service.get_user("missing") is None


class TestOrderService:
    """Placing and reading back paid orders."""

    def test_place_order_and_read_confirmation(self, order_service, home_order):
        totals = compute_totals(home_order.pricing.total, 100, 0.18)
        placed_at = datetime(2024, 3, 1, 10, 30)

        order_service.place_order(
            "ORD000000001", "user-a", home_order, totals, "pay_123", now=placed_at
        )
        confirmation = order_service.get_confirmation("ORD000000001", "user-a")

        assert confirmation.estimated_delivery == date(2024, 3, 8)
        assert confirmation.payment_id == "pay_123"
        assert confirmation.payment_method == "Razorpay"
        assert confirmation.totals.subtotal == 4462
        assert confirmation.totals.tax == 803
        assert confirmation.totals.total == 5365
        assert confirmation.shipping_address["zipCode"] == "560001"
        assert confirmation.choices["quality"] == "high"
        assert confirmation.items == [{"id": "1", "name": "Model 01", "price": 4462, "quantity": 2}]

    def test_other_users_cannot_read_order(self, order_service, home_order):
        totals = compute_totals(4462, 100, 0.18)
        order_service.place_order("ORD000000001", "user-a", home_order, totals, "pay_123")

        assert order_service.get_confirmation("ORD000000001", "user-b") is None
        assert order_service.get_confirmation("ORD999999999", "user-a") is None

    def test_pickup_order_has_no_address(self, order_service, home_order):
        home_order.delivery_method = "PICKUP"
        home_order.address = None

        confirmation = order_service.place_order(
            "ORD000000002", "user-a", home_order, compute_totals(4462, 100, 0.18), "pay_9"
        )

        assert confirmation.shipping_address is None
        assert confirmation.delivery_method == "PICKUP"

    def test_incomplete_order_is_rejected(self, order_service, home_order):
        home_order.address = None
        with pytest.raises(ValueError, match="delivery"):
            order_service.place_order(
                "ORD000000003", "user-a", home_order, compute_totals(4462, 100, 0.18), "pay_1"
            )

    def test_list_orders_newest_first(self, order_service, home_order):
        totals = compute_totals(4462, 100, 0.18)
        order_service.place_order("ORD000000001", "user-a", home_order, totals, "p1",
                                  now=datetime(2024, 1, 1))
        order_service.place_order("ORD000000002", "user-a", home_order, totals, "p2",
                                  now=datetime(2024, 2, 1))
        order_service.place_order("ORD000000003", "user-b", home_order, totals, "p3")

        orders = order_service.list_orders("user-a")

        assert [o.order_id for o in orders] == ["ORD000000002", "ORD000000001"]

    def test_order_date_defaults_to_naive_utc_now(self, order_service, home_order):
        before = datetime.now(timezone.utc).replace(tzinfo=None)

        confirmation = order_service.place_order(
            "ORD000000004", "user-a", home_order, compute_totals(4462, 100, 0.18), "pay_4"
        )

        assert confirmation.order_date.tzinfo is None
        assert before <= confirmation.order_date <= before + timedelta(minutes=1)


class TestUtcNow:
    def test_is_naive_and_in_utc(self):
        aware = datetime.now(timezone.utc)
        naive = utcnow()

        assert naive.tzinfo is None
        assert abs(naive - aware.replace(tzinfo=None)) < timedelta(seconds=5)


class TestOrderSessionShape:
    """Orders survive the session round trip."""

    def test_order_dict_round_trip(self, home_order):
        restored = Order.from_dict(home_order.to_dict())

        assert restored == home_order
        assert restored.has_specifications
        assert restored.has_delivery

    def test_home_delivery_requires_address(self, home_order):
        home_order.address = None
        assert not home_order.has_delivery
