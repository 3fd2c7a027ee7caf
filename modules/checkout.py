"""
Checkout helpers: order totals, provider orders and payment-widget options.

The pricing engine's total is the subtotal here; shipping is a flat fee and
tax a percentage of the subtotal, both from app config.
"""

from __future__ import annotations

import hashlib
import hmac
import random
from typing import Any, Dict, Optional

import requests
from requests.exceptions import RequestException, Timeout

from core.exceptions import PaymentProviderError, PaymentVerificationError
from logging_config import get_logger
from models.order import OrderTotals

from .pricing import round_half_up


logger = get_logger(__name__)


def compute_totals(subtotal: int, shipping_fee: int, tax_rate: float, currency: str = "INR") -> OrderTotals:
    """
    Add shipping and tax to a subtotal.

    tax = round(subtotal × tax_rate); total = subtotal + shipping + tax.
    """
    tax = round_half_up(subtotal * tax_rate)
    return OrderTotals(
        subtotal=subtotal,
        shipping=shipping_fee,
        tax=tax,
        total=subtotal + shipping_fee + tax,
        currency=currency,
    )


def generate_order_id(rng: Optional[random.Random] = None) -> str:
    """Order reference shown to customers: 'ORD' followed by 9 digits."""
    rng = rng or random.SystemRandom()
    return f"ORD{rng.randrange(10 ** 9):09d}"


RAZORPAY_API_URL = "https://api.razorpay.com/v1"


class PaymentGateway:
    """
    Server side of the hosted checkout widget.

    Flow:
        1. create_order() registers the amount with the provider's Orders
           API and returns the provider order id ("order_...")
        2. checkout_options() builds the widget options around that id
        3. The widget posts back payment id, provider order id and
           signature; verify() checks the signature

    The customer-facing reference (ORD#########) travels as the provider
    order's receipt; it is never handed to the widget as order_id.
    """

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        store_name: str = "Innoprint",
        api_url: str = RAZORPAY_API_URL,
        http: Optional[requests.Session] = None,
        timeout: float = 15,
    ):
        self.key_id = key_id
        self._key_secret = key_secret.encode("utf-8")
        self.store_name = store_name
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout

        self._http = http or requests.Session()
        self._http.auth = (key_id, key_secret)
        self._http.headers.update({"Accept": "application/json"})

    def create_order(
        self,
        receipt: str,
        totals: OrderTotals,
        notes: Optional[Dict[str, str]] = None,
    ) -> str:
        """
        Create the provider order the widget will be opened for.

        Args:
            receipt: Our order reference (ORD#########)
            totals: Amount to charge; sent in minor units

        Returns:
            Provider order id

        Raises:
            PaymentProviderError: On timeout, connection failure, HTTP error
                or a response without an order id
        """
        payload = {
            "amount": totals.amount_minor_units,
            "currency": totals.currency,
            "receipt": receipt,
            "notes": notes or {},
        }
        try:
            response = self._http.post(f"{self._api_url}/orders", json=payload, timeout=self._timeout)
        except Timeout as e:
            raise PaymentProviderError("Payment provider timed out", receipt) from e
        except RequestException as e:
            raise PaymentProviderError(f"Cannot reach payment provider: {e}", receipt) from e

        if not response.ok:
            raise PaymentProviderError(
                f"Payment provider returned HTTP {response.status_code}: {response.text[:200]}",
                receipt,
                response.status_code,
            )

        try:
            provider_order_id = response.json()["id"]
        except (ValueError, KeyError, TypeError) as e:
            raise PaymentProviderError("Payment provider response has no order id", receipt) from e

        logger.info(f"Provider order {provider_order_id} created for {receipt}: {payload['amount']} {totals.currency}")
        return provider_order_id

    def checkout_options(
        self,
        provider_order_id: str,
        totals: OrderTotals,
        description: str,
        prefill: Optional[Dict[str, str]] = None,
        notes: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """
        Options passed to the widget's constructor.

        amount is in minor units (paise for INR) and must match the
        provider order.
        """
        return {
            "key": self.key_id,
            "amount": totals.amount_minor_units,
            "currency": totals.currency,
            "name": self.store_name,
            "description": description,
            "order_id": provider_order_id,
            "prefill": prefill or {},
            "notes": notes or {},
            "theme": {"color": "#4285F4"},
        }

    def sign(self, provider_order_id: str, payment_id: str) -> str:
        """HMAC-SHA256 of 'provider_order_id|payment_id' with the key secret, hex encoded."""
        message = f"{provider_order_id}|{payment_id}".encode("utf-8")
        return hmac.new(self._key_secret, message, hashlib.sha256).hexdigest()

    def verify(self, provider_order_id: str, payment_id: str, signature: str) -> None:
        """
        Check the signature the widget returned with a successful payment.

        Raises:
            PaymentVerificationError: If a field is missing or the signature does not match
        """
        if not provider_order_id or not payment_id or not signature:
            raise PaymentVerificationError("Incomplete payment response", payment_id or None)

        expected = self.sign(provider_order_id, payment_id)
        if not hmac.compare_digest(expected, signature):
            logger.warning(f"Payment signature mismatch for order {provider_order_id}, payment {payment_id}")
            raise PaymentVerificationError("Payment signature verification failed", payment_id)

        logger.info(f"Payment {payment_id} verified for order {provider_order_id}")
