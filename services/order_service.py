"""
Order persistence.

Orders are written exactly once, after the payment callback has been
verified. Until then the order only exists in the customer's session.

Flow:
    1. Payment page generates an order reference and shows the widget
    2. Widget posts back payment id + signature
    3. Route verifies the signature (PaymentGateway.verify)
    4. OrderService.place_order() writes the OrderRecord
    5. Confirmation page reads it back with get_confirmation()
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import select

from core.database import Database, OrderRecord, utcnow
from logging_config import get_logger
from models.order import Order, OrderConfirmation, OrderTotals


logger = get_logger(__name__)

PAYMENT_METHOD = "Razorpay"


def _to_confirmation(record: OrderRecord) -> OrderConfirmation:
    return OrderConfirmation(
        order_id=record.id,
        order_date=record.created_at,
        estimated_delivery=record.estimated_delivery,
        payment_method=PAYMENT_METHOD,
        payment_id=record.payment_id,
        model_id=record.model_id,
        model_title=record.model_title,
        choices=dict(record.choices or {}),
        print_time_hours=record.print_time_hours,
        delivery_method=record.delivery_method,
        shipping_address=record.shipping_address,
        totals=OrderTotals(
            subtotal=record.subtotal,
            shipping=record.shipping,
            tax=record.tax,
            total=record.total,
            currency=record.currency,
        ),
    )


class OrderService:
    """
    Writes and reads paid orders.

    Attributes:
        delivery_days: Days added to the order date for the delivery estimate
    """

    def __init__(self, database: Database, delivery_days: int = 7):
        self._database = database
        self.delivery_days = delivery_days

    def place_order(
        self,
        order_id: str,
        user_id: str,
        order: Order,
        totals: OrderTotals,
        payment_id: str,
        payment_order_id: str = "",
        now: Optional[datetime] = None,
    ) -> OrderConfirmation:
        """
        Persist a paid order.

        Args:
            order_id: Customer-facing reference (ORD#########)
            user_id: Paying user
            order: Session order with specifications and delivery filled in
            totals: Amounts that were charged
            payment_id: Payment id returned by the widget
            payment_order_id: Order id the widget was opened with

        Raises:
            ValueError: If the order is missing specifications or delivery
        """
        if not order.has_specifications:
            raise ValueError("Order has no print specifications")
        if not order.has_delivery:
            raise ValueError("Order has no delivery details")

        created_at = now or utcnow()
        record = OrderRecord(
            id=order_id,
            user_id=user_id,
            model_id=order.model_id,
            model_title=order.model_title,
            choices=order.choices.to_dict(),
            price=order.pricing.total,
            print_time_hours=order.pricing.print_time_hours,
            subtotal=totals.subtotal,
            shipping=totals.shipping,
            tax=totals.tax,
            total=totals.total,
            currency=totals.currency,
            delivery_method=order.delivery_method,
            shipping_address=order.address.to_dict() if order.address else None,
            payment_id=payment_id,
            payment_order_id=payment_order_id or order_id,
            created_at=created_at,
            estimated_delivery=(created_at + timedelta(days=self.delivery_days)).date(),
        )

        with self._database.session_scope() as session:
            session.add(record)

        logger.info(
            f"Order {order_id} placed: model {order.model_id}, "
            f"total {totals.total} {totals.currency}, payment {payment_id}"
        )
        return _to_confirmation(record)

    def get_confirmation(self, order_id: str, user_id: str) -> Optional[OrderConfirmation]:
        """The user's order by reference, or None (also for other users' orders)."""
        with self._database.session_scope() as session:
            record = session.get(OrderRecord, order_id)
            if record is None or record.user_id != user_id:
                return None
            return _to_confirmation(record)

    def list_orders(self, user_id: str) -> List[OrderConfirmation]:
        """The user's orders, newest first."""
        with self._database.session_scope() as session:
            records = session.scalars(
                select(OrderRecord)
                .where(OrderRecord.user_id == user_id)
                .order_by(OrderRecord.created_at.desc())
            ).all()
            return [_to_confirmation(r) for r in records]
