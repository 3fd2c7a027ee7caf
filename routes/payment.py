"""
Payment routes.

The payment page shows the order summary and opens the hosted checkout
widget. The widget posts its signed result to the callback, which verifies
it and places the order.

Flow:
    1. GET /payment: compute totals, create the provider order, snapshot the
       order being charged, render widget options
    2. Customer pays in the widget
    3. POST /payment/callback: verify signature, persist the snapshot, clear session order
    4. Redirect to the confirmation page

The snapshot in session["payment"] is what gets placed: editing the print
specifications in another tab after the widget opened cannot change the
items or amount of a paid order.
"""

from flask import (
    Blueprint,
    current_app,
    flash,
    redirect,
    render_template,
    request,
    session,
    url_for,
)

from core.exceptions import PaymentProviderError, PaymentVerificationError
from logging_config import get_logger
from models.order import Order, OrderTotals
from modules.checkout import compute_totals, generate_order_id
from routes.context import clear_order, current_user, current_user_id, load_order, login_required


# Module logger
logger = get_logger(__name__)

payment_bp = Blueprint("payment", __name__)


def _order_totals(order):
    config = current_app.config
    return compute_totals(
        subtotal=order.pricing.total,
        shipping_fee=config["SHIPPING_FLAT_FEE"],
        tax_rate=config["TAX_RATE"],
        currency=config["CURRENCY"],
    )


def _ready_order():
    """Session order if it has everything payment needs, else None."""
    order = load_order()
    if order and order.has_specifications and order.has_delivery:
        return order
    return None


@payment_bp.route("/payment", methods=["GET"])
@login_required
def payment():
    """
    Display the order summary and the checkout widget.

    A fresh provider order is created on every visit; the callback only
    accepts the latest one.
    """
    order = _ready_order()
    if order is None:
        flash("Complete your print specifications and delivery details first.", "warning")
        return redirect(url_for("main.catalogue"))

    gateway = current_app.config["PAYMENT_GATEWAY"]
    totals = _order_totals(order)
    order_id = generate_order_id()

    notes = {"model_id": order.model_id, "delivery_method": order.delivery_method}
    if order.address:
        notes["address"] = order.address.one_line

    try:
        provider_order_id = gateway.create_order(order_id, totals, notes)
    except PaymentProviderError as e:
        logger.error(f"Could not open payment for {order_id}: {e}")
        flash("Payment is unavailable right now. Please try again in a moment.", "error")
        return redirect(url_for("delivery.delivery"))

    session["payment"] = {
        "order_id": order_id,
        "provider_order_id": provider_order_id,
        "order": order.to_dict(),
        "totals": totals.to_dict(),
    }
    session.modified = True

    user = current_user()
    prefill = {"name": user.display_name, "email": user.email} if user else {}

    options = gateway.checkout_options(
        provider_order_id=provider_order_id,
        totals=totals,
        description=f"Payment for {order.model_title} ({order_id})",
        prefill=prefill,
        notes=notes,
    )

    logger.info(f"Payment page opened for {order_id}: {totals.total} {totals.currency}")
    return render_template(
        "payment.html", order=order, totals=totals, order_id=order_id, checkout_options=options
    )


@payment_bp.route("/payment/callback", methods=["POST"])
@login_required
def payment_callback():
    """
    Handle the widget's success response.

    Form fields: razorpay_payment_id, razorpay_order_id, razorpay_signature.
    """
    pending = session.get("payment")
    if not pending:
        flash("No payment is pending. Please start your order again.", "warning")
        return redirect(url_for("main.catalogue"))

    order_id = pending["order_id"]
    provider_order_id = pending["provider_order_id"]
    payment_id = request.form.get("razorpay_payment_id", "")
    signature = request.form.get("razorpay_signature", "")

    try:
        if request.form.get("razorpay_order_id") != provider_order_id:
            raise PaymentVerificationError("Payment is for a different order", payment_id or None)
        current_app.config["PAYMENT_GATEWAY"].verify(provider_order_id, payment_id, signature)
    except PaymentVerificationError as e:
        logger.warning(f"Payment rejected for {order_id}: {e}")
        flash("Payment could not be verified. You have not been charged for this order.", "error")
        return redirect(url_for("payment.payment"))

    # Place exactly what the widget charged for
    order = Order.from_dict(pending["order"])
    totals = OrderTotals(**pending["totals"])

    current = load_order()
    if current is None or current.to_dict() != pending["order"]:
        logger.warning(f"Session order changed after the widget opened for {order_id}; placing the paid order")

    try:
        current_app.config["ORDER_SERVICE"].place_order(
            order_id=order_id,
            user_id=current_user_id(),
            order=order,
            totals=totals,
            payment_id=payment_id,
            payment_order_id=provider_order_id,
        )
    except Exception as e:
        logger.error(f"Failed to place order {order_id}: {e}", exc_info=True)
        flash(f"Payment received but the order could not be saved. Reference: {payment_id}", "error")
        return redirect(url_for("payment.payment"))

    current_app.config["CATALOG"].record_print(order.model_id, order.choices.quantity)
    clear_order()

    flash("Payment successful! Your order has been placed.", "success")
    return redirect(url_for("confirmation.confirmation", order_id=order_id))
