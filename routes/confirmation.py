"""
Confirmation route.

Displays a paid order after the payment callback has placed it.
"""

from flask import (
    Blueprint,
    current_app,
    flash,
    redirect,
    render_template,
    url_for,
)

from logging_config import get_logger
from routes.context import clear_order, current_user_id, login_required


# Module logger
logger = get_logger(__name__)

confirmation_bp = Blueprint("confirmation", __name__)


@confirmation_bp.route("/order-confirmation/<order_id>", methods=["GET"])
@login_required
def confirmation(order_id: str):
    """
    Display order confirmation page.

    Shows order reference, estimated delivery, payment, address, items and totals.
    """
    confirmation = current_app.config["ORDER_SERVICE"].get_confirmation(order_id, current_user_id())
    if confirmation is None:
        flash("Order not found.", "warning")
        return redirect(url_for("main.catalogue"))

    return render_template(
        "confirmation.html",
        confirmation=confirmation,
        labels=current_app.config["OPTION_TABLES"].describe(confirmation.choices),
    )


@confirmation_bp.route("/start-over", methods=["POST"])
def start_over():
    """Clear the session order and go back to the catalogue."""
    clear_order()
    logger.info("Session order cleared")
    flash("Session cleared. Start a new order.", "success")
    return redirect(url_for("main.catalogue"))
