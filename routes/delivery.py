"""
Delivery route.

Handles delivery method selection and the shipping address. For home
delivery the customer either picks a saved address (the default one is
pre-selected) or fills in a new one, which is saved to their address book.
"""

from flask import (
    Blueprint,
    current_app,
    flash,
    redirect,
    render_template,
    request,
    url_for,
)

from logging_config import get_logger
from models.order import DELIVERY_METHODS
from modules.addresses import CITIES_BY_STATE, INDIAN_STATES, validate_address_form
from routes.context import get_address_context, load_order, login_required, save_order


# Module logger
logger = get_logger(__name__)

delivery_bp = Blueprint("delivery", __name__)

NEW_ADDRESS = "new"

DELIVERY_METHOD_LABELS = {
    "HOME": "Home Delivery",
    "OFFICE": "Office Delivery",
    "PICKUP": "Store Pickup",
}


def _render(order, address_context, selected_method, selected_address_id, form=None, errors=None, status=200):
    return render_template(
        "delivery.html",
        order=order,
        addresses=address_context.addresses,
        address_error=address_context.error,
        delivery_methods=[(m, DELIVERY_METHOD_LABELS[m]) for m in DELIVERY_METHODS],
        selected_method=selected_method,
        selected_address_id=selected_address_id,
        states=INDIAN_STATES,
        cities_by_state=CITIES_BY_STATE,
        form=form or {},
        errors=errors or {},
    ), status


@delivery_bp.route("/delivery", methods=["GET", "POST"])
@login_required
def delivery():
    """
    Handle delivery details.

    GET: Display delivery methods and the user's saved addresses
    POST: Validate, save a new address if one was entered, redirect to payment
    """
    order = load_order()
    if not order or not order.has_specifications:
        flash("Choose a model and print specifications first.", "warning")
        return redirect(url_for("main.catalogue"))

    address_context = get_address_context()

    if request.method == "POST":
        method = request.form.get("delivery_method", "HOME")
        if method not in DELIVERY_METHODS:
            flash("Please choose a valid delivery method.", "error")
            return redirect(url_for("delivery.delivery"))

        address = None
        if method == "HOME":
            address_id = request.form.get("address_id", "")
            if not address_context.addresses:
                address_id = NEW_ADDRESS

            if address_id == NEW_ADDRESS:
                fields, errors = validate_address_form(request.form)
                if errors:
                    return _render(order, address_context, method, NEW_ADDRESS,
                                   form=request.form, errors=errors, status=400)
                try:
                    new_id = address_context.add_address(
                        country=current_app.config["DEFAULT_COUNTRY"],
                        is_default=not address_context.addresses,
                        **fields,
                    )
                except Exception as e:
                    logger.error(f"Failed to save delivery address: {e}", exc_info=True)
                    return _render(order, address_context, method, NEW_ADDRESS,
                                   form=request.form,
                                   errors={"submit": "Failed to save address. Please try again."},
                                   status=500)
                address = address_context.find(new_id)
            else:
                address = address_context.find(address_id)

            if address is None:
                return _render(order, address_context, method, address_id,
                               errors={"address": "Please select an address or add a new one"},
                               status=400)

        order.delivery_method = method
        order.address = address
        save_order(order)

        logger.info(
            f"Delivery saved for model {order.model_id}: {method}"
            + (f", address {address.id[:8]}" if address else "")
        )
        return redirect(url_for("payment.payment"))

    # GET request - pre-select the order's address, else the default one
    selected_method = order.delivery_method or "HOME"
    if order.address and address_context.find(order.address.id):
        selected_address_id = order.address.id
    else:
        default = address_context.get_default_address()
        selected_address_id = default.id if default else NEW_ADDRESS

    return _render(order, address_context, selected_method, selected_address_id)
