"""
Print specifications route.

Handles print configuration: material, colour, quality, size, quantity,
infill and supports. Prices the choices and stores them in the session order.
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

from core.exceptions import ModelNotFoundError, UnknownOptionError
from logging_config import get_logger
from models.order import Order, OrderChoices
from modules.pricing import clamp
from modules.print_options import MAX_INFILL, MAX_QUANTITY, MIN_INFILL, MIN_QUANTITY
from routes.context import current_user_id, load_order, save_order


# Module logger
logger = get_logger(__name__)

specifications_bp = Blueprint("specifications", __name__)


def _initial_choices(model_id: str, option_tables) -> dict:
    """Choices to pre-fill: the session order's if it is for this model, else defaults."""
    order = load_order()
    if order and order.model_id == model_id and order.choices:
        return order.choices.to_dict()
    return dict(option_tables.defaults)


@specifications_bp.route("/print-specifications/<model_id>", methods=["GET", "POST"])
def print_specifications(model_id: str):
    """
    Handle print configuration.

    GET: Display options with the live price for the current choices
    POST: Validate choices, price them, store in session, redirect to delivery
    """
    catalog = current_app.config["CATALOG"]
    option_tables = current_app.config["OPTION_TABLES"]
    pricing_engine = current_app.config["PRICING_ENGINE"]

    try:
        model = catalog.get(model_id, viewer_id=current_user_id())
    except ModelNotFoundError:
        flash("Model not found.", "warning")
        return redirect(url_for("main.catalogue"))

    if request.method == "POST":
        try:
            options = option_tables.resolve(
                material=request.form.get("material", ""),
                quality=request.form.get("quality", ""),
                size=request.form.get("size", ""),
                quantity=request.form.get("quantity", MIN_QUANTITY),
                infill=request.form.get("infill", option_tables.defaults["infill"]),
                supports=request.form.get("supports", ""),
                color=request.form.get("color") or None,
            )
        except UnknownOptionError as e:
            logger.warning(f"Rejected print specifications for model {model.id}: {e}")
            flash(f"{e.message}. Please choose from the listed options.", "error")
            return redirect(url_for("specifications.print_specifications", model_id=model.id))

        pricing = pricing_engine.price(model, options)

        choices = options.to_choices()
        choices["quantity"] = clamp(options.quantity, MIN_QUANTITY, MAX_QUANTITY)
        choices["infill"] = clamp(options.infill, MIN_INFILL, MAX_INFILL)

        # Keep delivery details when re-specifying the same model
        order = load_order()
        if not order or order.model_id != model.id:
            order = Order(model_id=model.id)
        order.model_title = model.title
        order.choices = OrderChoices.from_dict(choices)
        order.pricing = pricing
        save_order(order)

        logger.info(
            f"Print specifications saved for model {model.id}: "
            f"{choices['quantity']} x {choices['material']}/{choices['quality']}/{choices['size']}, "
            f"{pricing.total} {current_app.config['CURRENCY']}"
        )
        return redirect(url_for("delivery.delivery"))

    # GET request - display specifications form
    choices = _initial_choices(model.id, option_tables)
    try:
        pricing = pricing_engine.quote(model, choices)
    except UnknownOptionError:
        # Stale session choices after an option table change
        choices = dict(option_tables.defaults)
        pricing = pricing_engine.quote(model, choices)

    return render_template(
        "print_specifications.html",
        model=model,
        options=option_tables.to_dict(),
        choices=choices,
        pricing=pricing,
    )
