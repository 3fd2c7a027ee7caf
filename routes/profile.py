"""
Profile routes.

Address book management (add, edit, delete, set default) and order history
for the signed-in user. Every address mutation goes through the request's
AddressContext, which checks ownership before touching the store.
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

from core.exceptions import AddressNotFoundError, AddressOwnershipError
from logging_config import get_logger
from modules.addresses import CITIES_BY_STATE, INDIAN_STATES, validate_address_form
from routes.context import current_user_id, get_address_context, login_required


# Module logger
logger = get_logger(__name__)

profile_bp = Blueprint("profile", __name__, url_prefix="/profile")


def _checkbox(name: str) -> bool:
    return request.form.get(name, "").lower() in ("on", "true", "1")


def _render_profile(form=None, errors=None, status=200):
    address_context = get_address_context()
    orders = current_app.config["ORDER_SERVICE"].list_orders(current_user_id())
    return render_template(
        "profile.html",
        addresses=address_context.addresses,
        address_error=address_context.error,
        orders=orders,
        states=INDIAN_STATES,
        cities_by_state=CITIES_BY_STATE,
        form=form or {},
        errors=errors or {},
    ), status


@profile_bp.route("", methods=["GET"])
@login_required
def profile():
    """Display saved addresses and past orders."""
    return _render_profile()


@profile_bp.route("/addresses", methods=["POST"])
@login_required
def add_address():
    """Add an address from the profile page form."""
    fields, errors = validate_address_form(request.form)
    if errors:
        return _render_profile(form=request.form, errors=errors, status=400)

    try:
        get_address_context().add_address(
            country=current_app.config["DEFAULT_COUNTRY"],
            is_default=_checkbox("is_default"),
            **fields,
        )
    except Exception as e:
        logger.error(f"Failed to add address: {e}", exc_info=True)
        flash("Failed to save address. Please try again.", "error")
        return redirect(url_for("profile.profile"))

    flash("Address saved.", "success")
    return redirect(url_for("profile.profile"))


@profile_bp.route("/addresses/<address_id>/edit", methods=["GET", "POST"])
@login_required
def edit_address(address_id: str):
    """
    Edit a saved address.

    GET: Display the form pre-filled with the address
    POST: Validate and save changes
    """
    address_context = get_address_context()
    address = address_context.find(address_id)
    if address is None:
        flash("Address not found.", "warning")
        return redirect(url_for("profile.profile"))

    if request.method == "POST":
        fields, errors = validate_address_form(request.form)
        if errors:
            return render_template(
                "address_edit.html",
                address=address,
                states=INDIAN_STATES,
                cities_by_state=CITIES_BY_STATE,
                form=request.form,
                errors=errors,
            ), 400

        try:
            address_context.update_address(address.with_changes(**fields))
            if _checkbox("is_default") and not address.is_default:
                address_context.set_as_default(address.id)
        except (AddressOwnershipError, AddressNotFoundError) as e:
            flash(e.message, "error")
            return redirect(url_for("profile.profile"))
        except Exception as e:
            logger.error(f"Failed to update address {address_id[:8]}: {e}", exc_info=True)
            flash("Failed to update address. Please try again.", "error")
            return redirect(url_for("profile.edit_address", address_id=address_id))

        flash("Address updated.", "success")
        return redirect(url_for("profile.profile"))

    return render_template(
        "address_edit.html",
        address=address,
        states=INDIAN_STATES,
        cities_by_state=CITIES_BY_STATE,
        form={
            "name": address.name,
            "line1": address.line1,
            "line2": address.line2 or "",
            "state": address.state,
            "city": address.city,
            "zip_code": address.zip_code,
        },
        errors={},
    )


@profile_bp.route("/addresses/<address_id>/delete", methods=["POST"])
@login_required
def delete_address(address_id: str):
    """Delete a saved address. Deleting the default leaves no default."""
    try:
        get_address_context().remove_address(address_id)
    except (AddressOwnershipError, AddressNotFoundError) as e:
        flash(e.message, "error")
        return redirect(url_for("profile.profile"))
    except Exception as e:
        logger.error(f"Failed to delete address {address_id[:8]}: {e}", exc_info=True)
        flash("Failed to delete address. Please try again.", "error")
        return redirect(url_for("profile.profile"))

    flash("Address deleted.", "success")
    return redirect(url_for("profile.profile"))


@profile_bp.route("/addresses/<address_id>/default", methods=["POST"])
@login_required
def set_default_address(address_id: str):
    """Make a saved address the default for checkout."""
    try:
        get_address_context().set_as_default(address_id)
    except (AddressOwnershipError, AddressNotFoundError) as e:
        flash(e.message, "error")
        return redirect(url_for("profile.profile"))
    except Exception as e:
        logger.error(f"Failed to set default address {address_id[:8]}: {e}", exc_info=True)
        flash("Failed to update default address. Please try again.", "error")
        return redirect(url_for("profile.profile"))

    flash("Default address updated.", "success")
    return redirect(url_for("profile.profile"))
