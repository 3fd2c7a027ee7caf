"""
Request helpers shared by the blueprints.

- Signed-in user id from the session and the login_required decorator
- Per-request AddressContext (cached on flask.g)
- Session order load/save
"""

from functools import wraps
from typing import Optional

from flask import current_app, flash, g, redirect, request, session, url_for

from models.order import Order
from services.address_context import AddressContext


def current_user_id() -> Optional[str]:
    return session.get("user_id")


def current_user():
    """Signed-in User, looked up once per request; None when signed out."""
    if "current_user" not in g:
        user_id = current_user_id()
        auth_service = current_app.config.get("AUTH_SERVICE")
        g.current_user = auth_service.get_user(user_id) if user_id and auth_service else None
    return g.current_user


def login_required(view):
    """Redirect to the login page (with ?next=) when nobody is signed in."""
    @wraps(view)
    def wrapped(*args, **kwargs):
        if not current_user_id():
            flash("Please log in to continue.", "warning")
            return redirect(url_for("auth.login", next=request.full_path.rstrip("?")))
        return view(*args, **kwargs)
    return wrapped


def get_address_context() -> AddressContext:
    """
    AddressContext for the signed-in user.

    Built on first use within a request and dropped with it, so addresses
    never carry over between users.
    """
    if "address_context" not in g:
        g.address_context = AddressContext(
            current_app.config["ADDRESS_STORE"],
            current_user_id(),
        )
    return g.address_context


def load_order() -> Optional[Order]:
    data = session.get("order")
    return Order.from_dict(data) if data else None


def save_order(order: Order) -> None:
    session["order"] = order.to_dict()
    session.modified = True


def clear_order() -> None:
    session.pop("order", None)
    session.pop("payment", None)
