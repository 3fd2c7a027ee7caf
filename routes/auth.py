"""
Authentication routes.

Email/password sign-up, log-in and log-out. The signed-in user id is kept in
the Flask session; routes read it through routes.context.
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

from core.exceptions import EmailAlreadyRegisteredError, InvalidCredentialsError
from logging_config import get_logger
from modules.uploads import sanitize_text


# Module logger
logger = get_logger(__name__)

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")

MAX_DISPLAY_NAME_LENGTH = 80


def _safe_next(target: str) -> str:
    """Only same-site paths are followed after login."""
    if target and target.startswith("/") and not target.startswith("//"):
        return target
    return url_for("main.index")


def _sign_in(user) -> None:
    session.pop("order", None)
    session.pop("payment", None)
    session["user_id"] = user.id
    session.modified = True


@auth_bp.route("/signup", methods=["GET", "POST"])
def signup():
    """
    Handle account creation.

    GET: Display sign-up form
    POST: Create the account, sign in, redirect to next
    """
    next_url = request.values.get("next", "")

    if request.method == "POST":
        email = request.form.get("email", "")
        password = request.form.get("password", "")
        display_name = sanitize_text(request.form.get("display_name"), MAX_DISPLAY_NAME_LENGTH)

        if password != request.form.get("confirm_password", password):
            flash("Passwords do not match.", "error")
            return render_template("signup.html", email=email, display_name=display_name, next=next_url), 400

        try:
            user = current_app.config["AUTH_SERVICE"].register(email, password, display_name)
        except EmailAlreadyRegisteredError:
            flash("An account with this email already exists. Please log in.", "error")
            return render_template("signup.html", email=email, display_name=display_name, next=next_url), 400
        except ValueError as e:
            flash(str(e), "error")
            return render_template("signup.html", email=email, display_name=display_name, next=next_url), 400

        _sign_in(user)
        flash(f"Welcome, {user.display_name or user.email}!", "success")
        return redirect(_safe_next(next_url))

    return render_template("signup.html", email="", display_name="", next=next_url)


@auth_bp.route("/login", methods=["GET", "POST"])
def login():
    """
    Handle log-in.

    GET: Display log-in form
    POST: Check credentials, sign in, redirect to next
    """
    next_url = request.values.get("next", "")

    if request.method == "POST":
        email = request.form.get("email", "")
        try:
            user = current_app.config["AUTH_SERVICE"].authenticate(
                email, request.form.get("password", "")
            )
        except InvalidCredentialsError:
            flash("Invalid email or password.", "error")
            return render_template("login.html", email=email, next=next_url), 401

        _sign_in(user)
        logger.info(f"User {user.id[:8]} logged in")
        return redirect(_safe_next(next_url))

    return render_template("login.html", email="", next=next_url)


@auth_bp.route("/logout", methods=["GET", "POST"])
def logout():
    """Sign out and drop everything tied to the session."""
    user_id = session.get("user_id")
    session.clear()
    if user_id:
        logger.info(f"User {user_id[:8]} logged out")
    flash("You have been logged out.", "success")
    return redirect(url_for("main.index"))
