"""
Innoprint - Flask application factory.

create_app() wires the storefront together:

    Database ──┬── AddressStore      (per-request AddressContext wraps it)
               ├── AuthService
               ├── OrderService
               └── Catalog           seeded from CATALOG_FILE or built-in models
    OptionTables ──> PricingEngine
    PaymentGateway   provider orders, widget options, signature check

Everything shared lives in app.config under an upper-case key
(app.config["PRICING_ENGINE"], ...). Nothing user-specific is kept on
these objects; routes read the signed-in user from the session.

Run locally:
    flask --app app run --debug
"""

from __future__ import annotations

import atexit
import logging
import os
import weakref
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask, flash, redirect, url_for
from werkzeug.exceptions import RequestEntityTooLarge

from config import BASE_DIR
from logging_config import setup_logging, get_logger
from core.address_store import AddressStore
from core.database import Database
from modules.catalog import load_catalog
from modules.checkout import PaymentGateway
from modules.pricing import PricingEngine
from modules.print_options import load_option_tables
from services.auth_service import AuthService
from services.order_service import OrderService
from routes import register_blueprints
from routes.context import current_user


logger = get_logger(__name__)

# Databases opened by create_app(), closed once at interpreter exit.
# Weak references, so an app dropped by its caller is not kept alive.
_OPEN_DATABASES: "weakref.WeakSet[Database]" = weakref.WeakSet()


@atexit.register
def _close_databases() -> None:
    for database in list(_OPEN_DATABASES):
        database.cleanup()


def _open_database(app: Flask) -> Database:
    """Create tables and the store services; the app does not start without them."""
    database = Database(app.config["DATABASE_URL"])
    try:
        database.initialize()
    except Exception as e:
        logger.error(f"FATAL: Cannot open database - {e}")
        raise

    app.config["DATABASE"] = database
    app.config["ADDRESS_STORE"] = AddressStore(database)
    app.config["AUTH_SERVICE"] = AuthService(database)
    app.config["ORDER_SERVICE"] = OrderService(
        database, delivery_days=app.config["DELIVERY_DAYS"]
    )
    return database


def _build_storefront(app: Flask, database: Database) -> None:
    """Catalogue, option tables, pricing engine and payment gateway."""
    catalog = load_catalog(database, app.config.get("CATALOG_FILE"))
    option_tables = load_option_tables(app.config.get("PRICING_OPTIONS_FILE"))

    app.config["CATALOG"] = catalog
    app.config["OPTION_TABLES"] = option_tables
    app.config["PRICING_ENGINE"] = PricingEngine(option_tables)
    app.config["PAYMENT_GATEWAY"] = PaymentGateway(
        key_id=app.config["PAYMENT_KEY_ID"],
        key_secret=app.config["PAYMENT_KEY_SECRET"],
        store_name=app.config["STORE_NAME"],
        api_url=app.config["PAYMENT_API_URL"],
    )
    logger.info(f"Catalogue loaded with {len(catalog)} models")


def _register_template_helpers(app: Flask) -> None:
    @app.context_processor
    def inject_store():
        return {
            "current_user": current_user(),
            "store_name": app.config["STORE_NAME"],
            "currency": app.config["CURRENCY"],
        }

    @app.template_filter("money")
    def format_money(amount):
        """Whole-unit amount with the store currency (e.g. ₹1,200)."""
        currency = app.config["CURRENCY"]
        if currency == "INR":
            return f"₹{amount:,}"
        return f"{amount:,} {currency}"


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(RequestEntityTooLarge)
    def handle_file_too_large(e):
        max_mb = app.config["MAX_MODEL_FILE_SIZE"] // (1024 * 1024)
        flash(f"File size exceeds {max_mb}MB limit.", "error")
        return redirect(url_for("upload.upload"))

    @app.errorhandler(404)
    def handle_not_found(e):
        flash("Page not found.", "warning")
        return redirect(url_for("main.catalogue"))

    @app.errorhandler(500)
    def handle_server_error(e):
        logger.error(f"Unhandled error: {e}", exc_info=True)
        flash("Something went wrong. Please try again.", "error")
        return redirect(url_for("main.index"))


def create_app(config_object: str | object = "config.Config") -> Flask:
    """
    Build the Flask app.

    Args:
        config_object: Import path or class for app.config.from_object
            (tests pass a TestingConfig subclass)

    Raises:
        sqlalchemy.exc.SQLAlchemyError: If the database cannot be opened
    """
    # .env next to the code wins over the shell environment
    load_dotenv(BASE_DIR / ".env", override=True)

    app = Flask(__name__)
    app.config.from_object(config_object)

    log_level = logging.DEBUG if app.config.get("DEBUG") else logging.INFO
    innoprint_logger = setup_logging(
        log_level=log_level,
        enable_file_logging=app.config.get("ENVIRONMENT") == "production" and not app.testing,
    )
    app.logger.handlers = innoprint_logger.handlers
    app.logger.setLevel(log_level)

    logger.info(f"Starting Innoprint ({app.config.get('ENVIRONMENT')})")

    Path(app.config["UPLOAD_FOLDER"]).mkdir(parents=True, exist_ok=True)

    database = _open_database(app)
    _OPEN_DATABASES.add(database)
    _build_storefront(app, database)

    register_blueprints(app)
    _register_template_helpers(app)
    _register_error_handlers(app)

    return app


if __name__ == "__main__":
    create_app().run(debug=os.environ.get("FLASK_DEBUG", "1") == "1")
