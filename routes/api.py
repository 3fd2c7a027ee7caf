"""
API routes (AJAX endpoints).

Handles:
- /api/quote - Live price and print time for the specifications form
- /api/options - Option tables for client-side rendering
- /api/addresses - Signed-in user's saved addresses
- /health - Health check endpoint
"""

from flask import (
    Blueprint,
    current_app,
    request,
)

from core.exceptions import ModelNotFoundError, UnknownOptionError
from logging_config import get_logger
from routes.context import current_user_id, get_address_context


# Module logger
logger = get_logger(__name__)

api_bp = Blueprint("api", __name__)


@api_bp.route("/api/quote", methods=["GET", "POST"])
def quote():
    """
    Price a set of print choices.

    Accepts JSON (POST) or query args (GET) with model_id plus material,
    quality, size, color, quantity, infill and supports.

    Returns:
        {"price": int, "time": int, "currency": str} on success,
        {"error": str} with 400/404 otherwise
    """
    data = request.get_json(silent=True) if request.method == "POST" else None
    if data is None:
        data = request.values.to_dict()

    model_id = str(data.get("model_id", ""))
    try:
        model = current_app.config["CATALOG"].get(model_id, viewer_id=current_user_id())
    except ModelNotFoundError as e:
        return {"error": e.message}, 404

    try:
        result = current_app.config["PRICING_ENGINE"].quote(model, data)
    except UnknownOptionError as e:
        logger.debug(f"Quote rejected: {e}")
        return {"error": e.message}, 400

    response = result.to_dict()
    response["currency"] = current_app.config["CURRENCY"]
    return response


@api_bp.route("/api/options", methods=["GET"])
def options():
    """Materials, colours, qualities, sizes, defaults and limits."""
    return current_app.config["OPTION_TABLES"].to_dict()


@api_bp.route("/api/addresses", methods=["GET"])
def addresses():
    """
    The signed-in user's saved addresses.

    Returns 401 when nobody is signed in.
    """
    if not current_user_id():
        return {"error": "Authentication required"}, 401

    address_context = get_address_context()
    body = {
        "addresses": [a.to_dict() for a in address_context.addresses],
        "status": address_context.status.value,
    }
    if address_context.error:
        body["error"] = address_context.error
    return body


@api_bp.route("/health", methods=["GET"])
def health():
    """
    Health check endpoint.

    Returns application health status for monitoring.
    """
    health_status = {
        "status": "ok",
        "environment": current_app.config.get("ENVIRONMENT", "unknown"),
        "checks": {}
    }

    # Check database
    database = current_app.config.get("DATABASE")
    if database and database.is_initialized:
        health_status["checks"]["database"] = "initialized"
    else:
        health_status["checks"]["database"] = "not_initialized"
        health_status["status"] = "degraded"

    # Check catalogue
    catalog = current_app.config.get("CATALOG")
    if catalog is not None and len(catalog) > 0:
        health_status["checks"]["catalog"] = f"{len(catalog)} models"
    else:
        health_status["checks"]["catalog"] = "empty"
        health_status["status"] = "degraded"

    status_code = 200 if health_status["status"] == "ok" else 503
    return health_status, status_code
