"""
Flask route blueprints for Innoprint.

This module contains all route handlers organized by functionality:
- main: Home and catalogue pages
- model: Model preview, download and uploaded file serving
- specifications: Print options and pricing
- delivery: Delivery method and shipping address
- payment: Checkout widget and payment callback
- confirmation: Paid order display
- upload: Quick-print and full model uploads
- auth: Sign-up, log-in, log-out
- profile: Address book and order history
- api: AJAX endpoints (live quote, addresses, health)

Each blueprint is registered with the Flask app in create_app().
"""

from .main import main_bp
from .model import model_bp
from .specifications import specifications_bp
from .delivery import delivery_bp
from .payment import payment_bp
from .confirmation import confirmation_bp
from .upload import upload_bp
from .auth import auth_bp
from .profile import profile_bp
from .api import api_bp

__all__ = [
    "main_bp",
    "model_bp",
    "specifications_bp",
    "delivery_bp",
    "payment_bp",
    "confirmation_bp",
    "upload_bp",
    "auth_bp",
    "profile_bp",
    "api_bp",
]


def register_blueprints(app):
    """
    Register all blueprints with the Flask app.

    Args:
        app: Flask application instance
    """
    app.register_blueprint(main_bp)
    app.register_blueprint(model_bp)
    app.register_blueprint(specifications_bp)
    app.register_blueprint(delivery_bp)
    app.register_blueprint(payment_bp)
    app.register_blueprint(confirmation_bp)
    app.register_blueprint(upload_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(profile_bp)
    app.register_blueprint(api_bp)
