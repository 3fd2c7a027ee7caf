"""
Configuration for Innoprint.

Values come from the environment (or a .env file next to the app).
Option tables and the catalogue can be swapped without code changes by
pointing PRICING_OPTIONS_FILE / CATALOG_FILE at JSON files.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env early so environment variables are available for the Config class
load_dotenv(override=True)

# Base directory (where this file lives)
BASE_DIR = Path(__file__).resolve().parent


class Config:
    """Default configuration for the Flask application."""

    # Flask settings
    SECRET_KEY = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key")
    UPLOAD_FOLDER = os.environ.get(
        "UPLOAD_FOLDER", str(BASE_DIR / "static" / "uploads")
    )
    MAX_CONTENT_LENGTH = 55 * 1024 * 1024  # request cap, slightly above the file cap
    SESSION_COOKIE_NAME = "innoprint_session"
    ENVIRONMENT = os.environ.get("FLASK_ENV", "development")
    DEBUG = os.environ.get("FLASK_DEBUG", "1") == "1"
    TESTING = False

    # Persistence
    DATABASE_URL = os.environ.get(
        "DATABASE_URL", f"sqlite:///{BASE_DIR / 'innoprint.db'}"
    )

    # Storefront
    STORE_NAME = os.environ.get("STORE_NAME", "Innoprint")
    CATALOG_FILE = os.environ.get("CATALOG_FILE", "")
    PRICING_OPTIONS_FILE = os.environ.get("PRICING_OPTIONS_FILE", "")

    # Uploads
    MAX_MODEL_FILE_SIZE = 50 * 1024 * 1024  # 50 MB
    QUICK_PRINT_BASE_PRICE = float(os.environ.get("QUICK_PRINT_BASE_PRICE", "800"))
    QUICK_PRINT_BASE_TIME = float(os.environ.get("QUICK_PRINT_BASE_TIME", "8"))

    # ==========================================================================
    # Checkout
    # ==========================================================================
    # Totals shown on the payment and confirmation pages:
    #   tax      = round(subtotal × TAX_RATE)
    #   total    = subtotal + SHIPPING_FLAT_FEE + tax
    # The payment widget receives total × 100 (minor units).
    # ==========================================================================
    CURRENCY = os.environ.get("CURRENCY", "INR")
    SHIPPING_FLAT_FEE = int(os.environ.get("SHIPPING_FLAT_FEE", "100"))
    TAX_RATE = float(os.environ.get("TAX_RATE", "0.18"))
    DELIVERY_DAYS = int(os.environ.get("DELIVERY_DAYS", "7"))
    DEFAULT_COUNTRY = os.environ.get("DEFAULT_COUNTRY", "India")

    # Payment widget credentials (test keys by default)
    PAYMENT_KEY_ID = os.environ.get("PAYMENT_KEY_ID", "rzp_test_key")
    PAYMENT_KEY_SECRET = os.environ.get("PAYMENT_KEY_SECRET", "rzp_test_secret")
    PAYMENT_API_URL = os.environ.get("PAYMENT_API_URL", "https://api.razorpay.com/v1")


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    TESTING = False
    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    PERMANENT_SESSION_LIFETIME = 3600  # 1 hour


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    TESTING = False


class TestingConfig(Config):
    """Testing configuration."""
    DEBUG = False
    TESTING = True
    DATABASE_URL = "sqlite://"
    SECRET_KEY = "test-secret-key"
    PAYMENT_KEY_SECRET = "test-payment-secret"
