"""Shared fixtures: in-memory database, address store, Flask app and client."""

import itertools
from unittest.mock import MagicMock

import pytest

from app import create_app
from config import TestingConfig
from core.address_store import AddressStore
from core.database import Database
from modules.checkout import PaymentGateway


@pytest.fixture
def database():
    """Fresh in-memory SQLite database with all tables."""
    db = Database("sqlite://")
    db.initialize()
    yield db
    db.cleanup()


@pytest.fixture
def address_store(database):
    return AddressStore(database)


@pytest.fixture
def provider_http():
    """
    Payment provider API stand-in.

    Every POST /orders succeeds with a new order_TEST###### id.
    """
    counter = itertools.count(1)

    def create(url, json=None, timeout=None):
        response = MagicMock(ok=True, status_code=200)
        response.json.return_value = {
            "id": f"order_TEST{next(counter):06d}",
            "amount": json["amount"],
            "receipt": json["receipt"],
            "status": "created",
        }
        return response

    http = MagicMock()
    http.post.side_effect = create
    return http


@pytest.fixture
def app(tmp_path, provider_http):
    """Application configured for tests, with uploads under tmp_path."""

    class Config(TestingConfig):
        UPLOAD_FOLDER = str(tmp_path / "uploads")

    app = create_app(Config)
    app.config["PAYMENT_GATEWAY"] = PaymentGateway(
        key_id=app.config["PAYMENT_KEY_ID"],
        key_secret=app.config["PAYMENT_KEY_SECRET"],
        store_name=app.config["STORE_NAME"],
        http=provider_http,
    )
    yield app
    app.config["DATABASE"].cleanup()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def signed_in_client(app, client):
    """Test client with a registered, logged-in user."""
    user = app.config["AUTH_SERVICE"].register("asha@example.com", "secret123", "Asha")
    with client.session_transaction() as sess:
        sess["user_id"] = user.id
    client.user = user
    return client
