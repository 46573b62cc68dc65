"""
Test fixtures for the typing test server.

Provides app, client, service and outbox fixtures backed by an in-memory
mongomock client, so no MongoDB server or SMTP server is needed.
"""

from __future__ import annotations

import mongomock
import pytest

from typespeed import create_app
from typespeed.config import TestingConfig
from typespeed.models import ProgressSubmission
from typespeed.services import get_account_service, get_progress_service


@pytest.fixture
def app(tmp_path):
    """Create app with an in-memory MongoDB for testing."""

    class Config(TestingConfig):
        LOG_DIR = str(tmp_path / "logs")
        JWT_SECRET = "test-jwt-secret-for-the-typing-server-suite"

    app = create_app(Config, mongo_client=mongomock.MongoClient())

    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def account_service(app):
    return get_account_service()


@pytest.fixture
def progress_service(app):
    return get_progress_service()


@pytest.fixture
def users(account_service):
    """Direct access to the users collection."""
    return account_service.users_collection


@pytest.fixture
def mail_outbox(account_service, monkeypatch):
    """Capture outgoing email instead of logging it."""
    outbox = []
    monkeypatch.setattr(account_service.mail_service, "_transport", outbox.append)
    return outbox


def registration(**overrides):
    data = {
        "username": "typist",
        "email": "typist@example.com",
        "password": "Secret123",
        "firstName": "Tina",
        "lastName": "Typist",
    }
    data.update(overrides)
    return data


def submission(user_id, **overrides):
    data = {
        "userId": str(user_id),
        "wpm": 50,
        "cpm": 250,
        "accuracy": 95,
        "textUsed": "the quick brown fox jumps over the lazy dog",
        "difficulty": "medium",
        "challengeType": "time",
        "category": "general",
    }
    data.update(overrides)
    return ProgressSubmission.from_payload(data)


@pytest.fixture
def user_id(account_service):
    """Id of a freshly registered test user."""
    account = account_service.register_user(registration())
    return str(account.id)
