"""Shared fixtures for the tandoor-mcp test suite."""
from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from tandoor_mcp.config import Config, Settings, SuggestionPolicy
from tandoor_mcp.models.auth import Credentials
from tandoor_mcp.session import Session


@pytest.fixture
def fake_settings() -> Settings:
    return Settings(
        base_url="http://tandoor.test",
        username="admin",
        password="admin",
        auth_timeout=10,
        request_timeout=30,
    )


@pytest.fixture
def fake_config(fake_settings) -> Config:
    return Config(settings=fake_settings, policy=SuggestionPolicy())


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(username="admin", password="admin")


@pytest.fixture
def session(credentials) -> Session:
    """A cold session: credentials configured, no token yet."""
    return Session(credentials=credentials)


@pytest.fixture
def mock_authenticator():
    """MagicMock standing in for TandoorAuthenticator."""
    auth = MagicMock()
    auth.authenticate.return_value = "tda_test_token_123456"
    auth.attempts = 0
    auth.failures = 0
    return auth


@pytest.fixture
def mock_client():
    """MagicMock standing in for TandoorClient."""
    client = MagicMock()
    client.get = MagicMock()
    client.post = MagicMock()
    client.patch = MagicMock()
    client.delete = MagicMock()
    client.close = MagicMock()
    return client
