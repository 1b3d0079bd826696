"""
Test bootstrap:
- Make tests/helpers importable
- Keep CAKE_* environment variables from leaking into tests
- Shared client fixtures that never touch the network
"""
import os
import sys
import pathlib
from unittest.mock import Mock

import pytest

TESTS_DIR = pathlib.Path(__file__).parent
if str(TESTS_DIR) not in sys.path:
    sys.path.insert(0, str(TESTS_DIR))

from soapy_cake import Admin, Client, SessionCache, TimeConverter


@pytest.fixture(autouse=True)
def _clean_cake_env(monkeypatch):
    """Remove CAKE_* variables so only explicit test settings apply."""
    for key in list(os.environ):
        if key.startswith("CAKE_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def berlin():
    """Time converter for Europe/Berlin."""
    return TimeConverter("Europe/Berlin")


@pytest.fixture
def session_cache():
    """A private session cache, closed after the test."""
    cache = SessionCache()
    yield cache
    cache.close()


@pytest.fixture
def client_opts():
    return {
        "domain": "cake.example.com",
        "api_key": "secret-key",
        "time_zone": "Europe/Berlin",
    }


@pytest.fixture
def sleep():
    """Records retry delays instead of sleeping."""
    return Mock()


@pytest.fixture
def make_client(client_opts, session_cache, sleep):
    """Factory for clients with a private session cache and no real sleeping."""
    def factory(**overrides):
        client = Client(session_cache=session_cache, **{**client_opts, **overrides})
        client.retry_policy.sleep = sleep
        return client
    return factory


@pytest.fixture
def client(make_client):
    return make_client()


@pytest.fixture
def admin(client):
    return Admin(client=client)
