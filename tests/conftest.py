"""Shared pytest fixtures and configuration.

Fixture Categories:
1. Credentials: app_id, app_secret, verify_token, credential_store
2. Callbacks: deauth_callback, webhook_callback (recording AsyncMocks)
3. Dispatchers: deauth_dispatcher, webhook_dispatcher
4. Sample requests: signed_request_token, instagram_body, permissions_body
5. Infrastructure: test_settings, test_client, mock_logfire
"""

import json
import os
from contextlib import contextmanager
from unittest.mock import AsyncMock, MagicMock, Mock

import pytest

# Suppress "not configured" warnings; tests never ship logs anywhere
os.environ.setdefault("LOGFIRE_IGNORE_NO_CONFIG", "1")

from fb_callbacks.config import Settings
from fb_callbacks.services.dispatcher import DeauthDispatcher, WebhookDispatcher
from fb_callbacks.services.secret_resolver import InMemoryCredentialStore

# Signed request of {"user_id":"0","algorithm":"HMAC-SHA256","issued_at":1624244156}
# with secret "key"
SAMPLE_SIGNED_REQUEST = (
    "Mf_s6nTb38UYqioBmPqu0Ewm9souPZB9I2fIGwV729U."
    "eyJ1c2VyX2lkIjoiMCIsImFsZ29yaXRobSI6IkhNQUMtU0hBMjU2IiwiaXNzdWVkX2F0IjoxNjI0MjQ0MTU2fQ"
)

SAMPLE_HANDSHAKE_QUERY = (
    "hub.mode=subscribe&hub.challenge=1158201444&hub.verify_token=meatyhamhock"
)


# =============================================================================
# Credentials
# =============================================================================


@pytest.fixture
def app_id() -> int:
    return 202000000000000


@pytest.fixture
def app_secret() -> str:
    return "key"


@pytest.fixture
def verify_token() -> str:
    return "meatyhamhock"


@pytest.fixture
def credential_store(app_id, app_secret, verify_token):
    """In-memory store knowing exactly one app."""
    store = InMemoryCredentialStore()
    store.register(app_id, app_secret, verify_token=verify_token)
    return store


@pytest.fixture
def failing_resolver():
    """Resolver whose backing store is down."""
    resolver = MagicMock()
    resolver.get_app_secret = AsyncMock(side_effect=ConnectionError("store offline"))
    resolver.get_verify_token = AsyncMock(side_effect=ConnectionError("store offline"))
    return resolver


# =============================================================================
# Callbacks and Dispatchers
# =============================================================================


@pytest.fixture
def deauth_callback():
    """Recording deauthorization callback that succeeds."""
    return AsyncMock(return_value=None)


@pytest.fixture
def webhook_callback():
    """Recording webhook callback that succeeds."""
    return AsyncMock(return_value=None)


@pytest.fixture
def deauth_dispatcher(credential_store, deauth_callback):
    return DeauthDispatcher(credential_store, deauth_callback)


@pytest.fixture
def webhook_dispatcher(credential_store, webhook_callback):
    return WebhookDispatcher(credential_store, webhook_callback)


# =============================================================================
# Sample Requests
# =============================================================================


@pytest.fixture
def signed_request_token() -> str:
    return SAMPLE_SIGNED_REQUEST


@pytest.fixture
def instagram_event() -> dict:
    """Story insights event as sent by the dashboard "Test" button."""
    return {
        "object": "instagram",
        "entry": [
            {
                "id": "0",
                "time": 1624005617,
                "changes": [
                    {
                        "field": "story_insights",
                        "value": {
                            "media_id": "17887498072083520",
                            "impressions": 444,
                            "reach": 44,
                            "taps_forward": 4,
                            "taps_back": 3,
                            "exits": 3,
                            "replies": 0,
                        },
                    }
                ],
            }
        ],
    }


@pytest.fixture
def permissions_event() -> dict:
    return {
        "object": "permissions",
        "entry": [
            {
                "id": "0",
                "uid": "0",
                "time": 1624610156,
                "changes": [
                    {
                        "field": "instagram_basic",
                        "value": {
                            "verb": "granted",
                            "target_ids": ["123123123123123", "321321321321321"],
                        },
                    }
                ],
            }
        ],
    }


@pytest.fixture
def instagram_body(instagram_event) -> bytes:
    return json.dumps(instagram_event).encode("utf-8")


@pytest.fixture
def permissions_body(permissions_event) -> bytes:
    return json.dumps(permissions_event).encode("utf-8")


# =============================================================================
# Infrastructure
# =============================================================================


@pytest.fixture
def test_settings(app_id, app_secret, verify_token) -> Settings:
    """Settings independent of the developer's environment and .env files."""
    return Settings(
        _env_file=None,
        facebook_app_id=app_id,
        facebook_app_secret=app_secret,
        facebook_verify_token=verify_token,
        deauth_path_prefix="fb_login_deauth_callback",
        webhook_path_prefix="fb_webhooks",
        auth_failure_status=500,
        env="local",
        logfire_token=None,
        sentry_dsn=None,
    )


@pytest.fixture
def test_client(test_settings, credential_store, deauth_callback, webhook_callback, mock_logfire):
    """FastAPI TestClient for E2E tests, wired to the recording callbacks."""
    from fastapi.testclient import TestClient

    from fb_callbacks.main import create_app

    app = create_app(
        settings=test_settings,
        resolver=credential_store,
        deauth_callback=deauth_callback,
        webhook_callback=webhook_callback,
    )
    return TestClient(app)


@pytest.fixture
def mock_logfire(monkeypatch):
    """
    Mock Logfire for testing without actual logging.

    Patches the module-level `logfire` imports of our code and returns the
    mock so tests can assert on log calls.
    """

    @contextmanager
    def mock_span(*args, **kwargs):
        yield MagicMock()

    mock_logfire_module = MagicMock()
    mock_logfire_module.info = Mock()
    mock_logfire_module.warning = Mock()
    mock_logfire_module.error = Mock()
    mock_logfire_module.span = mock_span
    mock_logfire_module.configure = Mock()
    mock_logfire_module.instrument_fastapi = Mock()
    mock_logfire_module.instrument_pydantic = Mock()

    monkeypatch.setattr("fb_callbacks.services.dispatcher.logfire", mock_logfire_module)
    monkeypatch.setattr("fb_callbacks.main.logfire", mock_logfire_module)
    monkeypatch.setattr(
        "fb_callbacks.middleware.correlation_id.logfire", mock_logfire_module
    )
    monkeypatch.setattr("fb_callbacks.logging_config.logfire", mock_logfire_module)

    return mock_logfire_module
