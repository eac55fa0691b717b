"""Shared test fixtures."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from registration_api.config import Settings
from registration_api.core.rate_limit import limiter
from registration_api.core.sharepoint.auth import reset_sharepoint_auth
from registration_api.core.sharepoint.client import GraphClient

SITE_URL = "https://contoso.sharepoint.com/sites/Gauteng"
SITE_ID = "contoso.sharepoint.com,site-guid,web-guid"


@pytest.fixture(autouse=True)
def reset_global_state():
    """Reset rate limit counters and the auth singleton between tests."""
    limiter.reset()
    reset_sharepoint_auth()
    yield
    reset_sharepoint_auth()


@pytest.fixture
def make_settings():
    """Build Settings isolated from the environment's .env file."""

    def _make(**overrides) -> Settings:
        return Settings(_env_file=None, **overrides)

    return _make


@pytest.fixture
def configured_settings(make_settings, tmp_path):
    """Settings with credentials and a configured Gauteng site."""
    return make_settings(
        sharepoint_tenant_id="tenant-id-12345678",
        sharepoint_client_id="client-id-12345678",
        sharepoint_client_secret="client-secret",
        sharepoint_site_gauteng=SITE_URL,
        sharepoint_list_gauteng="HomeBuilderRegistrations",
        reference_store_path=str(tmp_path / "reference-counter.json"),
    )


@pytest.fixture
def graph_session():
    """Mock Graph session whose calls are configured per test."""
    session = MagicMock(spec=GraphClient)
    session.call = AsyncMock()
    session.put_content = AsyncMock()
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=None)
    return session
