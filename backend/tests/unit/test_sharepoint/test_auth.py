"""Tests for SharePoint authentication service."""

from unittest.mock import MagicMock, patch

import pytest

from registration_api.core.sharepoint.auth import (
    GRAPH_DEFAULT_SCOPE,
    SharePointAuthService,
    get_sharepoint_auth,
    reset_sharepoint_auth,
)
from registration_api.core.sharepoint.exceptions import SharePointAuthenticationError


@pytest.fixture
def mock_settings():
    """Settings carrying a complete app registration."""
    settings = MagicMock()
    settings.is_sharepoint_configured = True
    settings.sharepoint_client_id = "test-client-id-12345678"
    settings.sharepoint_client_secret = "test-client-secret"
    settings.sharepoint_tenant_id = "test-tenant-id-12345678"
    return settings


class TestSharePointAuthServiceInit:
    """Tests for SharePointAuthService initialization."""

    def test_init_creates_msal_app_when_configured(self, mock_settings):
        """Initialization creates MSAL ConfidentialClientApplication when configured."""
        with patch("msal.ConfidentialClientApplication") as mock_msal_class:
            service = SharePointAuthService(mock_settings)

            mock_msal_class.assert_called_once_with(
                client_id="test-client-id-12345678",
                client_credential="test-client-secret",
                authority="https://login.microsoftonline.com/test-tenant-id-12345678",
            )
            assert service._msal_app is not None

    def test_init_with_missing_config_does_not_create_msal_app(self):
        """Missing config prevents MSAL app creation."""
        mock_settings = MagicMock()
        mock_settings.is_sharepoint_configured = False

        with patch("msal.ConfidentialClientApplication") as mock_msal_class:
            service = SharePointAuthService(mock_settings)

        mock_msal_class.assert_not_called()
        assert service._msal_app is None
        assert service.is_configured is False

    def test_init_reads_cached_settings_by_default(self, mock_settings):
        with (
            patch(
                "registration_api.core.sharepoint.auth.get_settings",
                return_value=mock_settings,
            ),
            patch("msal.ConfidentialClientApplication"),
        ):
            service = SharePointAuthService()

        assert service.is_configured is True


class TestGetAppToken:
    """Tests for client-credentials token acquisition."""

    @pytest.mark.asyncio
    async def test_returns_access_token(self, mock_settings):
        with patch("msal.ConfidentialClientApplication") as mock_msal_class:
            mock_app = mock_msal_class.return_value
            mock_app.acquire_token_for_client.return_value = {
                "access_token": "app-token",
                "expires_in": 3600,
            }
            service = SharePointAuthService(mock_settings)

            token = await service.get_app_token()

        assert token == "app-token"
        mock_app.acquire_token_for_client.assert_called_once_with(
            scopes=GRAPH_DEFAULT_SCOPE
        )

    @pytest.mark.asyncio
    async def test_not_configured_raises(self):
        """Missing credentials fail before any network exchange."""
        mock_settings = MagicMock()
        mock_settings.is_sharepoint_configured = False
        service = SharePointAuthService(mock_settings)

        with pytest.raises(
            SharePointAuthenticationError,
            match="Missing SharePoint authentication credentials",
        ):
            await service.get_app_token()

    @pytest.mark.asyncio
    async def test_error_result_raises(self, mock_settings):
        """Rejected credentials surface the MSAL error code."""
        with patch("msal.ConfidentialClientApplication") as mock_msal_class:
            mock_msal_class.return_value.acquire_token_for_client.return_value = {
                "error": "invalid_client",
                "error_description": "AADSTS7000215: Invalid client secret provided.",
            }
            service = SharePointAuthService(mock_settings)

            with pytest.raises(SharePointAuthenticationError, match="invalid_client"):
                await service.get_app_token()

    @pytest.mark.asyncio
    async def test_none_result_raises(self, mock_settings):
        with patch("msal.ConfidentialClientApplication") as mock_msal_class:
            mock_msal_class.return_value.acquire_token_for_client.return_value = None
            service = SharePointAuthService(mock_settings)

            with pytest.raises(SharePointAuthenticationError, match="no result"):
                await service.get_app_token()

    @pytest.mark.asyncio
    async def test_missing_access_token_raises(self, mock_settings):
        with patch("msal.ConfidentialClientApplication") as mock_msal_class:
            mock_msal_class.return_value.acquire_token_for_client.return_value = {
                "token_type": "Bearer"
            }
            service = SharePointAuthService(mock_settings)

            with pytest.raises(SharePointAuthenticationError, match="access_token"):
                await service.get_app_token()


class TestAuthSingleton:
    """Tests for the process-wide auth service."""

    def test_get_sharepoint_auth_returns_same_instance(self, mock_settings):
        with (
            patch(
                "registration_api.core.sharepoint.auth.get_settings",
                return_value=mock_settings,
            ),
            patch("msal.ConfidentialClientApplication"),
        ):
            first = get_sharepoint_auth()
            second = get_sharepoint_auth()

        assert first is second

    def test_reset_creates_new_instance(self, mock_settings):
        with (
            patch(
                "registration_api.core.sharepoint.auth.get_settings",
                return_value=mock_settings,
            ),
            patch("msal.ConfidentialClientApplication"),
        ):
            first = get_sharepoint_auth()
            reset_sharepoint_auth()
            second = get_sharepoint_auth()

        assert first is not second
