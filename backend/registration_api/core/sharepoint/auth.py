"""MSAL token management for SharePoint/Graph API authentication.

Provides app-only (client credentials) token acquisition. The MSAL
application keeps an in-memory token cache, so re-acquiring a token for
every submission is cheap and idempotent.
"""

from typing import Any

import msal

from registration_api.config import Settings, get_settings
from registration_api.core.logging import get_logger
from registration_api.core.sharepoint.exceptions import SharePointAuthenticationError

logger = get_logger(__name__)

AUTHORITY_BASE_URL = "https://login.microsoftonline.com"
GRAPH_DEFAULT_SCOPE = ["https://graph.microsoft.com/.default"]


class SharePointAuthService:
    """MSAL-based authentication service for SharePoint/Graph API.

    Attributes:
        _msal_app: MSAL ConfidentialClientApplication instance, or None when
            credentials are incomplete
        _settings: Application settings
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize MSAL client from the SharePoint app registration settings.

        Args:
            settings: Settings to read credentials from (defaults to the
                cached application settings)
        """
        self._settings = settings or get_settings()
        self._msal_app: msal.ConfidentialClientApplication | None = None

        if self.is_configured:
            self._msal_app = self._create_msal_app()
            logger.info(
                "sharepoint_auth_initialized",
                tenant_id=self._settings.sharepoint_tenant_id[:8] + "...",
            )
        else:
            logger.warning(
                "sharepoint_auth_not_configured",
                reason="missing_required_settings",
            )

    def _create_msal_app(self) -> msal.ConfidentialClientApplication:
        """Create and configure MSAL ConfidentialClientApplication.

        Returns:
            Configured MSAL ConfidentialClientApplication
        """
        authority = f"{AUTHORITY_BASE_URL}/{self._settings.sharepoint_tenant_id}"
        client_id = self._settings.sharepoint_client_id

        logger.debug(
            "sharepoint_msal_app_creating",
            authority=authority,
            client_id=client_id[:8] + "...",
        )

        return msal.ConfidentialClientApplication(
            client_id=client_id,
            client_credential=self._settings.sharepoint_client_secret,
            authority=authority,
        )

    async def get_app_token(self) -> str:
        """Acquire access token using client credentials (app-only flow).

        MSAL serves a cached token when one is still valid and otherwise
        exchanges the client credentials against the tenant's token endpoint.

        Returns:
            Access token string

        Raises:
            SharePointAuthenticationError: If credentials are missing or
                token acquisition fails
        """
        if not self.is_configured or self._msal_app is None:
            logger.error(
                "sharepoint_app_token_failed",
                reason="not_configured",
            )
            raise SharePointAuthenticationError(
                "Missing SharePoint authentication credentials "
                "(tenant ID, client ID and client secret are required)"
            )

        logger.debug("sharepoint_app_token_acquiring")
        result = self._msal_app.acquire_token_for_client(scopes=GRAPH_DEFAULT_SCOPE)
        return self._handle_auth_result(result)

    def _handle_auth_result(self, result: dict[str, Any] | None) -> str:
        """Process MSAL authentication result.

        Args:
            result: MSAL result dictionary containing access_token or error

        Returns:
            Access token string

        Raises:
            SharePointAuthenticationError: If result is None, contains an
                error, or carries an empty token
        """
        if result is None:
            logger.error("sharepoint_app_token_failed", reason="null_result")
            raise SharePointAuthenticationError(
                "Failed to acquire token: no result from MSAL"
            )

        if "error" in result:
            error_code = result.get("error", "unknown")
            error_description = result.get("error_description", "No description")

            logger.error(
                "sharepoint_app_token_failed",
                error_code=error_code,
                error_description=error_description[:100],
            )
            raise SharePointAuthenticationError(
                f"Failed to acquire token: {error_code} - {error_description}"
            )

        access_token = result.get("access_token")
        if not access_token:
            logger.error(
                "sharepoint_app_token_failed",
                reason="missing_access_token",
            )
            raise SharePointAuthenticationError(
                "Failed to acquire token: access_token not in response"
            )

        logger.debug(
            "sharepoint_app_token_acquired",
            expires_in=result.get("expires_in"),
            token_type=result.get("token_type"),
        )
        return access_token

    @property
    def is_configured(self) -> bool:
        """Check if SharePoint authentication is properly configured."""
        return self._settings.is_sharepoint_configured


# Module-level singleton so the MSAL token cache is shared across requests
_auth_service: SharePointAuthService | None = None


def get_sharepoint_auth() -> SharePointAuthService:
    """Get the SharePoint authentication service singleton.

    Returns:
        SharePointAuthService instance
    """
    global _auth_service
    if _auth_service is None:
        _auth_service = SharePointAuthService()
    return _auth_service


def reset_sharepoint_auth() -> None:
    """Reset the SharePoint authentication service singleton.

    Used primarily for testing to ensure clean state between tests.
    """
    global _auth_service
    _auth_service = None
