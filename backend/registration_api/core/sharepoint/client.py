"""Microsoft Graph API session for SharePoint operations.

A GraphClient is an authenticated handle bound to one bearer token. It is
created per logical operation (one submission, one health probe) and closed
when that operation ends. Requests are not retried: a non-2xx response is
mapped to a typed GraphError and propagated to the caller.
"""

from types import TracebackType
from typing import Any

import httpx

from registration_api.config import Settings, get_settings
from registration_api.core.logging import get_logger
from registration_api.core.sharepoint.auth import (
    SharePointAuthService,
    get_sharepoint_auth,
)
from registration_api.core.sharepoint.exceptions import (
    GraphError,
    SharePointNotFoundError,
    SharePointPermissionError,
)

logger = get_logger(__name__)


class GraphClient:
    """Authenticated Microsoft Graph API session.

    Attributes:
        GRAPH_BASE_URL: Base URL for Microsoft Graph API v1.0
    """

    GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"

    def __init__(self, token: str, timeout: float = 60.0) -> None:
        """Initialize Graph session with a bearer token.

        Args:
            token: Access token for the Graph API
            timeout: Per-request timeout in seconds
        """
        self._token = token
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client bound to the session token.

        Returns:
            Configured httpx.AsyncClient with authorization header
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.GRAPH_BASE_URL,
                headers={
                    "Authorization": f"Bearer {self._token}",
                    "Accept": "application/json",
                },
                timeout=self._timeout,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.debug("graph_client_closed")

    async def __aenter__(self) -> "GraphClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        """Extract the Graph error message from a failed response."""
        try:
            payload = response.json()
        except ValueError:
            return response.text or response.reason_phrase
        if isinstance(payload, dict):
            error = payload.get("error")
            if isinstance(error, dict) and error.get("message"):
                return str(error["message"])
        return response.reason_phrase or response.text

    async def _request(
        self,
        method: str,
        path: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Make HTTP request and map failures to typed errors.

        Args:
            method: HTTP method (GET, POST, PUT)
            path: API path relative to GRAPH_BASE_URL (e.g., /sites/{id}/lists)
            **kwargs: Additional arguments for httpx request

        Returns:
            httpx.Response on success (2xx)

        Raises:
            SharePointPermissionError: On HTTP 403
            SharePointNotFoundError: On HTTP 404
            GraphError: On any other non-2xx status or transport failure
        """
        client = self._get_client()

        logger.debug("graph_request", method=method, path=path)

        try:
            response = await client.request(method, path, **kwargs)
        except httpx.RequestError as e:
            logger.error(
                "graph_connection_error",
                method=method,
                path=path,
                error=str(e),
            )
            raise GraphError(0, f"Connection error: {e}") from e

        if response.status_code < 400:
            logger.debug(
                "graph_request_success",
                method=method,
                path=path,
                status_code=response.status_code,
            )
            return response

        detail = self._error_detail(response)

        if response.status_code == 404:
            logger.info("graph_not_found", path=path)
            raise SharePointNotFoundError(detail, body=response.text)

        if response.status_code == 403:
            logger.error(
                "graph_permission_error",
                path=path,
                status_code=response.status_code,
            )
            raise SharePointPermissionError(detail, body=response.text)

        logger.error(
            "graph_request_error",
            method=method,
            path=path,
            status_code=response.status_code,
            response=response.text[:500],
        )
        raise GraphError(response.status_code, detail, body=response.text)

    @staticmethod
    def _json(response: httpx.Response) -> dict[str, Any]:
        """Parse a successful response body.

        Raises:
            GraphError: If a non-empty body is not JSON (e.g. a gateway page)
        """
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            logger.error(
                "graph_invalid_json",
                status_code=response.status_code,
                response=response.text[:500],
            )
            raise GraphError(
                response.status_code, "Invalid JSON response", body=response.text
            ) from e

    async def call(
        self,
        method: str,
        path: str,
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Perform a JSON request against the Graph API.

        Args:
            method: HTTP method
            path: API path relative to GRAPH_BASE_URL
            body: Optional JSON request body

        Returns:
            Parsed JSON response body ({} for empty responses)

        Raises:
            GraphError: If the API returns a non-2xx status code
        """
        if body is None:
            response = await self._request(method, path)
        else:
            response = await self._request(method, path, json=body)
        return self._json(response)

    async def put_content(
        self,
        path: str,
        content: bytes,
        content_type: str = "application/octet-stream",
    ) -> dict[str, Any]:
        """Upload raw bytes with a PUT request.

        Args:
            path: API path relative to GRAPH_BASE_URL
            content: Raw bytes to upload
            content_type: MIME type for the Content-Type header

        Returns:
            Parsed JSON response body (drive item metadata)

        Raises:
            GraphError: If the API returns a non-2xx status code
        """
        response = await self._request(
            "PUT",
            path,
            content=content,
            headers={"Content-Type": content_type},
        )
        return self._json(response)


async def acquire_graph_session(
    auth_service: SharePointAuthService | None = None,
    settings: Settings | None = None,
) -> GraphClient:
    """Acquire a fresh authenticated Graph session.

    Args:
        auth_service: Token source (defaults to the process singleton)
        settings: Settings supplying the request timeout

    Returns:
        GraphClient bound to a newly acquired token

    Raises:
        SharePointAuthenticationError: If no token can be acquired
    """
    auth_service = auth_service or get_sharepoint_auth()
    settings = settings or get_settings()
    token = await auth_service.get_app_token()
    return GraphClient(token, timeout=settings.graph_timeout_seconds)
