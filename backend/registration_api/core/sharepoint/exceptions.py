"""SharePoint-specific exception classes.

These exceptions map Microsoft Graph API responses onto typed errors so that
callers branch on the class ("not found") rather than on a numeric code.
"""

from typing import Any

from registration_api.core.exceptions import ExternalServiceError, NotFoundError


class SharePointError(ExternalServiceError):
    """Base exception for SharePoint operations.

    All SharePoint-related errors inherit from this class to allow
    catching all SharePoint errors with a single except clause.
    """

    pass


class SharePointAuthenticationError(SharePointError):
    """Raised when SharePoint authentication fails.

    This can occur when:
    - Tenant, client ID or client secret are not configured
    - The token endpoint rejects the client credentials
    - The token response carries no access token
    """

    pass


class GraphError(SharePointError):
    """Raised when the Graph API returns a non-2xx response.

    Attributes:
        status_code: HTTP status code (0 for transport failures)
        message: Graph error message, or the HTTP reason
        body: Raw response body, if any
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        body: Any = None,
    ):
        super().__init__(f"Graph API error {status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.body = body


class SharePointNotFoundError(GraphError):
    """Raised when a requested site, file or folder does not exist.

    This maps to HTTP 404 responses from Graph API.
    """

    def __init__(self, message: str, body: Any = None):
        super().__init__(404, message, body)


class SharePointPermissionError(GraphError):
    """Raised when the app lacks permission for the requested operation.

    This maps to HTTP 403 responses from Graph API.
    Distinct from SharePointAuthenticationError which is about credential validity.
    """

    def __init__(self, message: str, body: Any = None):
        super().__init__(403, message, body)


class SharePointUploadError(SharePointError):
    """Raised when an upload succeeded on the wire but yielded no usable URL."""

    def __init__(self, message: str, filename: str | None = None):
        super().__init__(message)
        self.filename = filename


class ListNotFoundError(NotFoundError):
    """Raised when no list on the site carries the requested internal name.

    Attributes:
        list_name: Internal name that was looked up
        available: Internal names of every list found on the site
    """

    def __init__(self, list_name: str, available: list[str]):
        names = ", ".join(f'"{name}"' for name in available)
        super().__init__(
            f'List "{list_name}" not found on site. Available lists: {names}'
        )
        self.list_name = list_name
        self.available = available
