"""SharePoint integration via Microsoft Graph API.

Modules:
    - exceptions: SharePoint-specific exception classes
    - auth: MSAL token management (client credentials flow)
    - client: Authenticated Graph session
    - sites: Site URL to site ID resolution
    - folders: Idempotent folder creation
    - uploads: Attachment upload orchestration
    - lists: List lookup and item creation
"""

from registration_api.core.sharepoint.auth import (
    GRAPH_DEFAULT_SCOPE,
    SharePointAuthService,
    get_sharepoint_auth,
    reset_sharepoint_auth,
)
from registration_api.core.sharepoint.client import GraphClient, acquire_graph_session
from registration_api.core.sharepoint.exceptions import (
    GraphError,
    ListNotFoundError,
    SharePointAuthenticationError,
    SharePointError,
    SharePointNotFoundError,
    SharePointPermissionError,
    SharePointUploadError,
)

__all__ = [
    # Exceptions
    "SharePointError",
    "SharePointAuthenticationError",
    "GraphError",
    "SharePointNotFoundError",
    "SharePointPermissionError",
    "SharePointUploadError",
    "ListNotFoundError",
    # Auth
    "SharePointAuthService",
    "get_sharepoint_auth",
    "reset_sharepoint_auth",
    "GRAPH_DEFAULT_SCOPE",
    # Session
    "GraphClient",
    "acquire_graph_session",
]
