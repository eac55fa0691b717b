"""Site resolution: SharePoint site URL to Graph site identifier."""

import httpx

from registration_api.core.exceptions import ConfigurationError
from registration_api.core.logging import get_logger
from registration_api.core.sharepoint.client import GraphClient
from registration_api.core.sharepoint.exceptions import GraphError

logger = get_logger(__name__)


def site_lookup_path(site_url: str) -> str:
    """Build the Graph lookup path for a site URL.

    Args:
        site_url: Absolute site URL, e.g. https://contoso.sharepoint.com/sites/Gauteng

    Returns:
        Graph path of the form /sites/{hostname}:{server-relative-path}

    Raises:
        ConfigurationError: If the URL has no hostname
    """
    try:
        url = httpx.URL(site_url)
    except httpx.InvalidURL as e:
        raise ConfigurationError(f"Invalid SharePoint site URL: {site_url}") from e

    if not url.host:
        raise ConfigurationError(f"Invalid SharePoint site URL: {site_url}")

    path = url.path.rstrip("/")
    if not path:
        return f"/sites/{url.host}"
    return f"/sites/{url.host}:{path}"


async def resolve_site_id(session: GraphClient, site_url: str) -> str:
    """Resolve a SharePoint site URL to its Graph site ID.

    Issues exactly one lookup; the result is not cached.

    Args:
        session: Authenticated Graph session
        site_url: Absolute SharePoint site URL

    Returns:
        Graph site identifier

    Raises:
        GraphError: If the site cannot be found or is inaccessible
    """
    logger.info("sharepoint_site_resolving", site_url=site_url)

    site = await session.call("GET", site_lookup_path(site_url))
    site_id = site.get("id")
    if not site_id:
        raise GraphError(200, f"Site lookup returned no id for {site_url}", body=site)

    logger.info("sharepoint_site_resolved", site_url=site_url, site_id=site_id)
    return site_id
