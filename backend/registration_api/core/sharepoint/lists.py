"""SharePoint list lookup and item creation."""

from typing import Any

from registration_api.core.logging import get_logger
from registration_api.core.sharepoint.client import GraphClient
from registration_api.core.sharepoint.exceptions import ListNotFoundError

logger = get_logger(__name__)


async def fetch_lists(session: GraphClient, site_id: str) -> list[dict[str, Any]]:
    """Fetch every list on a site, following @odata.nextLink pages."""
    lists: list[dict[str, Any]] = []
    path: str | None = f"/sites/{site_id}/lists"
    while path:
        page = await session.call("GET", path)
        lists.extend(page.get("value", []))
        path = page.get("@odata.nextLink")
    return lists


async def find_list(
    session: GraphClient,
    site_id: str,
    internal_name: str,
) -> dict[str, Any]:
    """Find a list by exact (case-sensitive) internal name.

    Raises:
        ListNotFoundError: With every available internal name, if no list matches
    """
    lists = await fetch_lists(session, site_id)

    for item in lists:
        logger.debug(
            "sharepoint_list_available",
            display_name=item.get("displayName"),
            name=item.get("name"),
        )

    for item in lists:
        if item.get("name") == internal_name:
            logger.info(
                "sharepoint_list_found",
                display_name=item.get("displayName"),
                list_id=item.get("id"),
            )
            return item

    available = [str(item.get("name")) for item in lists]
    logger.error(
        "sharepoint_list_not_found",
        list_name=internal_name,
        available=available,
    )
    raise ListNotFoundError(internal_name, available)


async def write_list_item(
    session: GraphClient,
    site_id: str,
    list_internal_name: str,
    fields: dict[str, Any],
) -> dict[str, Any]:
    """Create one list item holding the given column values.

    Args:
        session: Authenticated Graph session
        site_id: Graph site identifier
        list_internal_name: Internal name of the target list
        fields: Column name to value mapping, sent as-is

    Returns:
        Created item metadata; "id" identifies the new item

    Raises:
        ListNotFoundError: If the list does not exist on the site
        GraphError: If item creation fails
    """
    target = await find_list(session, site_id, list_internal_name)

    created = await session.call(
        "POST",
        f"/sites/{site_id}/lists/{target['id']}/items",
        {"fields": fields},
    )

    logger.info(
        "sharepoint_list_item_created",
        list_id=target["id"],
        item_id=created.get("id"),
    )
    return created
