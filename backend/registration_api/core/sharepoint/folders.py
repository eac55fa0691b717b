"""Folder management under a site's default document library."""

from registration_api.core.logging import get_logger
from registration_api.core.sharepoint.client import GraphClient
from registration_api.core.sharepoint.exceptions import SharePointNotFoundError
from registration_api.core.sharepoint.paths import clean_path, drive_item_path, join_path

logger = get_logger(__name__)


async def ensure_folder(
    session: GraphClient,
    site_id: str,
    parent_path: str,
    folder_name: str,
) -> str:
    """Ensure a folder exists below parent_path, creating it if needed.

    Probe and create are two separate calls. A concurrent creator racing us
    between them is absorbed by the server-side "rename" conflict behavior,
    which yields a uniquely named sibling instead of an error.

    Args:
        session: Authenticated Graph session
        site_id: Graph site identifier
        parent_path: Parent path relative to the library root
        folder_name: Name of the folder to ensure

    Returns:
        Folder path relative to the library root. When the server renamed
        the new folder, the returned path carries the assigned name.

    Raises:
        GraphError: If the probe fails with anything other than 404, or if
            creation fails
    """
    parent = clean_path(parent_path)
    folder_path = join_path(parent, folder_name)

    try:
        await session.call("GET", drive_item_path(site_id, folder_path))
        logger.debug("graph_folder_exists", path=folder_path)
        return folder_path
    except SharePointNotFoundError:
        logger.info("graph_folder_creating", path=folder_path)

    created = await session.call(
        "POST",
        drive_item_path(site_id, parent, ":/children"),
        {
            "name": folder_name,
            "folder": {},
            "@microsoft.graph.conflictBehavior": "rename",
        },
    )
    created_path = join_path(parent, created.get("name") or folder_name)

    logger.info(
        "graph_folder_created",
        path=created_path,
        folder_id=created.get("id"),
        renamed=created_path != folder_path,
    )
    return created_path
