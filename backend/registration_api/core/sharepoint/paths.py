"""Drive path helpers for Graph `root:/...:` addressing."""

from urllib.parse import quote


def clean_path(path: str) -> str:
    """Strip leading and trailing slashes from a drive-relative path."""
    return path.strip("/")


def join_path(*parts: str) -> str:
    """Join drive-relative path segments, ignoring empty ones."""
    return "/".join(clean_path(p) for p in parts if clean_path(p))


def drive_item_path(site_id: str, path: str, suffix: str = "") -> str:
    """Build a Graph path addressing a drive item by its path.

    Args:
        site_id: Graph site identifier
        path: Path relative to the document library root
        suffix: Optional trailing segment such as ":/children" or ":/content"

    Returns:
        API path, e.g. /sites/{id}/drive/root:/D1%20Documents/acme:/children
    """
    path = clean_path(path)
    if not path:
        # The library root cannot be addressed with the colon syntax
        return f"/sites/{site_id}/drive/root{suffix.lstrip(':')}"
    return f"/sites/{site_id}/drive/root:/{quote(path, safe='/')}{suffix}"
