"""Attachment upload orchestration for registration submissions.

Uploads are sequential and isolated per file: one failed upload is logged and
skipped, the remaining files still go up. If the per-builder folder cannot be
ensured, every file is sent to a fixed fallback folder instead.
"""

import re
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from urllib.parse import quote

from registration_api.core.exceptions import ValidationError
from registration_api.core.logging import get_logger
from registration_api.core.sharepoint.client import GraphClient
from registration_api.core.sharepoint.exceptions import (
    SharePointError,
    SharePointUploadError,
)
from registration_api.core.sharepoint.folders import ensure_folder
from registration_api.core.sharepoint.paths import drive_item_path, join_path

logger = get_logger(__name__)

DEFAULT_BUILDER_NAME = "unknown"

_UNSAFE_NAME_CHARS = re.compile(r"[^a-z0-9]", re.IGNORECASE)
_EXTENSION = re.compile(r"[a-z0-9]+", re.IGNORECASE)


@dataclass
class Attachment:
    """An uploaded file held in memory."""

    filename: str
    content: bytes
    content_type: str | None = None


@dataclass
class UploadContext:
    """Submission details that shape folder and file naming."""

    builder_name: str
    reference_number: str
    web_host: str


@dataclass
class UploadResult:
    """Outcome of uploading a submission's attachments."""

    uploaded_file_urls: list[str] = field(default_factory=list)
    failed_files: list[str] = field(default_factory=list)
    base_folder_used: str | None = None

    @property
    def partial_failure(self) -> bool:
        return bool(self.failed_files)


def sanitize_name(name: str | None) -> str:
    """Replace every non-alphanumeric character with "_" and lower-case."""
    return _UNSAFE_NAME_CHARS.sub("_", name or DEFAULT_BUILDER_NAME).lower()


def build_file_name(
    sanitized_builder: str,
    reference_number: str,
    timestamp_ms: int,
    original_name: str,
) -> str:
    """Build the stored name {builder}_{reference}_{timestamp}.{ext}.

    The extension is taken from the original name. Names without one, or
    whose trailing segment is not purely alphanumeric (e.g. it contains a
    path separator), get no extension.
    """
    stem = f"{sanitized_builder}_{reference_number}_{timestamp_ms}"
    _, dot, extension = original_name.rpartition(".")
    if dot and _EXTENSION.fullmatch(extension):
        return f"{stem}.{extension}"
    return stem


async def upload_file(
    session: GraphClient,
    site_id: str,
    folder_path: str,
    filename: str,
    attachment: Attachment,
    web_host: str,
) -> str:
    """Upload one file into a library folder and return its web URL.

    Args:
        session: Authenticated Graph session
        site_id: Graph site identifier
        folder_path: Target folder relative to the library root
        filename: Name to store the file under
        attachment: File content and type
        web_host: SharePoint host used when the response carries no webUrl

    Returns:
        Web URL of the uploaded file

    Raises:
        GraphError: If the upload request fails
        SharePointUploadError: If the response identifies no file location
    """
    path = drive_item_path(site_id, join_path(folder_path, filename), ":/content")

    logger.info(
        "graph_upload_start",
        folder_path=folder_path,
        filename=filename,
        size=len(attachment.content),
    )

    item = await session.put_content(
        path,
        attachment.content,
        content_type=attachment.content_type or "application/octet-stream",
    )

    web_url = item.get("webUrl")
    if not web_url:
        parent_path = (item.get("parentReference") or {}).get("path")
        if not parent_path:
            raise SharePointUploadError(
                f"Upload response for {filename} has no webUrl or parent path",
                filename=filename,
            )
        web_url = f"https://{web_host}{parent_path}/{quote(filename)}"

    logger.info("graph_upload_success", filename=filename, item_id=item.get("id"))
    return web_url


class UploadOrchestrator:
    """Uploads a submission's attachments into the builder's folder.

    Attributes:
        _root_folder: Library folder holding one sub-folder per builder
        _fallback_folder: Folder used when the builder folder cannot be ensured
        _max_files: Maximum attachments per submission
    """

    def __init__(
        self,
        root_folder: str,
        fallback_folder: str,
        max_files: int = 3,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._root_folder = root_folder
        self._fallback_folder = fallback_folder
        self._max_files = max_files
        self._clock = clock
        self._last_timestamp = 0

    def _next_timestamp(self) -> int:
        """Millisecond timestamp, strictly increasing across calls."""
        now = int(self._clock() * 1000)
        self._last_timestamp = max(now, self._last_timestamp + 1)
        return self._last_timestamp

    async def upload_all(
        self,
        session: GraphClient,
        site_id: str,
        attachments: Sequence[Attachment],
        context: UploadContext,
    ) -> UploadResult:
        """Upload every attachment, tolerating per-file failures.

        Args:
            session: Authenticated Graph session
            site_id: Graph site identifier
            attachments: Files in submission order
            context: Builder and reference details for naming

        Returns:
            UploadResult whose URLs follow submission order, with failed
            uploads omitted and listed in failed_files

        Raises:
            ValidationError: If more attachments than allowed are passed
        """
        if len(attachments) > self._max_files:
            raise ValidationError(
                f"Maximum of {self._max_files} files allowed per submission"
            )

        if not attachments:
            logger.info("upload_no_files", reference_number=context.reference_number)
            return UploadResult()

        sanitized = sanitize_name(context.builder_name)

        try:
            folder = await ensure_folder(session, site_id, self._root_folder, sanitized)
        except SharePointError as e:
            logger.warning(
                "upload_folder_ensure_failed",
                root_folder=self._root_folder,
                builder_folder=sanitized,
                fallback_folder=self._fallback_folder,
                error=str(e),
            )
            folder = self._fallback_folder

        result = UploadResult(base_folder_used=folder)

        for attachment in attachments:
            filename = build_file_name(
                sanitized,
                context.reference_number,
                self._next_timestamp(),
                attachment.filename,
            )
            try:
                url = await upload_file(
                    session,
                    site_id,
                    folder,
                    filename,
                    attachment,
                    context.web_host,
                )
            except SharePointError as e:
                logger.error(
                    "upload_file_failed",
                    original_name=attachment.filename,
                    stored_name=filename,
                    folder=folder,
                    error=str(e),
                )
                result.failed_files.append(attachment.filename)
                continue
            result.uploaded_file_urls.append(url)

        logger.info(
            "upload_complete",
            reference_number=context.reference_number,
            folder=folder,
            uploaded=len(result.uploaded_file_urls),
            failed=len(result.failed_files),
        )
        return result
