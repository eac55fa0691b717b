"""Registration submission pipeline.

A submission runs: province config -> reference allocation -> Graph session
-> site resolution -> attachment upload -> list item creation. Nothing is
retried; any failure outside the per-file upload isolation fails the whole
submission.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

import httpx

from registration_api.config import Settings, get_settings
from registration_api.core.logging import get_logger
from registration_api.core.sharepoint.auth import SharePointAuthService
from registration_api.core.sharepoint.client import acquire_graph_session
from registration_api.core.sharepoint.lists import write_list_item
from registration_api.core.sharepoint.sites import resolve_site_id
from registration_api.core.sharepoint.uploads import (
    DEFAULT_BUILDER_NAME,
    Attachment,
    UploadContext,
    UploadOrchestrator,
)
from registration_api.schemas.submission import SubmissionForm
from registration_api.services.provinces import ProvinceConfigResolver
from registration_api.services.reference_service import ReferenceNumberAllocator

logger = get_logger(__name__)


@dataclass
class SubmissionResult:
    """Outcome of an accepted submission."""

    reference_number: str
    list_item_id: str
    uploaded_file_urls: list[str] = field(default_factory=list)
    failed_files: list[str] = field(default_factory=list)

    @property
    def partial_failure(self) -> bool:
        return bool(self.failed_files)


class SubmissionService:
    """Persists registration submissions into the province's SharePoint site."""

    def __init__(
        self,
        allocator: ReferenceNumberAllocator,
        resolver: ProvinceConfigResolver,
        orchestrator: UploadOrchestrator,
        auth_service: SharePointAuthService | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._allocator = allocator
        self._resolver = resolver
        self._orchestrator = orchestrator
        self._auth = auth_service
        self._settings = settings or get_settings()

    async def submit(
        self,
        form: SubmissionForm,
        attachments: Sequence[Attachment],
    ) -> SubmissionResult:
        """Store one submission and its attachments.

        Args:
            form: Validated submission fields
            attachments: Files in submission order

        Returns:
            SubmissionResult with the allocated reference and created item ID

        Raises:
            ValidationError: If more attachments than the orchestrator allows
                are supplied
            ConfigurationError: If the province has no complete configuration
            SharePointAuthenticationError: If no Graph token can be acquired
            GraphError: If site resolution or item creation fails
            ListNotFoundError: If the province's list does not exist
        """
        province = form.province.value
        province_config = self._resolver.resolve(province)

        reference_number = await self._allocator.next_reference()
        log = logger.bind(reference_number=reference_number, province=province)
        log.info("submission_started", file_count=len(attachments))

        session = await acquire_graph_session(self._auth, self._settings)
        async with session:
            site_id = await resolve_site_id(session, province_config.site_url)

            uploads = await self._orchestrator.upload_all(
                session,
                site_id,
                attachments,
                UploadContext(
                    builder_name=form.builder_name or DEFAULT_BUILDER_NAME,
                    reference_number=reference_number,
                    web_host=httpx.URL(province_config.site_url).host,
                ),
            )

            item = await write_list_item(
                session,
                site_id,
                province_config.list_internal_name,
                form.to_list_fields(reference_number, uploads.uploaded_file_urls),
            )

        result = SubmissionResult(
            reference_number=reference_number,
            list_item_id=str(item.get("id", "")),
            uploaded_file_urls=uploads.uploaded_file_urls,
            failed_files=uploads.failed_files,
        )

        if result.partial_failure:
            log.warning(
                "submission_partial_upload_failure",
                failed_files=result.failed_files,
                uploaded=len(result.uploaded_file_urls),
            )
        log.info("submission_completed", item_id=result.list_item_id)
        return result


def submission_service_from_settings(
    settings: Settings,
    allocator: ReferenceNumberAllocator,
    auth_service: SharePointAuthService | None = None,
) -> SubmissionService:
    """Wire a SubmissionService from application settings.

    Args:
        settings: Application settings
        allocator: Shared reference allocator (one per process)
        auth_service: Token source (defaults to the process singleton)

    Returns:
        Configured SubmissionService instance
    """
    return SubmissionService(
        allocator=allocator,
        resolver=ProvinceConfigResolver(settings),
        orchestrator=UploadOrchestrator(
            root_folder=settings.builder_root_folder,
            fallback_folder=settings.fallback_upload_folder,
            max_files=settings.max_files_per_submission,
        ),
        auth_service=auth_service,
        settings=settings,
    )
