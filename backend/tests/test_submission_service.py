"""Tests for the submission pipeline."""

import json
from unittest.mock import AsyncMock, patch

import pytest

from registration_api.core.exceptions import ConfigurationError, ValidationError
from registration_api.core.sharepoint.exceptions import (
    GraphError,
    ListNotFoundError,
    SharePointAuthenticationError,
)
from registration_api.core.sharepoint.uploads import Attachment, UploadOrchestrator
from registration_api.schemas.submission import SubmissionForm
from registration_api.services.provinces import ProvinceConfigResolver
from registration_api.services.reference_service import (
    ReferenceNumberAllocator,
    reference_allocator_from_settings,
)
from registration_api.services.submission_service import (
    SubmissionService,
    submission_service_from_settings,
)

SITE_ID = "contoso.sharepoint.com,site-guid,web-guid"
LISTS_PAGE = {"value": [{"id": "list-reg", "name": "HomeBuilderRegistrations"}]}


@pytest.fixture
def allocator(configured_settings):
    return reference_allocator_from_settings(configured_settings)


@pytest.fixture
def service(configured_settings, allocator):
    return SubmissionService(
        allocator=allocator,
        resolver=ProvinceConfigResolver(configured_settings),
        orchestrator=UploadOrchestrator(
            root_folder="D1 Documents",
            fallback_folder="Shared Documents",
            clock=lambda: 1_700_000_000.0,
        ),
        settings=configured_settings,
    )


@pytest.fixture
def acquire_session(graph_session):
    with patch(
        "registration_api.services.submission_service.acquire_graph_session",
        new=AsyncMock(return_value=graph_session),
    ) as mock_acquire:
        yield mock_acquire


def graph_calls(graph_session, *responses):
    """Queue responses for site lookup, folder probe and list calls."""
    graph_session.call.side_effect = list(responses)


class TestSubmit:
    """Tests for SubmissionService.submit."""

    @pytest.mark.asyncio
    async def test_submission_with_one_file(self, service, graph_session, acquire_session):
        """Happy path: reference, upload and list item."""
        graph_calls(
            graph_session,
            {"id": SITE_ID},
            {"id": "folder-1"},
            LISTS_PAGE,
            {"id": "7"},
        )
        graph_session.put_content.return_value = {"webUrl": "https://x/plan.pdf"}
        form = SubmissionForm.from_form({"province": "Gauteng", "builderName": "Acme"})

        result = await service.submit(form, [Attachment("plan.pdf", b"%PDF")])

        assert result.reference_number == "NHBRC10001"
        assert result.list_item_id == "7"
        assert result.uploaded_file_urls == ["https://x/plan.pdf"]
        assert result.partial_failure is False

        create_item = graph_session.call.await_args_list[-1]
        assert create_item.args[2] == {
            "fields": {
                "Title": "Acme",
                "ReferenceNumber": "NHBRC10001",
                "Province": "Gauteng",
                "Attachments": "https://x/plan.pdf",
            }
        }
        graph_session.__aexit__.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_submission_without_files(self, service, graph_session, acquire_session):
        graph_calls(graph_session, {"id": SITE_ID}, LISTS_PAGE, {"id": "8"})
        form = SubmissionForm.from_form({"province": "Gauteng"})

        result = await service.submit(form, [])

        assert result.uploaded_file_urls == []
        graph_session.put_content.assert_not_awaited()
        fields = graph_session.call.await_args_list[-1].args[2]["fields"]
        assert "Attachments" not in fields

    @pytest.mark.asyncio
    async def test_partial_upload_failure_still_creates_item(
        self, service, graph_session, acquire_session
    ):
        graph_calls(
            graph_session,
            {"id": SITE_ID},
            {"id": "folder-1"},
            LISTS_PAGE,
            {"id": "9"},
        )
        graph_session.put_content.side_effect = [
            {"webUrl": "https://x/1"},
            GraphError(500, "Internal"),
        ]
        form = SubmissionForm.from_form({"province": "Gauteng", "builderName": "Acme"})

        result = await service.submit(
            form, [Attachment("a.pdf", b"1"), Attachment("b.pdf", b"2")]
        )

        assert result.partial_failure is True
        assert result.failed_files == ["b.pdf"]
        fields = graph_session.call.await_args_list[-1].args[2]["fields"]
        assert fields["Attachments"] == "https://x/1"

    @pytest.mark.asyncio
    async def test_too_many_files_uploads_nothing(
        self, service, graph_session, acquire_session
    ):
        """The orchestrator rejects an oversized batch before any upload."""
        graph_calls(graph_session, {"id": SITE_ID})
        form = SubmissionForm.from_form({"province": "Gauteng"})
        files = [Attachment(f"{i}.pdf", b"x") for i in range(4)]

        with pytest.raises(ValidationError, match="Maximum of 3 files"):
            await service.submit(form, files)

        graph_session.put_content.assert_not_awaited()
        graph_session.__aexit__.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unconfigured_province_allocates_nothing(
        self, service, allocator, acquire_session
    ):
        """Configuration is resolved before a reference is consumed."""
        form = SubmissionForm.from_form({"province": "Limpopo"})

        with pytest.raises(ConfigurationError, match="Limpopo"):
            await service.submit(form, [])

        acquire_session.assert_not_awaited()
        assert not allocator.store_path.exists()

    @pytest.mark.asyncio
    async def test_auth_failure_propagates(self, service, acquire_session):
        acquire_session.side_effect = SharePointAuthenticationError("bad secret")
        form = SubmissionForm.from_form({"province": "Gauteng"})

        with pytest.raises(SharePointAuthenticationError):
            await service.submit(form, [])

    @pytest.mark.asyncio
    async def test_missing_list_fails_submission(
        self, service, graph_session, acquire_session
    ):
        graph_calls(graph_session, {"id": SITE_ID}, {"value": []})
        form = SubmissionForm.from_form({"province": "Gauteng"})

        with pytest.raises(ListNotFoundError):
            await service.submit(form, [])

        graph_session.__aexit__.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_reference_is_consumed_on_downstream_failure(
        self, service, allocator, graph_session, acquire_session
    ):
        """Numbers are never reused, even when the submission fails later."""
        graph_calls(graph_session, GraphError(500, "Internal"))
        form = SubmissionForm.from_form({"province": "Gauteng"})

        with pytest.raises(GraphError):
            await service.submit(form, [])

        stored = json.loads(allocator.store_path.read_text())
        assert stored == {"lastReferenceNumber": 10001}


class TestSubmissionServiceFromSettings:
    def test_wires_settings(self, configured_settings, tmp_path):
        allocator = ReferenceNumberAllocator(tmp_path / "counter.json")

        service = submission_service_from_settings(configured_settings, allocator)

        assert service._allocator is allocator
        assert service._orchestrator._root_folder == "D1 Documents"
        assert service._orchestrator._fallback_folder == "Shared Documents"
        assert service._orchestrator._max_files == 3
