"""Registration submission and reference number endpoints."""

from fastapi import APIRouter, Request
from starlette.datastructures import UploadFile

from registration_api.api.deps import ReferenceAllocator, Submissions
from registration_api.config import get_settings
from registration_api.core.exceptions import ValidationError
from registration_api.core.file_utils import read_file_with_size_limit
from registration_api.core.logging import get_logger
from registration_api.core.rate_limit import limiter, reference_limit, submit_limit
from registration_api.core.sharepoint.uploads import Attachment
from registration_api.schemas.submission import (
    ErrorResponse,
    ReferenceResponse,
    SubmissionForm,
    SubmissionResponse,
)

router = APIRouter(tags=["submissions"])
logger = get_logger(__name__)
settings = get_settings()

FILE_FIELD_PREFIX = "fileUpload"


@router.post(
    "/submit-form",
    response_model=SubmissionResponse,
    responses={
        400: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
@limiter.limit(submit_limit)
async def submit_form(
    request: Request,
    service: Submissions,
) -> SubmissionResponse:
    """Accept a multipart registration submission.

    Text fields carry the registration details; up to three files may be
    attached under field names starting with "fileUpload". The response
    reports which files, if any, could not be stored.
    """
    # Spooled upload files are closed when the block exits
    async with request.form() as form_data:
        fields: dict[str, str] = {}
        files: list[UploadFile] = []
        for key, value in form_data.multi_items():
            if isinstance(value, UploadFile):
                if not key.startswith(FILE_FIELD_PREFIX):
                    raise ValidationError(
                        f"Unexpected file field: {key}. "
                        "Please check your form field names."
                    )
                files.append(value)
            else:
                fields[key] = value

        ignored = sorted(set(fields) - SubmissionForm.field_names())
        if ignored:
            logger.info("submission_fields_ignored", fields=ignored)

        form = SubmissionForm.from_form(fields)

        max_files = settings.max_files_per_submission
        if len(files) > max_files:
            raise ValidationError(
                f"Maximum of {max_files} files allowed per submission"
            )

        attachments = [
            Attachment(
                filename=upload.filename or "file",
                content=await read_file_with_size_limit(
                    upload, settings.max_file_size_bytes
                ),
                content_type=upload.content_type,
            )
            for upload in files
        ]

    result = await service.submit(form, attachments)

    return SubmissionResponse(
        reference_number=result.reference_number,
        item_id=result.list_item_id,
        uploaded_file_urls=result.uploaded_file_urls,
        province=form.province.value,
        partial_failure=result.partial_failure,
        failed_files=result.failed_files,
    )


@router.get(
    "/generate-reference",
    response_model=ReferenceResponse,
    responses={500: {"model": ErrorResponse}},
)
@limiter.limit(reference_limit)
async def generate_reference(
    request: Request,
    allocator: ReferenceAllocator,
) -> ReferenceResponse:
    """Allocate a reference number without creating a submission."""
    reference_number = await allocator.next_reference()
    return ReferenceResponse(reference_number=reference_number)
