"""API dependencies for request handlers.

Process-wide collaborators are created once in the application lifespan and
kept on app.state; handlers receive them through these dependencies.
"""

from typing import Annotated

from fastapi import Depends, Request

from registration_api.core.sharepoint.auth import SharePointAuthService
from registration_api.services.provinces import ProvinceConfigResolver
from registration_api.services.reference_service import ReferenceNumberAllocator
from registration_api.services.submission_service import SubmissionService

__all__ = [
    "GraphAuth",
    "ProvinceResolver",
    "ReferenceAllocator",
    "Submissions",
    "get_province_resolver",
    "get_reference_allocator",
    "get_sharepoint_auth_service",
    "get_submission_service",
]


def get_reference_allocator(request: Request) -> ReferenceNumberAllocator:
    """Get the process-wide reference number allocator."""
    return request.app.state.reference_allocator


def get_province_resolver(request: Request) -> ProvinceConfigResolver:
    """Get the province configuration resolver."""
    return request.app.state.province_resolver


def get_submission_service(request: Request) -> SubmissionService:
    """Get the submission pipeline."""
    return request.app.state.submission_service


def get_sharepoint_auth_service(request: Request) -> SharePointAuthService:
    """Get the Graph token source."""
    return request.app.state.sharepoint_auth


# Type aliases for dependency injection
ReferenceAllocator = Annotated[ReferenceNumberAllocator, Depends(get_reference_allocator)]
ProvinceResolver = Annotated[ProvinceConfigResolver, Depends(get_province_resolver)]
Submissions = Annotated[SubmissionService, Depends(get_submission_service)]
GraphAuth = Annotated[SharePointAuthService, Depends(get_sharepoint_auth_service)]
