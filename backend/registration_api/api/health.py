"""Health probe endpoint."""

from datetime import UTC, datetime

from fastapi import APIRouter

from registration_api.api.deps import GraphAuth, ProvinceResolver
from registration_api.config import get_settings
from registration_api.core.logging import get_logger
from registration_api.core.sharepoint.client import acquire_graph_session
from registration_api.core.sharepoint.sites import resolve_site_id
from registration_api.schemas.submission import HealthResponse

router = APIRouter(tags=["health"])
logger = get_logger(__name__)
settings = get_settings()


@router.get("/health", response_model=HealthResponse)
async def health_check(
    auth_service: GraphAuth,
    resolver: ProvinceResolver,
) -> HealthResponse:
    """Report liveness and whether the probe province's site is reachable.

    Always answers 200; SharePoint problems are reported in sharepointStatus.
    """
    sharepoint_status = "Not configured"
    site_info: dict[str, str] = {}

    if auth_service.is_configured:
        province = settings.health_check_province
        try:
            province_config = resolver.resolve(province)
            session = await acquire_graph_session(auth_service, settings)
            async with session:
                site_id = await resolve_site_id(session, province_config.site_url)
            sharepoint_status = "Connected to SharePoint"
            site_info = {"siteId": site_id, "province": province}
        except Exception as e:
            logger.warning(
                "health_check_sharepoint_failed",
                province=province,
                error_type=type(e).__name__,
                error=str(e),
            )
            sharepoint_status = f"SharePoint connection failed: {e}"

    return HealthResponse(
        status="Backend is running...",
        sharepoint_status=sharepoint_status,
        site_info=site_info,
        mode=settings.environment,
        timestamp=datetime.now(UTC).isoformat(),
    )
