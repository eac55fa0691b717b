"""FastAPI application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from registration_api.api import health, submissions
from registration_api.api.errors import register_exception_handlers
from registration_api.config import get_settings
from registration_api.core.logging import (
    configure_logging,
    generate_request_id,
    get_logger,
    request_id_ctx,
)
from registration_api.core.rate_limit import limiter
from registration_api.core.sharepoint.auth import get_sharepoint_auth
from registration_api.middleware.timing import TimingMiddleware
from registration_api.services.provinces import ProvinceConfigResolver
from registration_api.services.reference_service import (
    reference_allocator_from_settings,
)
from registration_api.services.submission_service import (
    submission_service_from_settings,
)

settings = get_settings()

# Configure structured logging
configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    logger.info(
        "application_starting",
        environment=settings.environment,
        debug=settings.debug,
    )

    auth_service = get_sharepoint_auth()
    if auth_service.is_configured:
        logger.info("sharepoint_configured")
    else:
        logger.warning(
            "sharepoint_not_configured",
            message="Submissions will fail. "
            "Set SHAREPOINT_TENANT_ID, SHAREPOINT_CLIENT_ID, and SHAREPOINT_CLIENT_SECRET.",
        )

    resolver = ProvinceConfigResolver(settings)
    unconfigured = resolver.unconfigured()
    if unconfigured:
        logger.warning("provinces_not_configured", provinces=unconfigured)

    allocator = reference_allocator_from_settings(settings)
    logger.info("reference_store", path=str(allocator.store_path))

    app.state.sharepoint_auth = auth_service
    app.state.province_resolver = resolver
    app.state.reference_allocator = allocator
    app.state.submission_service = submission_service_from_settings(
        settings, allocator, auth_service
    )

    yield

    logger.info("application_shutdown")


app = FastAPI(
    title="NHBRC Home Builder Registration API",
    description=(
        "Accepts home builder registration submissions, stores attachments "
        "in the province's SharePoint document library, and records each "
        "registration as a SharePoint list item."
    ),
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=[
        "Content-Type",
        "Accept",
        "Origin",
        "X-Requested-With",
    ],
    expose_headers=["X-Request-ID", "X-Response-Time-Ms"],
)

app.add_middleware(TimingMiddleware)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

register_exception_handlers(app)


# Request correlation ID middleware
@app.middleware("http")
async def add_request_id_middleware(request, call_next):
    """Add correlation ID to each request."""
    request_id = generate_request_id()
    request_id_ctx.set(request_id)
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# Include routers
app.include_router(submissions.router, prefix="/api")
app.include_router(health.router, prefix="/api")
