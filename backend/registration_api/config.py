"""Application configuration using Pydantic settings."""

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False

    # CORS
    cors_origins: list[str] = ["*"]

    # Logging
    log_level: str = "INFO"

    # SharePoint / Azure AD app registration
    sharepoint_tenant_id: str = Field(
        default="",
        validation_alias=AliasChoices("sharepoint_tenant_id", "tenant_id"),
    )
    sharepoint_client_id: str = ""
    sharepoint_client_secret: str = ""
    graph_timeout_seconds: float = 60.0

    # Province sites (SHAREPOINT_SITE_<PROVINCE_KEY>)
    sharepoint_site_eastern_cape: str = ""
    sharepoint_site_free_state: str = ""
    sharepoint_site_gauteng: str = ""
    sharepoint_site_kwazulu_natal: str = ""
    sharepoint_site_limpopo: str = ""
    sharepoint_site_mpumalanga: str = ""
    sharepoint_site_north_west: str = ""
    sharepoint_site_northern_cape: str = ""
    sharepoint_site_western_cape: str = ""

    # Province lists (SHAREPOINT_LIST_<PROVINCE_KEY>), internal list names
    sharepoint_list_eastern_cape: str = ""
    sharepoint_list_free_state: str = ""
    sharepoint_list_gauteng: str = ""
    sharepoint_list_kwazulu_natal: str = ""
    sharepoint_list_limpopo: str = ""
    sharepoint_list_mpumalanga: str = ""
    sharepoint_list_north_west: str = ""
    sharepoint_list_northern_cape: str = ""
    sharepoint_list_western_cape: str = ""

    # Document library layout
    builder_root_folder: str = "D1 Documents"
    fallback_upload_folder: str = "Shared Documents"

    # Submission limits
    max_files_per_submission: int = 3
    max_file_size_mb: int = 10

    # Reference numbers
    reference_store_path: str = "./data/reference-counter.json"
    reference_seed: int = 10000
    reference_prefix: str = "NHBRC"

    # Health probe
    health_check_province: str = "Gauteng"

    # Rate Limiting
    rate_limit_enabled: bool = True
    rate_limit_storage_uri: str = "memory://"
    rate_limit_submit: str = "10/minute"
    rate_limit_reference: str = "30/minute"

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Normalize log level to uppercase."""
        return v.upper() if isinstance(v, str) else "INFO"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Parse CORS origins from string or list."""
        if isinstance(v, str):
            # Handle JSON-like string from env var
            import json

            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @model_validator(mode="after")
    def validate_sharepoint_settings(self) -> "Settings":
        """Production deployments must carry complete SharePoint credentials."""
        if self.environment == "production":
            errors = [
                f"{name} is required in production"
                for name, value in (
                    ("SHAREPOINT_TENANT_ID", self.sharepoint_tenant_id),
                    ("SHAREPOINT_CLIENT_ID", self.sharepoint_client_id),
                    ("SHAREPOINT_CLIENT_SECRET", self.sharepoint_client_secret),
                )
                if not value
            ]
            if errors:
                raise ValueError(
                    "Production configuration errors:\n"
                    + "\n".join(f"  - {e}" for e in errors)
                )

        if self.max_files_per_submission < 1:
            raise ValueError("MAX_FILES_PER_SUBMISSION must be at least 1")

        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_sharepoint_configured(self) -> bool:
        """Check if SharePoint app credentials are all present."""
        return bool(
            self.sharepoint_tenant_id
            and self.sharepoint_client_id
            and self.sharepoint_client_secret
        )

    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes."""
        return self.max_file_size_mb * 1024 * 1024


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
