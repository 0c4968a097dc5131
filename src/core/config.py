"""Application configuration using pydantic-settings."""

from functools import lru_cache

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # API settings
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=8000, description="API server port")
    debug: bool = Field(default=False, description="Enable debug mode")

    # S3 settings
    s3_bucket_name: str = Field(
        default="",
        description="Bucket that holds uploaded files",
    )
    s3_region: str = Field(
        default="ap-northeast-2",
        description="Bucket region",
    )
    s3_access_key_id: str | None = Field(
        default=None,
        description="S3 access key ID (falls back to the default AWS credential chain)",
    )
    s3_secret_access_key: str | None = Field(
        default=None,
        description="S3 secret access key",
    )
    s3_endpoint_url: str | None = Field(
        default=None,
        description="Custom endpoint for S3-compatible storage (MinIO, R2, ...)",
    )
    s3_public_url_base: str | None = Field(
        default=None,
        description="Public URL base for stored files (if using a CDN or custom domain)",
    )

    # Upload rules
    max_upload_size_mb: int = Field(
        default=20,
        ge=1,
        le=100,
        description="Maximum upload file size in MB",
    )
    folder_delete_max_attempts: int = Field(
        default=10,
        ge=1,
        le=100,
        description="List/delete passes before a folder purge gives up",
    )

    # Remote image fetch
    image_fetch_user_agent: str = Field(
        default="Mozilla/5.0",
        description="User-Agent header sent when fetching remote images",
    )
    image_fetch_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for fetching a remote image",
    )
    raise_image_url_errors: bool = Field(
        default=True,
        description="Raise on remote image fetch/upload failure instead of logging it",
    )

    @computed_field
    @property
    def max_upload_size_bytes(self) -> int:
        """Maximum upload size in bytes."""
        return self.max_upload_size_mb * 1024 * 1024

    @property
    def storage_configured(self) -> bool:
        """Check if a bucket has been configured."""
        return bool(self.s3_bucket_name)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def reset_settings() -> None:
    """Reset cached settings (useful for testing)."""
    get_settings.cache_clear()
