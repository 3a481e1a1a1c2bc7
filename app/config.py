# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.SUPABASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------
    # These are required - app won't start without them

    SUPABASE_URL: str = Field(
        ...,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_ANON_KEY: str = Field(
        ...,
        description="Supabase anon/public API key"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    SUPABASE_JWT_SECRET: str = Field(
        default="",
        description="Legacy HS256 JWT secret used to verify admin sessions"
    )

    # -------------------------------------------------------------------------
    # Storage Buckets
    # -------------------------------------------------------------------------
    # One bucket per purpose; all must be public in the Supabase dashboard

    PROFILE_BUCKET: str = Field(
        default="profile",
        description="Bucket holding the profile image and CV"
    )

    CERTIFICATES_BUCKET: str = Field(
        default="certificates",
        description="Bucket holding certificate PDFs"
    )

    PROJECT_FILES_BUCKET: str = Field(
        default="project-files",
        description="Bucket holding project images"
    )

    STORAGE_LIST_LIMIT: int = Field(
        default=100,
        ge=1,
        le=1000,
        description="Max objects returned by a single bucket listing"
    )

    # -------------------------------------------------------------------------
    # Records
    # -------------------------------------------------------------------------

    PROFILE_RECORD_ID: int = Field(
        default=1,
        description="Fixed id of the single permitted row in the profile table"
    )

    # -------------------------------------------------------------------------
    # OpenAI / Description Writer
    # -------------------------------------------------------------------------
    # Optional: without a key the writer returns fallback text

    OPENAI_API_KEY: str | None = Field(
        default=None,
        description="OpenAI API key for description prefill"
    )

    OPENAI_MODEL: str = Field(
        default="gpt-4o-mini",
        description="Model used to draft descriptions (must support JSON mode)"
    )

    DESCRIBER_TEMPERATURE: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="OpenAI temperature for description drafts"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # File Upload Settings
    # -------------------------------------------------------------------------

    MAX_UPLOAD_SIZE_MB: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Maximum size of a single uploaded file in MB"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        # Don't fail if .env doesn't exist (production sets env vars directly)
        env_ignore_empty=True,
        case_sensitive=True,
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://me.dev" -> ["http://localhost:3000", "https://me.dev"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def max_upload_size_bytes(self) -> int:
        """Convert MB to bytes for file size validation."""
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024

    @property
    def storage_public_base(self) -> str:
        """Prefix shared by every public object URL of this project."""
        return f"{self.SUPABASE_URL.rstrip('/')}/storage/v1/object/public"

    @property
    def managed_buckets(self) -> list[str]:
        return [self.PROFILE_BUCKET, self.CERTIFICATES_BUCKET, self.PROJECT_FILES_BUCKET]

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
