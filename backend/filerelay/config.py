"""
FileRelay — Application Configuration
======================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading, validated once at startup and
       then frozen. Request handlers receive the instance through the app
       factory and never read the environment themselves.
How:   Pydantic Settings reads from environment variables (or .env files),
       validates types/ranges, and `get_settings()` caches one instance.
Who:   Passed into `create_app()`; consumed by every service.

Relay Modes:
    direct   → respond with the extraction JSON as returned by the service
    storage  → upload the extraction JSON to an S3-compatible bucket and
               respond with its public URL

Required values depend on the mode. They are NOT enforced at construction
time: a half-configured deployment still boots, logs what is missing, and
answers every relay request with the 500 configuration error.
"""

import tempfile
from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings

MODE_DIRECT = "direct"
MODE_STORAGE = "storage"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes are grouped by concern for readability. The instance is
    immutable (`frozen`): configuration is fixed for the life of the process.
    """

    # ── Relay Mode ────────────────────────────────────────────────────────
    relay_mode: Literal["direct", "storage"] = Field(default=MODE_DIRECT)

    # ── Extraction Service ────────────────────────────────────────────────
    # What: Endpoint and credential of the document-extraction API
    # Aliases: the UNSTRUCTURED_* names used by existing deployments still work
    extraction_api_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("extraction_api_url", "unstructured_api_url"),
        description="Full URL the staged file is POSTed to",
    )
    extraction_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("extraction_api_key", "unstructured_api_key"),
        description="API key sent with every extraction request",
    )
    extraction_api_key_header: str = Field(default="unstructured-api-key")

    # ── Object Storage (storage mode only) ────────────────────────────────
    s3_endpoint_url: Optional[str] = Field(default=None)
    s3_access_key_id: Optional[str] = Field(default=None)
    s3_secret_access_key: Optional[str] = Field(default=None)
    s3_bucket: Optional[str] = Field(default=None)
    # "auto" is what R2-style S3-compatible stores expect; AWS users set a real region
    s3_region: str = Field(default="auto")
    # What: Prefix joined with the object key to build the returned URL
    public_base_url: Optional[str] = Field(default=None)

    # ── Limits ────────────────────────────────────────────────────────────
    # Download is short: the source only has to serve bytes.
    # Forward is long: extraction is CPU-heavy on the remote side.
    download_timeout: float = Field(default=5.0, gt=0, le=300)
    forward_timeout: float = Field(default=30.0, gt=0, le=900)
    # Default: 10MB = 10 * 1024 * 1024 = 10485760
    max_download_size: int = Field(default=10_485_760, ge=1)

    # What: Scratch directory for staged downloads
    temp_dir: str = Field(default_factory=tempfile.gettempdir)

    # ── Server ────────────────────────────────────────────────────────────
    environment: Literal["development", "production"] = Field(default="development")
    host: str = Field(default="localhost")
    port: int = Field(default=3000, ge=1, le=65535)
    cors_origins: str = Field(default="*")
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        # Later files win: .env.local overrides .env during development
        "env_file": (".env", ".env.local"),
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
        "frozen": True,
        "populate_by_name": True,
    }

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def bind_host(self) -> str:
        """Production listens on every interface; development stays on the configured host."""
        return "0.0.0.0" if self.environment == "production" else self.host

    @property
    def storage_enabled(self) -> bool:
        return self.relay_mode == MODE_STORAGE

    def missing_settings(self) -> List[str]:
        """
        What:    Lists required settings that are absent for the active mode.
        Returns: Environment variable names, empty when fully configured.
        """
        required = {
            "EXTRACTION_API_URL": self.extraction_api_url,
            "EXTRACTION_API_KEY": self.extraction_api_key,
        }
        if self.storage_enabled:
            required.update(
                {
                    "S3_ENDPOINT_URL": self.s3_endpoint_url,
                    "S3_ACCESS_KEY_ID": self.s3_access_key_id,
                    "S3_SECRET_ACCESS_KEY": self.s3_secret_access_key,
                    "S3_BUCKET": self.s3_bucket,
                    "PUBLIC_BASE_URL": self.public_base_url,
                }
            )
        return [name for name, value in required.items() if not value]


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Application configuration loaded from environment.
    """
    return Settings()
