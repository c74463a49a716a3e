# src/backoffice_api/config/settings.py
# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""Backoffice Configuration (Pydantic Settings, v2)

Summary:
    Typed, validated application configuration for the backoffice service.
    Only Adapters/Infrastructure read the process environment; other layers
    receive values (due days, retry counts) through constructor arguments.

Design:
    - Pydantic v2 BaseSettings with `extra='forbid'` to catch unknown env.
    - Explicit field declarations with constrained types and ranges.
    - Environment enumeration for behavior toggles (includes TEST).
    - Singleton accessor `get_settings()` with LRU cache.
    - Safe, structured logging (no secrets).
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from typing import Literal

from pydantic import AnyHttpUrl, Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from backoffice_api.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)


class Environment(str, Enum):
    """Logical deployment environment."""

    DEVELOPMENT = "development"
    TEST = "test"
    CI = "ci"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Typed application configuration for the backoffice service."""

    # ---------------------------
    # Core environment
    # ---------------------------
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Logical deployment environment.",
        validation_alias="ENVIRONMENT",
    )

    # Raw env for CORS; the parsed list is computed in a model validator.
    cors_allow_origins_raw: str | None = Field(
        default=None,
        description="Raw env for allowed CORS origins (comma-separated).",
        validation_alias="ALLOWED_ORIGINS",
    )

    cors_allow_origins: list[str] = Field(
        default_factory=list,
        description=(
            "Allowed CORS origins. Derived from ALLOWED_ORIGINS. "
            "In development/test, '*' is allowed; in production-like envs, '*' is rejected."
        ),
    )

    # ---------------------------
    # OpenAPI / docs
    # ---------------------------
    docs_url: str | None = Field(
        default="/docs",
        description="Swagger UI docs URL. Set to None to disable interactive docs.",
        validation_alias="DOCS_URL",
    )
    openapi_url: str | None = Field(
        default="/openapi.json",
        description="OpenAPI JSON schema URL. Set to None to disable OpenAPI exposure.",
        validation_alias="OPENAPI_URL",
    )

    # ---------------------------
    # Service identity / logging
    # ---------------------------
    service_name: str = Field(
        default="backoffice-api",
        description="Logical service name for logging.",
        validation_alias="SERVICE_NAME",
    )
    service_version: str = Field(
        default="0.1.0",
        description="Service version reported by the OpenAPI document.",
        validation_alias="SERVICE_VERSION",
    )
    log_level: str | None = Field(
        default=None,
        description="Override log level (e.g., 'DEBUG', 'INFO'). If not set, defaults are used.",
        validation_alias="LOG_LEVEL",
    )

    # ---------------------------
    # Conversion workflow
    # ---------------------------
    invoice_due_days: int = Field(
        default=7,
        ge=0,
        le=365,
        description="Days between a converted invoice's issue date and its due date.",
        validation_alias="INVOICE_DUE_DAYS",
    )
    conversion_number_retries: int = Field(
        default=1,
        ge=0,
        le=5,
        description="How many times a duplicate invoice number is regenerated before failing.",
        validation_alias="CONVERSION_NUMBER_RETRIES",
    )

    # ---------------------------
    # Document Store
    # ---------------------------
    document_store_backend: Literal["http", "memory"] = Field(
        default="http",
        description="Document Store implementation: the REST back-end or an in-process store.",
        validation_alias="DOCUMENT_STORE_BACKEND",
    )
    document_store_base_url: AnyHttpUrl | None = Field(
        default=None,
        description="Base URL of the Document Store REST API (e.g. http://localhost:3000).",
        validation_alias="DOCUMENT_STORE_BASE_URL",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="forbid",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def _compute_cors_and_store(self) -> Settings:
        """Compute the CORS list and validate the Document Store configuration.

        Returns:
            Settings: The validated and possibly mutated settings instance.

        Raises:
            ValueError: If CORS or store-related invariants are violated.
        """
        raw = (self.cors_allow_origins_raw or "").strip()
        entries = [e.strip() for e in raw.split(",") if e.strip()]
        if any(e == "*" for e in entries) and self.environment not in (
            Environment.DEVELOPMENT,
            Environment.TEST,
        ):
            raise ValueError(
                "'*' CORS origin is only allowed in development/test environments.",
            )
        self.cors_allow_origins = entries

        if (
            self.document_store_backend == "http"
            and self.document_store_base_url is None
            and self.environment is not Environment.TEST
        ):
            raise ValueError(
                "DOCUMENT_STORE_BASE_URL is required when DOCUMENT_STORE_BACKEND=http.",
            )

        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton `Settings` instance.

    Returns:
        Settings: Validated application settings.

    Raises:
        RuntimeError: If configuration is invalid.
    """
    try:
        settings = Settings()
    except ValidationError as exc:
        logger.exception("Invalid application configuration")
        raise RuntimeError(f"Invalid configuration: {exc}") from exc

    logger.info(
        "Settings initialized",
        extra={
            "environment": settings.environment.value,
            "service_name": settings.service_name,
            "cors_count": len(settings.cors_allow_origins),
            "cors_has_wildcard": any(o == "*" for o in settings.cors_allow_origins),
            "docs": {
                "docs_url": settings.docs_url,
                "openapi_url": settings.openapi_url,
            },
            "conversion": {
                "invoice_due_days": settings.invoice_due_days,
                "number_retries": settings.conversion_number_retries,
            },
            "document_store": {
                "backend": settings.document_store_backend,
                "base_url": (
                    str(settings.document_store_base_url)
                    if settings.document_store_base_url
                    else None
                ),
            },
        },
    )
    return settings
