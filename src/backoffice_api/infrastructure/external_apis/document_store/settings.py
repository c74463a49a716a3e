# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""Pydantic settings for the Document Store transport client."""

from __future__ import annotations

from pydantic import AnyHttpUrl, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DocumentStoreSettings(BaseSettings):
    """Configuration for the Document Store REST client.

    Environment variables (with ``model_config.env_prefix``):

    * ``DOCUMENT_STORE_BASE_URL``
    * ``DOCUMENT_STORE_TIMEOUT_S``
    * ``DOCUMENT_STORE_MAX_RETRIES``
    * ``DOCUMENT_STORE_API_KEY``
    """

    base_url: AnyHttpUrl = Field(
        ...,
        description="Base URL of the Document Store (the ``/api`` prefix is added by the client).",
    )
    timeout_s: float = Field(
        8.0,
        ge=0.1,
        le=60.0,
        description="Per-request timeout in seconds for the transport client.",
    )
    max_retries: int = Field(
        2,
        ge=0,
        le=10,
        description="Maximum number of retry attempts for idempotent reads.",
    )
    api_key: SecretStr | None = Field(
        None,
        description="Optional API key sent as ``X-Api-Key``.",
    )

    model_config: SettingsConfigDict = SettingsConfigDict(
        env_prefix="DOCUMENT_STORE_",
        extra="ignore",
    )
