from __future__ import annotations

import pytest
from pydantic import ValidationError

from backoffice_api.config.settings import Environment, Settings, get_settings
from backoffice_api.infrastructure.external_apis.document_store.settings import (
    DocumentStoreSettings,
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in (
        "ENVIRONMENT",
        "ALLOWED_ORIGINS",
        "DOCUMENT_STORE_BACKEND",
        "DOCUMENT_STORE_BASE_URL",
        "INVOICE_DUE_DAYS",
        "CONVERSION_NUMBER_RETRIES",
    ):
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()


def test_settings_read_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "staging")
    monkeypatch.setenv("DOCUMENT_STORE_BASE_URL", "http://store.internal:3000")
    monkeypatch.setenv("INVOICE_DUE_DAYS", "30")
    monkeypatch.setenv("ALLOWED_ORIGINS", "https://a.example, https://b.example")

    s = Settings()

    assert s.environment is Environment.STAGING
    assert str(s.document_store_base_url).startswith("http://store.internal:3000")
    assert s.invoice_due_days == 30
    assert s.conversion_number_retries == 1
    assert s.cors_allow_origins == ["https://a.example", "https://b.example"]


def test_http_backend_requires_base_url_outside_test(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "production")
    with pytest.raises(ValidationError):
        Settings()

    monkeypatch.setenv("DOCUMENT_STORE_BACKEND", "memory")
    assert Settings().document_store_base_url is None


def test_test_environment_tolerates_missing_base_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "test")
    assert Settings().document_store_backend == "http"


def test_wildcard_cors_rejected_in_production(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "production")
    monkeypatch.setenv("DOCUMENT_STORE_BACKEND", "memory")
    monkeypatch.setenv("ALLOWED_ORIGINS", "*")
    with pytest.raises(ValidationError):
        Settings()


def test_get_settings_wraps_invalid_configuration(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("INVOICE_DUE_DAYS", "-1")
    with pytest.raises(RuntimeError, match="Invalid configuration"):
        get_settings()
    get_settings.cache_clear()


def test_document_store_settings_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DOCUMENT_STORE_BASE_URL", "http://localhost:3000")
    monkeypatch.setenv("DOCUMENT_STORE_API_KEY", "k")
    monkeypatch.setenv("DOCUMENT_STORE_MAX_RETRIES", "0")

    cfg = DocumentStoreSettings()  # type: ignore[call-arg]

    assert cfg.max_retries == 0
    assert cfg.api_key is not None
    assert cfg.api_key.get_secret_value() == "k"
    assert cfg.timeout_s == 8.0
