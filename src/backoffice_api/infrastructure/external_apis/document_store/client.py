# src/backoffice_api/infrastructure/external_apis/document_store/client.py
# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""Document Store transport client (async, instrumented, retries reads).

This transport is framework-agnostic and provides:

* Async HTTP (httpx) with per-request timeout.
* Jittered exponential retries for idempotent GETs only. Writes (POST, PUT,
  DELETE) are sent exactly once.
* ``Cache-Control: no-cache`` on every read so the store never answers from a
  stale cache.
* ``X-Request-ID`` propagation from the logging context.
* Deterministic mapping of HTTP statuses to domain errors:
  404 → ``DocumentNotFound``; 409 → ``DocumentConflict`` (or
  ``DuplicateDocumentNumber`` when the error code is ``DUPLICATE_NUMBER``);
  400/422 → ``DocumentValidationError``; 5xx, timeouts and transport errors →
  ``DocumentStoreUnavailable``.
* Prometheus latency samples per logical operation.

The client returns parsed JSON; mapping to entities is the gateway's job.
"""

from __future__ import annotations

from contextlib import suppress
from typing import Any, Final

import httpx

from backoffice_api.domain.exceptions.documents import (
    DocumentConflict,
    DocumentNotFound,
    DocumentStoreUnavailable,
    DocumentValidationError,
    DuplicateDocumentNumber,
)
from backoffice_api.infrastructure.external_apis.document_store.settings import (
    DocumentStoreSettings,
)
from backoffice_api.infrastructure.logging.logger import get_json_logger, get_request_id
from backoffice_api.infrastructure.observability.metrics import observe_document_store_request
from backoffice_api.infrastructure.resilience.retry import RetryPolicy, retry_async

logger = get_json_logger(__name__)

_API_PREFIX: Final[str] = "/api"
_DEFAULT_BASE_BACKOFF: Final[float] = 0.2
_DEFAULT_MAX_BACKOFF: Final[float] = 2.0
_DUPLICATE_NUMBER_CODE: Final[str] = "DUPLICATE_NUMBER"

_DEFAULT_HEADERS: Final[dict[str, str]] = {
    "Accept": "application/json",
    "User-Agent": "backoffice-document-store-client/1.0",
}


def _error_fields(response: httpx.Response) -> tuple[str | None, str | None]:
    """Extract ``(code, message)`` from an error body, if it has either.

    Accepts ``{"error": {"code", "message"}}``, ``{"code", "message"}`` and
    ``{"error": "..."}`` shapes.
    """
    try:
        body = response.json()
    except ValueError:
        return None, response.text or None
    if not isinstance(body, dict):
        return None, None
    err = body.get("error")
    if isinstance(err, dict):
        return err.get("code"), err.get("message")
    if isinstance(err, str):
        return body.get("code"), err
    return body.get("code"), body.get("message")


class DocumentStoreClient:
    """Transport client for the Document Store REST API."""

    def __init__(
        self,
        settings: DocumentStoreSettings,
        *,
        http: httpx.AsyncClient | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        """Initialize the transport client.

        Args:
            settings: Store settings (base URL, timeout, retries, API key).
            http: Optional shared ``httpx.AsyncClient``. If omitted, a client
                is created and owned by this instance.
            retry_policy: Optional retry configuration for reads. When
                omitted, a jittered exponential policy is built from
                ``settings.max_retries``.
        """
        self._settings = settings
        self._base_url = str(settings.base_url).rstrip("/") + _API_PREFIX
        self._timeout = float(settings.timeout_s)

        self._owns_client = http is None
        self._client = http or httpx.AsyncClient(
            timeout=self._timeout,
            headers=_DEFAULT_HEADERS.copy(),
        )
        if http is not None:
            for key, value in _DEFAULT_HEADERS.items():
                self._client.headers.setdefault(key, value)

        self._retry = retry_policy or RetryPolicy(
            total=int(settings.max_retries),
            base=_DEFAULT_BASE_BACKOFF,
            cap=_DEFAULT_MAX_BACKOFF,
            jitter=True,
        )

    @property
    def base_url(self) -> str:
        """Resolved API root (``{base_url}/api``)."""
        return self._base_url

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance owns it."""
        if self._owns_client and not self._client.is_closed:
            await self._client.aclose()

    # ---------------------------- Public API ----------------------------- #

    async def get_json(self, path: str, *, operation: str) -> Any:
        """GET ``path`` and return the parsed JSON body (retried when unavailable)."""

        async def _once() -> Any:
            response = await self._send(
                "GET", path, headers={"Cache-Control": "no-cache", "Pragma": "no-cache"}
            )
            return self._parse(response)

        with observe_document_store_request(operation=operation):
            return await retry_async(
                _once,
                policy=self._retry,
                retry_on=lambda exc: isinstance(exc, DocumentStoreUnavailable),
                op=operation,
            )

    async def post_json(self, path: str, payload: dict[str, Any], *, operation: str) -> Any:
        """POST ``payload`` to ``path`` once and return the parsed JSON body, if any."""
        with observe_document_store_request(operation=operation):
            return self._parse_write(await self._send("POST", path, json=payload))

    async def put_json(self, path: str, payload: dict[str, Any], *, operation: str) -> Any:
        """PUT ``payload`` to ``path`` once and return the parsed JSON body, if any."""
        with observe_document_store_request(operation=operation):
            return self._parse_write(await self._send("PUT", path, json=payload))

    async def delete(self, path: str, *, operation: str) -> None:
        """DELETE ``path`` once."""
        with observe_document_store_request(operation=operation):
            await self._send("DELETE", path)

    # ---------------------------- Internals ------------------------------ #

    def _headers(self, extra: dict[str, str] | None) -> dict[str, str]:
        headers: dict[str, str] = dict(extra or {})
        request_id = get_request_id()
        if request_id:
            headers.setdefault("X-Request-ID", request_id)
        if self._settings.api_key is not None:
            headers["X-Api-Key"] = self._settings.api_key.get_secret_value()
        return headers

    async def _send(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send one request and map non-2xx statuses to domain errors."""
        url = f"{self._base_url}{path}"
        try:
            response = await self._client.request(
                method,
                url,
                json=json,
                headers=self._headers(headers),
                timeout=self._timeout,
            )
        except httpx.RequestError as exc:
            # Timeouts and connection failures alike.
            raise DocumentStoreUnavailable(
                "Document Store is unreachable.",
                details={"method": method, "path": path, "error": type(exc).__name__},
            ) from exc

        if response.is_success:
            return response

        self._raise_for_status(method, path, response)
        return response  # pragma: no cover

    @staticmethod
    def _raise_for_status(method: str, path: str, response: httpx.Response) -> None:
        """Raise the domain exception matching ``response.status_code``."""
        status = response.status_code
        code, message = _error_fields(response)
        details: dict[str, Any] = {"method": method, "path": path, "status": status}
        if code:
            details["upstream_code"] = code

        if status == 404:
            raise DocumentNotFound(message or "Document not found.", details=details)
        if status == 409:
            if code == _DUPLICATE_NUMBER_CODE:
                raise DuplicateDocumentNumber(
                    message or "Document number already exists.", details=details
                )
            raise DocumentConflict(message or "Document changed concurrently.", details=details)
        if status in (400, 422):
            if code == _DUPLICATE_NUMBER_CODE:
                raise DuplicateDocumentNumber(
                    message or "Document number already exists.", details=details
                )
            raise DocumentValidationError(message or "Document rejected.", details=details)

        logger.warning(
            "document_store.unexpected_status",
            extra={"method": method, "path": path, "status": status},
        )
        raise DocumentStoreUnavailable(
            message or f"Document Store answered HTTP {status}.", details=details
        )

    @staticmethod
    def _parse(response: httpx.Response) -> Any:
        """Return the JSON body, or ``None`` for empty responses."""
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            details: dict[str, Any] = {"status": response.status_code}
            with suppress(Exception):
                details["content_type"] = response.headers.get("Content-Type")
            raise DocumentStoreUnavailable(
                "Document Store returned a non-JSON body.", details=details
            ) from exc

    @classmethod
    def _parse_write(cls, response: httpx.Response) -> Any:
        """Like :meth:`_parse`, but a 2xx write with an unreadable body returns ``None``.

        The store has already applied the write when this runs.
        """
        try:
            return cls._parse(response)
        except DocumentStoreUnavailable as exc:
            logger.warning(
                "document_store.unreadable_write_reply",
                extra=dict(exc.details),
            )
            return None
