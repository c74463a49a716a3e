from __future__ import annotations

import pytest
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.testclient import TestClient

from backoffice_api.domain.exceptions.base import DomainError
from backoffice_api.domain.exceptions.conversion import ConversionNotAllowed
from backoffice_api.domain.exceptions.documents import (
    DocumentNotFound,
    DocumentStoreUnavailable,
    DuplicateDocumentNumber,
)
from backoffice_api.domain.exceptions.lifecycle import InvalidMonetaryValue
from backoffice_api.infrastructure.http.errors import (
    handle_domain_error,
    handle_http_exception,
    handle_unhandled_exception,
    handle_validation_error,
    status_for_domain_error,
)
from backoffice_api.infrastructure.middleware.request_id import RequestIdMiddleware


@pytest.mark.parametrize(
    ("exc", "status"),
    [
        (DocumentNotFound(), 404),
        (ConversionNotAllowed(), 409),
        (DuplicateDocumentNumber(), 409),
        (InvalidMonetaryValue(), 422),
        (DocumentStoreUnavailable(), 503),
        (DomainError(), 500),
    ],
)
def test_status_for_domain_error(exc: DomainError, status: int) -> None:
    assert status_for_domain_error(exc) == status


def _app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(RequestIdMiddleware)
    app.add_exception_handler(DomainError, handle_domain_error)  # type: ignore[arg-type]
    app.add_exception_handler(
        RequestValidationError, handle_validation_error  # type: ignore[arg-type]
    )
    app.add_exception_handler(HTTPException, handle_http_exception)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, handle_unhandled_exception)

    @app.get("/missing")
    def missing() -> None:
        raise DocumentNotFound("Quotation not found.", details={"quotation_id": "q-9"})

    @app.get("/teapot")
    def teapot() -> None:
        raise HTTPException(status_code=418, detail="short and stout")

    @app.get("/boom")
    def boom() -> None:
        raise RuntimeError("kaput")

    @app.get("/typed/{n}")
    def typed(n: int) -> dict[str, int]:
        return {"n": n}

    return app


def test_domain_error_envelope_carries_trace_id() -> None:
    r = TestClient(_app()).get("/missing", headers={"X-Request-ID": "trace-1"})

    assert r.status_code == 404
    err = r.json()["error"]
    assert err["code"] == "DOCUMENT_NOT_FOUND"
    assert err["details"] == {"quotation_id": "q-9"}
    assert err["trace_id"] == "trace-1"


def test_validation_and_http_errors() -> None:
    client = TestClient(_app())

    invalid = client.get("/typed/abc")
    assert invalid.status_code == 422
    assert invalid.json()["error"]["code"] == "VALIDATION_ERROR"

    teapot = client.get("/teapot")
    assert teapot.status_code == 418
    assert teapot.json()["error"] == {
        "code": "HTTP_ERROR",
        "http_status": 418,
        "message": "short and stout",
        "trace_id": teapot.headers["X-Request-ID"],
    }


def test_unhandled_exception_is_500_without_leaking_message() -> None:
    r = TestClient(_app(), raise_server_exceptions=False).get("/boom")

    assert r.status_code == 500
    err = r.json()["error"]
    assert err["code"] == "INTERNAL_ERROR"
    assert "kaput" not in r.text
