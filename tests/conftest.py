# tests/conftest.py
from __future__ import annotations

from collections.abc import AsyncIterator, Callable, Iterator
from datetime import datetime

import httpx
import pytest
from builders import FIXED_NOW

from backoffice_api.adapters.gateways.in_memory_document_store import InMemoryDocumentStore
from backoffice_api.config.settings import get_settings
from backoffice_api.domain.services.conversion_guard import ConversionGuard


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    return lambda: FIXED_NOW


@pytest.fixture
def store(fixed_clock: Callable[[], datetime]) -> InMemoryDocumentStore:
    return InMemoryDocumentStore(clock=fixed_clock)


@pytest.fixture
def _test_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Run the app against the in-process store with a fresh Settings cache."""
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("DOCUMENT_STORE_BACKEND", "memory")
    monkeypatch.delenv("DOCUMENT_STORE_BASE_URL", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
async def http_client(
    _test_env: None, store: InMemoryDocumentStore
) -> AsyncIterator[httpx.AsyncClient]:
    """ASGI client whose Document Store is the ``store`` fixture.

    ``ASGITransport`` does not run the lifespan, so the state it would set is
    assigned directly.
    """
    from backoffice_api.main import create_app

    app = create_app()
    app.state.document_store = store
    app.state.conversion_guard = ConversionGuard()
    app.state.settings = get_settings()

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
