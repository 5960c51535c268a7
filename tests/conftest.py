from concurrent.futures import ThreadPoolExecutor
from typing import Generator

import pytest

from httpfluent import HTTPConfiguration, reset_configuration
from tests.utils.stubs import StubTransport


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Clean environment variables and the default configuration."""
    monkeypatch.delenv("HTTPFLUENT_PERMITTED_STATUS_CODES", raising=False)
    monkeypatch.delenv("HTTPFLUENT_DEFAULT_HEADERS", raising=False)
    monkeypatch.delenv("HTTPFLUENT_DISABLE_SSL_VERIFY", raising=False)
    monkeypatch.delenv("HTTPFLUENT_TIMEOUT", raising=False)
    monkeypatch.delenv("SSL_CERT_FILE", raising=False)
    monkeypatch.delenv("REQUESTS_CA_BUNDLE", raising=False)
    monkeypatch.delenv("SSL_CERT_DIR", raising=False)
    reset_configuration()
    yield
    reset_configuration()


@pytest.fixture
def configuration() -> HTTPConfiguration:
    return HTTPConfiguration()


@pytest.fixture
def queue() -> Generator[ThreadPoolExecutor, None, None]:
    executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="test-queue")
    yield executor
    executor.shutdown(wait=True)


@pytest.fixture
def transport() -> StubTransport:
    return StubTransport(status_code=200, content=b'{"id": 1}')
