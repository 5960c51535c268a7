from dataclasses import dataclass, field
from logging import getLogger
from typing import Any, Optional, Protocol, runtime_checkable

from httpx import AsyncClient, Headers

from ._utils._request_spec import PreparedRequest
from ._utils._ssl_context import get_httpx_client_kwargs


@dataclass(frozen=True)
class TransportResponse:
    """Raw outcome of a completed exchange, before any status check."""

    status_code: int
    content: bytes
    headers: Headers = field(default_factory=Headers)


@runtime_checkable
class Transport(Protocol):
    """Executes a prepared request.

    Implementations return the status code and body of any response they
    receive, whatever the status, and raise for connection level failures.
    Pooling, retries, redirects and caching are the transport's business.
    """

    async def execute(self, request: PreparedRequest) -> TransportResponse: ...


class HttpxTransport:
    """Transport backed by ``httpx.AsyncClient``.

    With an injected client, requests go through it and its lifecycle stays
    with the caller. Without one, each request opens and closes its own
    client, so the transport can be used from any event loop.
    """

    def __init__(self, client: Optional[AsyncClient] = None, **client_kwargs: Any):
        self._logger = getLogger("httpfluent")
        self._client = client
        self._client_kwargs = client_kwargs

    async def execute(self, request: PreparedRequest) -> TransportResponse:
        self._logger.debug(f"Request: {request.method} {request.url}")
        self._logger.debug(f"HEADERS: {request.headers}")

        if self._client is not None:
            return await self._send(self._client, request)

        client_kwargs = {**get_httpx_client_kwargs(), **self._client_kwargs}
        async with AsyncClient(**client_kwargs) as client:
            return await self._send(client, request)

    async def _send(
        self, client: AsyncClient, request: PreparedRequest
    ) -> TransportResponse:
        response = await client.request(
            request.method,
            request.url,
            headers=request.headers,
            content=request.content,
        )
        self._logger.debug(
            f"Response: {response.status_code} {request.method} {request.url}"
        )
        return TransportResponse(
            status_code=response.status_code,
            content=response.content,
            headers=response.headers,
        )
