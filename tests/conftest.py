"""Shared test fixtures for espoclient.

Provides a factory for clients wired to an :class:`httpx.MockTransport`
so tests can inspect the exact request that went out and choose the
response that comes back, without any network traffic.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

import httpx
import pytest

from espoclient import EspoClient

BASE_URL = "https://crm.example.com"

Handler = Callable[[httpx.Request], httpx.Response]


def _ok_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"ok": True})


# ---------------------------------------------------------------------------
# Request capture
# ---------------------------------------------------------------------------


@pytest.fixture
def sent_requests() -> list[httpx.Request]:
    """Every request that reached the mock transport, in order."""
    return []


@pytest.fixture
def make_client(sent_requests: list[httpx.Request]) -> Callable[..., EspoClient]:
    """Build an :class:`EspoClient` whose transport is a recording mock.

    The returned factory accepts an optional *handler* producing the
    response (default: ``200 {"ok": true}``) and forwards any other
    keyword arguments to :class:`EspoClient`.
    """
    clients: list[EspoClient] = []

    def factory(
        handler: Optional[Handler] = None,
        base_url: str = BASE_URL,
        **kwargs: Any,
    ) -> EspoClient:
        respond = handler or _ok_handler

        def record(request: httpx.Request) -> httpx.Response:
            request.read()
            sent_requests.append(request)
            return respond(request)

        http_client = httpx.Client(transport=httpx.MockTransport(record))
        client = EspoClient(base_url, http_client=http_client, **kwargs)
        clients.append(client)
        return client

    yield factory

    for client in clients:
        client.close()


@pytest.fixture
def last_request(sent_requests: list[httpx.Request]) -> Callable[[], httpx.Request]:
    """Return the most recent captured request."""

    def get() -> httpx.Request:
        assert sent_requests, "no request was sent"
        return sent_requests[-1]

    return get
