"""Tests for the httpx-backed transport."""

import httpx
import pytest

from jarvis_api.services.errors import NetworkError, RequestTimeoutError
from jarvis_api.services.transport import HttpxTransport


def _transport(handler) -> HttpxTransport:
    return HttpxTransport(
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
    )


async def test_json_body_parsed() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"stargazers_count": 48})

    transport = _transport(handler)
    response = await transport.send(
        "GET",
        "https://api.github.com/repos/a/b",
        {"User-Agent": "terminal-jarvis-landing"},
        None,
        1000,
    )
    await transport.close()

    assert response.status == 200
    assert response.ok
    assert response.body == {"stargazers_count": 48}
    assert seen[0].headers["User-Agent"] == "terminal-jarvis-landing"


async def test_text_body_returned_as_string() -> None:
    transport = _transport(lambda request: httpx.Response(200, text="plain"))

    response = await transport.send("GET", "https://example.com", {}, None, 1000)

    assert response.body == "plain"


async def test_empty_body_is_none() -> None:
    transport = _transport(lambda request: httpx.Response(200))

    response = await transport.send("HEAD", "https://registry.npmjs.org/", {}, None, 1000)

    assert response.body is None


async def test_error_status_returned_not_raised() -> None:
    transport = _transport(
        lambda request: httpx.Response(503, json={"message": "unavailable"})
    )

    response = await transport.send("GET", "https://example.com", {}, None, 1000)

    assert response.status == 503
    assert response.ok is False


async def test_timeout_mapped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    transport = _transport(handler)

    with pytest.raises(RequestTimeoutError) as exc_info:
        await transport.send("GET", "https://example.com", {}, None, 1500)

    assert exc_info.value.timeout_ms == 1500
    assert str(exc_info.value) == "Request timed out after 1500ms"
    assert exc_info.value.service_id is None
    assert isinstance(exc_info.value.__cause__, httpx.ConnectTimeout)


async def test_connection_failure_mapped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    transport = _transport(handler)

    with pytest.raises(NetworkError) as exc_info:
        await transport.send("GET", "https://example.com", {}, None, 1000)

    assert "ConnectError" in str(exc_info.value)
