"""
In-memory test doubles for the transport boundary and backoff sleep.
"""

from dataclasses import dataclass
from typing import Any

from jarvis_api.services.transport import TransportResponse


@dataclass
class SentRequest:
    method: str
    url: str
    headers: dict[str, str]
    body: Any


class FakeTransport:
    """
    Transport returning scripted outcomes per URL substring.

    Each route holds a list of outcomes consumed in order; the last one
    repeats forever. An outcome is a TransportResponse or an exception to
    raise. Unmatched URLs raise ConnectionError.
    """

    def __init__(self):
        self.calls: list[SentRequest] = []
        self.closed = False
        self._routes: list[tuple[str, str | None, list[Any]]] = []

    def add(self, pattern: str, *outcomes: Any, method: str | None = None) -> None:
        self._routes.append((pattern, method, list(outcomes)))

    def calls_to(self, pattern: str) -> list[SentRequest]:
        return [c for c in self.calls if pattern in c.url]

    async def send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: Any,
        timeout_ms: float,
    ) -> TransportResponse:
        self.calls.append(SentRequest(method, url, dict(headers), body))

        for pattern, route_method, outcomes in self._routes:
            if pattern not in url or (route_method and route_method != method):
                continue
            outcome = outcomes.pop(0) if len(outcomes) > 1 else outcomes[0]
            if callable(outcome) and not isinstance(outcome, BaseException):
                outcome = await outcome()
            if isinstance(outcome, BaseException):
                raise outcome
            return outcome

        raise ConnectionError(f"Connection refused: {url}")

    async def close(self) -> None:
        self.closed = True


class SleepRecorder:
    """Stands in for asyncio.sleep during backoff; records seconds."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def json_response(body: Any, status: int = 200) -> TransportResponse:
    return TransportResponse(
        status=status,
        headers={"content-type": "application/json"},
        body=body,
    )


# Upstream URL fragments for the default repo and packages
GITHUB_REPO = "api.github.com/repos/BA-CalderonMorales/terminal-jarvis"
NPM_DOWNLOADS = "api.npmjs.org/downloads/point/last-week/terminal-jarvis"
NPM_PACKAGE = "registry.npmjs.org/terminal-jarvis"
CRATES = "crates.io/api/v1/crates/terminal-jarvis"
GITHUB_PROBE = "api.github.com/rate_limit"
NPM_PROBE = "registry.npmjs.org/"


def route_all_upstreams(transport: FakeTransport) -> None:
    """Answer every live stats upstream with a healthy payload."""
    transport.add(
        GITHUB_REPO,
        json_response(
            {
                "stargazers_count": 120,
                "forks_count": 15,
                "open_issues_count": 3,
                "updated_at": "2025-05-30T10:00:00Z",
            }
        ),
    )
    transport.add(NPM_DOWNLOADS, json_response({"downloads": 5000}))
    transport.add(NPM_PACKAGE, json_response({"dist-tags": {"latest": "0.0.70"}}))
    transport.add(
        CRATES,
        json_response(
            {"crate": {"newest_version": "0.0.69", "recent_downloads": 900}}
        ),
    )
