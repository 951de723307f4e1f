"""
GitHub REST API data source for repository statistics and files.

API Documentation: https://docs.github.com/en/rest/repos
Unauthenticated limit: 60 requests/hour; GH_TOKEN raises it.
"""

import base64
import binascii

from loguru import logger
from pydantic import BaseModel, Field

from jarvis_api.datasource.base import BaseDataSource
from jarvis_api.services.client import ResilientClient
from jarvis_api.services.errors import ServiceError
from jarvis_api.services.routes import CACHE_KEYS, upstream_url
from jarvis_api.services.transport import RequestDescriptor


class GitHubRepo(BaseModel):
    """Subset of the repository payload the landing page needs."""

    name: str = ""
    description: str | None = None
    stargazers_count: int = 0
    forks_count: int = 0
    open_issues_count: int = 0
    updated_at: str | None = None
    language: str | None = None
    topics: list[str] = Field(default_factory=list)


class GitHubContent(BaseModel):
    """A file returned by the contents API."""

    name: str
    type: str = "file"
    encoding: str | None = None
    content: str | None = None

    def decoded(self) -> str:
        """Decode the base64 payload."""
        if not self.content:
            raise ServiceError(f"GitHub file '{self.name}' has no content")
        try:
            return base64.b64decode(self.content).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise ServiceError(
                f"GitHub file '{self.name}' could not be decoded: {e}"
            ) from e


class GitHubSource(BaseDataSource[GitHubRepo]):
    """
    GitHub repository data source.

    Sends the v3 JSON media type and a User-Agent (required by GitHub), plus
    a bearer token when one is configured.
    """

    SERVICE_ID = "github"
    USER_AGENT = "terminal-jarvis-landing"

    def __init__(
        self,
        client: ResilientClient,
        repo: str,
        token: str | None = None,
    ):
        super().__init__(client)
        self.repo = repo
        self._token = token

    @property
    def service_id(self) -> str:
        return self.SERVICE_ID

    def is_configured(self) -> bool:
        return "/" in self.repo

    def default_headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": self.USER_AGENT,
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def fetch(self) -> GitHubRepo:
        """Fetch star/fork/issue counts and last update time."""
        data = await self._get_json(
            upstream_url("github_repo", repo=self.repo),
            cache_key=CACHE_KEYS["github_stats"],
        )
        repo = GitHubRepo.model_validate(data)
        logger.info(
            f"Fetched GitHub stats for {self.repo}: "
            f"{repo.stargazers_count} stars, {repo.forks_count} forks"
        )
        return repo

    def contents_request(self, path: str) -> RequestDescriptor:
        """Descriptor for a file in the contents API (base64 JSON payload)."""
        return RequestDescriptor(
            url=upstream_url("github_contents", repo=self.repo, path=path),
            headers=self.default_headers(),
            service_id=self.service_id,
        )

    async def probe(self) -> None:
        """HEAD the rate limit endpoint; raises if GitHub is unreachable."""
        await self._head(upstream_url("github_rate_limit"))
