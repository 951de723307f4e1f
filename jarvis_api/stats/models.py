"""
Façade result models.

Field names are snake_case in Python and camelCase on the wire, matching
the JSON the landing page consumes.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ToolCategory = Literal["ai", "coding", "utility", "analysis"]
ToolState = Literal["active", "loading", "error"]
ServiceState = Literal["up", "down", "degraded"]
OverallHealth = Literal["healthy", "degraded", "down"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DownloadStats(CamelModel):
    npm_weekly_downloads: int
    npm_version: str
    crates_version: str
    crates_downloads: int


class CommunityStats(CamelModel):
    github_stars: int
    github_forks: int
    open_issues: int
    last_commit: str


class ToolStatus(CamelModel):
    supported_tools: list[str]
    total_tool_count: int


class LiveStats(CamelModel):
    """Aggregated statistics shown in the landing page header."""

    version: str
    download_stats: DownloadStats
    community_stats: CommunityStats
    tool_status: ToolStatus


class ServiceHealth(CamelModel):
    github: ServiceState
    npm: ServiceState


class HealthStatus(CamelModel):
    status: OverallHealth
    timestamp: str
    services: ServiceHealth
    response_time: float


class Tool(CamelModel):
    name: str
    description: str
    command: str
    category: ToolCategory = "utility"
    status: ToolState = "active"


class ToolsResponse(CamelModel):
    tools: list[Tool]
    total_count: int
    categories: list[ToolCategory] = Field(
        default_factory=lambda: ["ai", "coding", "utility", "analysis"]
    )


class ToolDetails(Tool):
    documentation: str
    examples: list[str]
    dependencies: list[str]
    last_updated: str
