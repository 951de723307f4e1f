"""
ToolsService - Supported tool catalogue read from the product repository.

The list comes from tools-manifest.toml in the GitHub repository. When the
manifest cannot be fetched or parsed, the built-in catalogue is served.
"""

import tomllib
from datetime import datetime, timezone
from typing import Any

from loguru import logger
from pydantic import ValidationError

from jarvis_api.datasource.github import GitHubContent, GitHubSource
from jarvis_api.services.client import ResilientClient
from jarvis_api.services.errors import ServiceError
from jarvis_api.services.routes import CACHE_KEYS
from jarvis_api.stats.models import Tool, ToolDetails, ToolsResponse

MANIFEST_PATH = "tools-manifest.toml"
COMMAND_PREFIX = "tjarvis"

KNOWN_TOOLS: list[Tool] = [
    Tool(
        name="Claude",
        description="Anthropic Claude integration",
        command="tjarvis claude",
        category="ai",
    ),
    Tool(
        name="Gemini",
        description="Google Gemini CLI tool",
        command="tjarvis gemini",
        category="ai",
    ),
    Tool(
        name="Qwen",
        description="Qwen development assistant",
        command="tjarvis qwen",
        category="analysis",
    ),
    Tool(
        name="OpenCode",
        description="Terminal-based AI coding agent",
        command="tjarvis opencode",
        category="ai",
    ),
    Tool(
        name="LLXPRT",
        description="Multi-provider AI development tool",
        command="tjarvis llxprt",
        category="coding",
    ),
    Tool(
        name="Codex",
        description="OpenAI Codex CLI for local development",
        command="tjarvis codex",
        category="coding",
    ),
    Tool(
        name="Crush",
        description="Multi-model AI assistant with LSP support",
        command="tjarvis crush",
        category="ai",
    ),
]

_KNOWN_CATEGORIES = {tool.name.lower(): tool.category for tool in KNOWN_TOOLS}
_VALID_CATEGORIES = {"ai", "coding", "utility", "analysis"}


def parse_tools_manifest(content: str) -> list[Tool]:
    """
    Parse the [[tools]] tables of a tools manifest.

    Entries without a name or description are skipped. `display_name` wins
    over `name` for display; the command always uses the CLI `name`.
    """
    manifest = tomllib.loads(content)
    tools: list[Tool] = []

    for entry in manifest.get("tools", []):
        cli_name = entry.get("name") or entry.get("display_name")
        description = entry.get("description")
        if not isinstance(cli_name, str) or not isinstance(description, str):
            continue
        if not cli_name or not description:
            continue

        category = entry.get("category")
        if category not in _VALID_CATEGORIES:
            category = _KNOWN_CATEGORIES.get(cli_name.lower(), "utility")

        tools.append(
            Tool(
                name=entry.get("display_name") or cli_name,
                description=description,
                command=f"{COMMAND_PREFIX} {cli_name.lower()}",
                category=category,
            )
        )

    return tools


class ToolsService:
    """
    Tool catalogue façade.

    Usage:
        service = ToolsService(client, github_source)
        response = await service.get_tools()
    """

    def __init__(self, client: ResilientClient, github: GitHubSource):
        self.client = client
        self.github = github

    async def get_tools(self) -> ToolsResponse:
        """Tools from the manifest, or the built-in catalogue. Never raises."""
        result = await self.client.execute(
            self.github.contents_request(MANIFEST_PATH),
            cache_key=CACHE_KEYS["tools_list"],
            fallback=self._known_tools,
        )

        if result.error is not None:
            return self._response(result.data)

        tools = self._parse_payload(result.data)
        if not tools:
            logger.warning("Tools manifest listed no tools, using built-in catalogue")
            tools = self._known_tools()

        return self._response(tools)

    async def get_tool_details(self, tool_name: str) -> ToolDetails | None:
        """Detailed view of one tool, None if the tool is not listed."""
        response = await self.get_tools()
        wanted = tool_name.lower()
        tool = next(
            (
                t
                for t in response.tools
                if t.name.lower() == wanted or t.command.split()[-1] == wanted
            ),
            None,
        )
        if tool is None:
            return None

        cli_name = tool.command.split()[-1]
        return ToolDetails(
            **tool.model_dump(),
            documentation=f"Comprehensive documentation for {tool.name}",
            examples=[
                f"{COMMAND_PREFIX} {cli_name} --analyze src/",
                f'{COMMAND_PREFIX} {cli_name} --prompt "Explain this function"',
                f"{COMMAND_PREFIX} {cli_name} --file main.js",
            ],
            dependencies=["node", "npm"],
            last_updated=datetime.now(timezone.utc).isoformat(),
        )

    async def refresh_tools(self) -> ToolsResponse:
        """Drop the cached manifest and fetch again."""
        await self.client.invalidate(CACHE_KEYS["tools_list"])
        return await self.get_tools()

    @staticmethod
    def _known_tools() -> list[Tool]:
        return [tool.model_copy() for tool in KNOWN_TOOLS]

    @staticmethod
    def _parse_payload(payload: Any) -> list[Tool]:
        try:
            content = GitHubContent.model_validate(payload).decoded()
            return parse_tools_manifest(content)
        except (ServiceError, ValidationError, tomllib.TOMLDecodeError) as e:
            logger.warning(f"Could not read tools manifest: {e}")
            return []

    @staticmethod
    def _response(tools: list[Tool]) -> ToolsResponse:
        return ToolsResponse(tools=tools, total_count=len(tools))
