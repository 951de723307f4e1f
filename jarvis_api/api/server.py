"""FastAPI server exposing live statistics, upstream health and tools."""

import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator

from fastapi import FastAPI, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from jarvis_api.datasource.github import GitHubSource
from jarvis_api.services.client import ResilientClient
from jarvis_api.services.routes import API_ROUTES
from jarvis_api.services.transport import Transport
from jarvis_api.settings import Settings, load_settings
from jarvis_api.stats.live_stats import LiveStatsService
from jarvis_api.stats.models import (
    HealthStatus,
    LiveStats,
    ToolDetails,
    ToolsResponse,
)
from jarvis_api.stats.tools import ToolsService

HEALTH_STATUS_CODES = {"healthy": 200, "degraded": 207, "down": 503}


def _error_body(error: str, message: str, details: str) -> dict[str, str]:
    return {
        "error": error,
        "message": message,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "details": details,
    }


class StatsServer:
    """HTTP surface over the live stats and tools façades."""

    def __init__(
        self,
        client: ResilientClient,
        live_stats: LiveStatsService,
        tools: ToolsService,
    ):
        self.client = client
        self.live_stats = live_stats
        self.tools = tools
        self.app = FastAPI(title="Terminal Jarvis Stats API", lifespan=self._lifespan)

        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["GET", "OPTIONS"],
            allow_headers=["Content-Type", "Authorization"],
        )

        # Register routes
        self.app.get(API_ROUTES["stats"]["live"], response_model=LiveStats)(
            self.get_live_stats
        )
        self.app.get(API_ROUTES["stats"]["health"], response_model=HealthStatus)(
            self.get_health
        )
        self.app.get(API_ROUTES["tools"]["list"], response_model=ToolsResponse)(
            self.list_tools
        )
        self.app.get(API_ROUTES["tools"]["details"], response_model=ToolDetails)(
            self.get_tool_details
        )

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI) -> AsyncIterator[None]:
        logger.info(f"Stats API starting ({self.client.config.environment.value})")
        yield
        await self.client.close()
        logger.info("Stats API stopped")

    async def get_live_stats(self, response: Response):
        """Aggregated live statistics; degrades field by field."""
        started = time.perf_counter()
        try:
            stats = await self.live_stats.fetch_live_stats()
        except Exception as e:
            logger.error(f"[Live Stats API] Error: {e}")
            return JSONResponse(
                status_code=500,
                content=_error_body(
                    "External API temporarily unavailable",
                    "Unable to fetch live statistics",
                    str(e),
                ),
            )

        elapsed_ms = (time.perf_counter() - started) * 1000
        response.headers["Cache-Control"] = "s-maxage=180, stale-while-revalidate=300"
        response.headers["X-Response-Time"] = f"{elapsed_ms:.0f}"
        response.headers["X-Generated-At"] = datetime.now(timezone.utc).isoformat()
        return stats

    async def get_health(self):
        """Upstream availability; 200 healthy, 207 degraded, 503 down."""
        try:
            health = await self.live_stats.get_health()
        except Exception as e:
            logger.error(f"[Health Check API] Error: {e}")
            return JSONResponse(
                status_code=503,
                content={
                    "status": "down",
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                    "services": {"github": "down", "npm": "down"},
                    "responseTime": 0,
                    "error": str(e) or "Health check failed",
                },
            )

        return JSONResponse(
            status_code=HEALTH_STATUS_CODES[health.status],
            content=health.model_dump(mode="json", by_alias=True),
            headers={
                "Cache-Control": "no-cache, no-store, must-revalidate",
                "X-Health-Status": health.status,
                "X-Response-Time": f"{health.response_time:.0f}",
            },
        )

    async def list_tools(self, response: Response):
        """Supported tools."""
        try:
            tools = await self.tools.get_tools()
        except Exception as e:
            logger.error(f"[Tools List API] Error: {e}")
            return JSONResponse(
                status_code=500,
                content=_error_body(
                    "Unable to fetch tools list",
                    "Tools service temporarily unavailable",
                    str(e),
                ),
            )

        response.headers["Cache-Control"] = "s-maxage=300, stale-while-revalidate=600"
        response.headers["X-Generated-At"] = datetime.now(timezone.utc).isoformat()
        response.headers["X-Tool-Count"] = str(tools.total_count)
        return tools

    async def get_tool_details(self, tool_name: str):
        """Details for one tool."""
        details = await self.tools.get_tool_details(tool_name)
        if details is None:
            raise HTTPException(status_code=404, detail=f"Tool '{tool_name}' not found")
        return details


def create_app(
    settings: Settings | None = None,
    transport: Transport | None = None,
    client: ResilientClient | None = None,
) -> FastAPI:
    """Create the FastAPI app with one client for the selected profile.

    Args:
        settings: Loaded settings; read from the environment when omitted
        transport: Transport for the default client (httpx when omitted)
        client: Fully constructed client, overriding `transport`

    Returns:
        FastAPI app
    """
    settings = settings or load_settings()
    client = client or ResilientClient(settings.api, transport=transport)
    github = GitHubSource(client, settings.github_repo, token=settings.github_token)

    server = StatsServer(
        client=client,
        live_stats=LiveStatsService.from_settings(client, settings),
        tools=ToolsService(client, github),
    )
    return server.app
