"""
Service façade - typed results composed from upstream calls.
"""

from jarvis_api.stats.live_stats import LiveStatsService, compose_live_stats
from jarvis_api.stats.models import (
    HealthStatus,
    LiveStats,
    Tool,
    ToolDetails,
    ToolsResponse,
)
from jarvis_api.stats.tools import ToolsService, parse_tools_manifest

__all__ = [
    "LiveStatsService",
    "ToolsService",
    "compose_live_stats",
    "parse_tools_manifest",
    "HealthStatus",
    "LiveStats",
    "Tool",
    "ToolDetails",
    "ToolsResponse",
]
