"""
Route table for the landing API and the upstream endpoints it proxies.
"""

from typing import Literal
from urllib.parse import quote

API_ROUTES: dict[str, dict[str, str]] = {
    "stats": {
        "live": "/api/stats/live",
        "health": "/api/stats/health",
    },
    "tools": {
        "list": "/api/tools/list",
        "details": "/api/tools/{tool_name}",
    },
}

UPSTREAM_ROUTES: dict[str, str] = {
    "github_repo": "https://api.github.com/repos/{repo}",
    "github_contents": "https://api.github.com/repos/{repo}/contents/{path}",
    "github_rate_limit": "https://api.github.com/rate_limit",
    "npm_downloads": "https://api.npmjs.org/downloads/point/last-week/{package}",
    "npm_package": "https://registry.npmjs.org/{package}",
    "npm_registry": "https://registry.npmjs.org/",
    "crates_package": "https://crates.io/api/v1/crates/{crate}",
}

RouteCategory = Literal["stats", "tools"]


def build_route(
    category: RouteCategory,
    route: str,
    params: dict[str, str] | None = None,
) -> str:
    """
    Build a concrete API path.

    Example:
        build_route("tools", "details", {"tool_name": "claude"})
        # "/api/tools/claude"
    """
    path = API_ROUTES[category][route]
    for key, value in (params or {}).items():
        path = path.replace(f"{{{key}}}", quote(value, safe=""))
    return path


def upstream_url(name: str, **params: str) -> str:
    """Format an upstream endpoint; `repo` keeps its owner/name slash."""
    template = UPSTREAM_ROUTES[name]
    escaped = {
        key: quote(value, safe="/" if key in ("repo", "path") else "")
        for key, value in params.items()
    }
    return template.format(**escaped)


# Cache keys used by the façade
CACHE_KEYS = {
    "github_stats": "github-stats",
    "npm_downloads": "npm-downloads",
    "npm_package": "npm-package",
    "crates_package": "crates-package",
    "tools_list": "tools-list",
}
