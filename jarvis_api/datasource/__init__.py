from jarvis_api.datasource.base import BaseDataSource
from jarvis_api.datasource.crates import CratesSource
from jarvis_api.datasource.github import GitHubSource
from jarvis_api.datasource.npm import NpmSource

__all__ = ["BaseDataSource", "CratesSource", "GitHubSource", "NpmSource"]
