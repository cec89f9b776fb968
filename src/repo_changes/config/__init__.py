"""Configuration for repo-changes."""

from repo_changes.config.logging import configure_logging
from repo_changes.config.search import SearchConfig, load_search_config
from repo_changes.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings", "SearchConfig", "load_search_config", "configure_logging"]
