"""Application services."""

from repo_changes.services.search import ExitCode, SearchOutcome, SearchService

__all__ = ["ExitCode", "SearchOutcome", "SearchService"]
