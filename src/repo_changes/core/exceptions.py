"""Exception hierarchy for repo-changes."""

from typing import Any


class RepoChangesError(Exception):
    """Base exception for all repo-changes errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(RepoChangesError):
    """Invalid configuration; raised before any repository is touched."""


class RepositoryError(RepoChangesError):
    """A git command failed for a single repository."""


class ScanAbortedError(RepoChangesError):
    """The target branch exists but is not the checked-out head.

    Copying from a working tree that does not reflect the analysed branch
    would produce wrong output, so the whole run stops.
    """

    def __init__(self, repository: str, branch: str) -> None:
        super().__init__(
            f"Branch '{branch}' is not checked out in repository {repository}",
            details={"repository": repository, "branch": branch},
        )
        self.repository = repository
        self.branch = branch
