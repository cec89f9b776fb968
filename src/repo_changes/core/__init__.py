"""Core domain models and exceptions for repo-changes."""

from repo_changes.core.exceptions import (
    ConfigurationError,
    RepoChangesError,
    RepositoryError,
    ScanAbortedError,
)
from repo_changes.core.models import (
    BranchInfo,
    ChangeKind,
    CommitInfo,
    DiffEntry,
    PathOverride,
    ProcessedFileRecord,
    RepositoryLocation,
    RunReport,
    RunSummary,
    ScanResult,
    ScanStatus,
    SearchCriteria,
)

__all__ = [
    # Models
    "SearchCriteria",
    "RepositoryLocation",
    "PathOverride",
    "BranchInfo",
    "CommitInfo",
    "ChangeKind",
    "DiffEntry",
    "ProcessedFileRecord",
    "RunReport",
    "RunSummary",
    "ScanResult",
    "ScanStatus",
    # Exceptions
    "RepoChangesError",
    "ConfigurationError",
    "RepositoryError",
    "ScanAbortedError",
]
