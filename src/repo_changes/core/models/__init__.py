"""Domain models for repo-changes."""

from repo_changes.core.models.criteria import SearchCriteria
from repo_changes.core.models.report import (
    ALREADY_EXISTS_REASON,
    NOT_FOUND_REASON,
    ProcessedFileRecord,
    RunReport,
    RunSummary,
    ScanResult,
    ScanStatus,
    SkippedRepository,
)
from repo_changes.core.models.repository import (
    BranchInfo,
    ChangeKind,
    CommitInfo,
    DiffEntry,
    PathOverride,
    RepositoryLocation,
)

__all__ = [
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
    "SkippedRepository",
    "NOT_FOUND_REASON",
    "ALREADY_EXISTS_REASON",
]
