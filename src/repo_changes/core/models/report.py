"""Per-file outcomes and the run-wide report."""

import threading
from enum import Enum
from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field, model_validator

NOT_FOUND_REASON = "not found in repository"
ALREADY_EXISTS_REASON = "already exists at destination"


class ProcessedFileRecord(BaseModel):
    """Outcome of materializing one changed file from one repository."""

    model_config = ConfigDict(frozen=True)

    file_name: str
    repository_path: str
    succeeded: bool
    error_reason: str | None = None
    source_path: str | None = None

    @model_validator(mode="after")
    def _reason_iff_failed(self) -> "ProcessedFileRecord":
        if self.succeeded and self.error_reason is not None:
            raise ValueError("a succeeded record cannot carry an error_reason")
        if not self.succeeded and not self.error_reason:
            raise ValueError("a failed record requires an error_reason")
        return self

    @classmethod
    def copied(cls, file_name: str, repository_path: str, source_path: str) -> "ProcessedFileRecord":
        return cls(
            file_name=file_name,
            repository_path=repository_path,
            succeeded=True,
            source_path=source_path,
        )

    @classmethod
    def failed(
        cls,
        file_name: str,
        repository_path: str,
        reason: str,
        source_path: str | None = None,
    ) -> "ProcessedFileRecord":
        return cls(
            file_name=file_name,
            repository_path=repository_path,
            succeeded=False,
            error_reason=reason,
            source_path=source_path,
        )


class SkippedRepository(BaseModel):
    """A repository omitted from the run without failing it."""

    model_config = ConfigDict(frozen=True)

    repository_path: str
    reason: str


class RunSummary(BaseModel):
    """Aggregate counts and failure list for a finished run."""

    copied_count: int = 0
    failed_count: int = 0
    failures: list[ProcessedFileRecord] = Field(default_factory=list)
    repositories_scanned: list[str] = Field(default_factory=list)
    repositories_skipped: list[SkippedRepository] = Field(default_factory=list)
    aborted: bool = False
    abort_reason: str | None = None


class RunReport:
    """Accumulates per-file outcomes across all repositories.

    Safe to share between repository workers; every mutation holds the
    internal lock. Insertion order is preserved.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: list[ProcessedFileRecord] = []
        self._scanned: list[str] = []
        self._skipped: list[SkippedRepository] = []
        self._abort_reason: str | None = None

    def accumulate(self, records: Iterable[ProcessedFileRecord]) -> None:
        records = list(records)
        with self._lock:
            self._records.extend(records)

    def mark_scanned(self, repository_path: str) -> None:
        with self._lock:
            self._scanned.append(repository_path)

    def mark_skipped(self, repository_path: str, reason: str) -> None:
        with self._lock:
            self._skipped.append(SkippedRepository(repository_path=repository_path, reason=reason))

    def mark_aborted(self, reason: str) -> None:
        with self._lock:
            if self._abort_reason is None:
                self._abort_reason = reason

    @property
    def records(self) -> list[ProcessedFileRecord]:
        with self._lock:
            return list(self._records)

    @property
    def aborted(self) -> bool:
        with self._lock:
            return self._abort_reason is not None

    def summary(self) -> RunSummary:
        with self._lock:
            failures = [r for r in self._records if not r.succeeded]
            return RunSummary(
                copied_count=len(self._records) - len(failures),
                failed_count=len(failures),
                failures=failures,
                repositories_scanned=list(self._scanned),
                repositories_skipped=list(self._skipped),
                aborted=self._abort_reason is not None,
                abort_reason=self._abort_reason,
            )


class ScanStatus(str, Enum):
    """How a scan ended."""

    COMPLETED = "completed"
    ABORTED = "aborted"


class ScanResult(BaseModel):
    """Return value of a repository scan."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    status: ScanStatus
    report: RunReport
    candidates: int = 0
