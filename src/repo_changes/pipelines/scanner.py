"""Multi-repository scanning pipeline."""

import threading
from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path

import structlog

from repo_changes.core.exceptions import ConfigurationError, RepositoryError, ScanAbortedError
from repo_changes.core.models.criteria import SearchCriteria
from repo_changes.core.models.report import RunReport, ScanResult, ScanStatus
from repo_changes.core.models.repository import BranchInfo, PathOverride, RepositoryLocation
from repo_changes.git.reader import GitRepositoryReader
from repo_changes.pipelines.extraction import ChangeSetExtractor, filter_commits
from repo_changes.pipelines.materialization import FileMaterializer

logger = structlog.get_logger(__name__)


class RepositoryScanner:
    """Drives extraction and materialization over every repository under a root.

    Orchestrates, per candidate directory:
    1. Open it as a repository (soft skip if invalid)
    2. Find the target branch (soft skip if absent)
    3. Require the branch to be checked out (abort the whole run otherwise)
    4. Filter the branch history by author and date (soft skip if empty)
    5. Extract changed basenames and copy them into the output directory

    Steps 1-3 always run in the calling thread in enumeration order, so no
    repository listed after an offending one is ever processed. With
    ``workers > 1``, steps 4-5 run on a thread pool and stop cooperatively
    once an abort is signalled.
    """

    def __init__(
        self,
        reader: GitRepositoryReader,
        extractor: ChangeSetExtractor | None = None,
        materializer: FileMaterializer | None = None,
        overrides: Sequence[PathOverride] = (),
        workers: int = 1,
    ) -> None:
        self._reader = reader
        self._extractor = extractor or ChangeSetExtractor(reader)
        self._materializer = materializer or FileMaterializer()
        self._overrides = list(overrides)
        self._workers = max(1, workers)

    def discover(self, root_directory: Path, output_directory: Path | None = None) -> list[RepositoryLocation]:
        """List candidate repository directories, sorted by name."""
        root = Path(root_directory).expanduser()
        if not root.is_dir():
            raise ConfigurationError(
                f"Projects path does not exist: {root}",
                details={"projects_path": str(root)},
            )
        root = root.resolve()
        excluded = output_directory.resolve() if output_directory is not None else None

        locations = []
        for directory in sorted(p for p in root.iterdir() if p.is_dir()):
            if excluded is not None and directory.resolve() == excluded:
                continue
            locations.append(self._apply_overrides(root, directory))

        if not locations:
            raise ConfigurationError(
                f"No project directories found in {root}",
                details={"projects_path": str(root)},
            )
        return locations

    def _apply_overrides(self, root: Path, directory: Path) -> RepositoryLocation:
        for override in self._overrides:
            if override.applies_to(directory):
                rewritten = override.rewrite(root)
                logger.info(
                    "Rewriting repository path",
                    original=str(directory),
                    rewritten=str(rewritten),
                )
                return RepositoryLocation(path=rewritten, source_name=directory.name)
        return RepositoryLocation(path=directory, source_name=directory.name)

    def scan(
        self,
        root_directory: Path,
        criteria: SearchCriteria,
        output_directory: Path,
        report: RunReport | None = None,
    ) -> ScanResult:
        locations = self.discover(root_directory, output_directory)
        report = report if report is not None else RunReport()
        cancel = threading.Event()

        logger.info(
            "Starting scan",
            projects_path=str(root_directory),
            branch=criteria.branch_name,
            author=criteria.author_email,
            candidates=len(locations),
            workers=self._workers,
        )

        status = ScanStatus.COMPLETED
        futures: list[Future] = []
        executor = ThreadPoolExecutor(max_workers=self._workers) if self._workers > 1 else None
        try:
            for location in locations:
                try:
                    branch = self._check_branch(location, criteria, report)
                except ScanAbortedError as exc:
                    logger.error(
                        "Target branch is not checked out, you need to change this before searching",
                        repository=exc.repository,
                        branch=exc.branch,
                    )
                    cancel.set()
                    report.mark_aborted(exc.message)
                    status = ScanStatus.ABORTED
                    break
                if branch is None:
                    continue

                if executor is None:
                    self._process(location, branch, criteria, output_directory, report, cancel)
                else:
                    futures.append(
                        executor.submit(
                            self._process, location, branch, criteria, output_directory, report, cancel
                        )
                    )
        finally:
            if executor is not None:
                executor.shutdown(wait=True)

        for future in futures:
            future.result()

        summary = report.summary()
        logger.info(
            "Finished search and copy process",
            status=status.value,
            copied=summary.copied_count,
            not_processed=summary.failed_count,
        )
        return ScanResult(status=status, report=report, candidates=len(locations))

    def _check_branch(
        self,
        location: RepositoryLocation,
        criteria: SearchCriteria,
        report: RunReport,
    ) -> BranchInfo | None:
        """Validate a candidate and return its target branch, or None to skip it.

        Raises ScanAbortedError when the branch exists but is not checked out.
        """
        path = str(location.path)
        try:
            with self._reader.open_repository(location.path) as repo:
                branches = self._reader.branches(repo)
        except RepositoryError as exc:
            logger.info("Skipping directory, not a valid repository", repository=path, reason=exc.message)
            report.mark_skipped(path, "not a valid repository")
            return None

        branch = next((b for b in branches if b.name == criteria.branch_name), None)
        if branch is None:
            logger.info("Skipping repository, branch not found", repository=path, branch=criteria.branch_name)
            report.mark_skipped(path, f"branch '{criteria.branch_name}' not found")
            return None
        if not branch.is_checked_out:
            raise ScanAbortedError(path, criteria.branch_name)
        return branch

    def _process(
        self,
        location: RepositoryLocation,
        branch: BranchInfo,
        criteria: SearchCriteria,
        output_directory: Path,
        report: RunReport,
        cancel: threading.Event,
    ) -> None:
        path = str(location.path)
        if cancel.is_set():
            logger.info("Scan aborted, repository not processed", repository=path)
            return

        logger.info("Search for project repo in progress", repository=path, branch=branch.name)
        try:
            with self._reader.open_repository(location.path) as repo:
                commits = self._reader.commits(repo, branch.ref)
                matching = filter_commits(commits, criteria)
                if not matching:
                    logger.info("No matching commits, skipping repository", repository=path, commits=len(commits))
                    report.mark_skipped(path, "no matching commits")
                    return
                changed = self._extractor.extract(repo, matching)
                repo_path = repo.path
        except RepositoryError as exc:
            logger.warning(
                "Skipping repository after git failure",
                repository=path,
                error=exc.message,
                details=exc.details,
            )
            report.mark_skipped(path, exc.message)
            return

        logger.info(
            "Extracted changed files",
            repository=path,
            matching_commits=len(matching),
            changed_files=len(changed),
        )
        records = self._materializer.materialize(repo_path, changed, output_directory, cancel)
        report.accumulate(records)
        report.mark_scanned(path)

        failed = sum(1 for r in records if not r.succeeded)
        logger.info("End process for project repo", repository=path, copied=len(records) - failed)
        if failed:
            logger.warning("Some files not processed for project repo", repository=path, not_processed=failed)
