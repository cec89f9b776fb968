"""Search service: wires the pipeline for a single run."""

from enum import IntEnum
from pathlib import Path

import structlog
from pydantic import BaseModel, ConfigDict

from repo_changes.config.search import SearchConfig
from repo_changes.config.settings import Settings
from repo_changes.core.exceptions import ConfigurationError
from repo_changes.core.models.report import RunSummary, ScanStatus
from repo_changes.git.reader import GitRepositoryReader
from repo_changes.pipelines.extraction import ChangeSetExtractor
from repo_changes.pipelines.materialization import FileMaterializer
from repo_changes.pipelines.output import OutputPathResolver
from repo_changes.pipelines.scanner import RepositoryScanner
from repo_changes.utils.reporting import write_json_report

logger = structlog.get_logger(__name__)


class ExitCode(IntEnum):
    """Process exit codes."""

    OK = 0
    COMPLETED_WITH_FAILURES = 1
    CONFIGURATION_ERROR = 2
    ABORTED = 3


class SearchOutcome(BaseModel):
    """Result of a run, ready for presentation."""

    model_config = ConfigDict(frozen=True)

    summary: RunSummary
    output_directory: Path
    exit_code: ExitCode


class SearchService:
    """Runs one search: output resolution, scanning, reporting.

    Raises ConfigurationError before any repository is touched when the
    payload, the destination or the report path is invalid.
    """

    def __init__(
        self,
        settings: Settings,
        reader: GitRepositoryReader | None = None,
        resolver: OutputPathResolver | None = None,
    ) -> None:
        self._settings = settings
        self._reader = reader or GitRepositoryReader(settings.git_executable)
        self._resolver = resolver or OutputPathResolver()

    def run(self, config: SearchConfig) -> SearchOutcome:
        report_path = self._report_path()
        criteria = config.to_criteria()
        logger.info(
            "Start search",
            projects_path=str(config.projects_path),
            branch=criteria.branch_name,
            author=criteria.author_email,
            date_from=criteria.date_from.isoformat(),
            date_to=criteria.date_to.isoformat(),
        )

        scanner = RepositoryScanner(
            reader=self._reader,
            extractor=ChangeSetExtractor(self._reader),
            materializer=FileMaterializer(),
            overrides=config.path_overrides,
            workers=self._settings.workers,
        )
        # Fail on an empty projects root before creating the default output directory
        planned = self._resolver.planned_path(config.projects_path, config.destination_output_path)
        scanner.discover(config.projects_path, planned)

        output_directory = self._resolver.resolve(config.projects_path, config.destination_output_path)
        result = scanner.scan(config.projects_path, criteria, output_directory)
        summary = result.report.summary()

        if report_path is not None:
            try:
                write_json_report(summary, report_path, output_directory)
            except OSError as exc:
                logger.error("Failed to write JSON report", path=str(report_path), error=str(exc), exc_info=True)
            else:
                logger.info("Wrote JSON report", path=str(report_path))

        return SearchOutcome(
            summary=summary,
            output_directory=output_directory,
            exit_code=exit_code_for(result.status, summary),
        )

    def _report_path(self) -> Path | None:
        if not self._settings.report_json:
            return None
        path = Path(self._settings.report_json).expanduser()
        if not path.parent.is_dir():
            raise ConfigurationError(
                f"Report directory does not exist: {path.parent}",
                details={"report_json": str(path)},
            )
        return path


def exit_code_for(status: ScanStatus, summary: RunSummary) -> ExitCode:
    if status is ScanStatus.ABORTED:
        return ExitCode.ABORTED
    if summary.failed_count:
        return ExitCode.COMPLETED_WITH_FAILURES
    return ExitCode.OK
