"""Resolution of the output directory for a run."""

from datetime import date
from pathlib import Path

import structlog

from repo_changes.core.exceptions import ConfigurationError

logger = structlog.get_logger(__name__)

DEFAULT_OUTPUT_PREFIX = "ChangedFilesFromRepository"


def contains_files(directory: Path) -> bool:
    """Return True if any file exists anywhere under ``directory``."""
    return any(not p.is_dir() for p in directory.rglob("*"))


class OutputPathResolver:
    """Decides where copied files go.

    An explicit destination must already exist and hold no files. Without
    one, ``<root>/ChangedFilesFromRepository_<YYYYMMDD>`` is used and
    created when absent; a non-empty pre-existing default is rejected too.
    """

    def __init__(self, today: date | None = None) -> None:
        self._today = today

    def default_path(self, root_directory: Path) -> Path:
        stamp = (self._today or date.today()).strftime("%Y%m%d")
        return root_directory / f"{DEFAULT_OUTPUT_PREFIX}_{stamp}"

    def planned_path(self, root_directory: Path, explicit_path: Path | None = None) -> Path:
        """The directory resolve() would return, without touching the filesystem."""
        if explicit_path is not None:
            return Path(explicit_path).expanduser().resolve()
        return self.default_path(Path(root_directory).expanduser().resolve())

    def resolve(self, root_directory: Path, explicit_path: Path | None = None) -> Path:
        if explicit_path is not None:
            destination = Path(explicit_path).expanduser().resolve()
            if not destination.is_dir():
                raise ConfigurationError(
                    f"Destination output path does not exist: {destination}",
                    details={"destination": str(destination)},
                )
            if contains_files(destination):
                raise ConfigurationError(
                    f"Destination output path is not empty: {destination}",
                    details={"destination": str(destination)},
                )
            logger.info("Using explicit output directory", destination=str(destination))
            return destination

        destination = self.default_path(Path(root_directory).expanduser().resolve())
        if destination.exists():
            if not destination.is_dir():
                raise ConfigurationError(
                    f"Default output path exists and is not a directory: {destination}",
                    details={"destination": str(destination)},
                )
            if contains_files(destination):
                raise ConfigurationError(
                    f"Default output directory is not empty: {destination}",
                    details={"destination": str(destination)},
                )
        else:
            try:
                destination.mkdir(parents=True)
            except OSError as exc:
                raise ConfigurationError(
                    f"Cannot create output directory {destination}: {exc}",
                    details={"destination": str(destination)},
                ) from exc
            logger.info("Created output directory", destination=str(destination))
        return destination
