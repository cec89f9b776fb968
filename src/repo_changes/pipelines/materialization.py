"""Copying changed files from a working tree into the output directory."""

import os
import shutil
import threading
from collections.abc import Iterable
from pathlib import Path

import structlog

from repo_changes.core.models.report import (
    ALREADY_EXISTS_REASON,
    NOT_FOUND_REASON,
    ProcessedFileRecord,
)

logger = structlog.get_logger(__name__)

SKIPPED_DIRECTORIES = frozenset({".git"})


class WorkingTreeIndex:
    """Basename to file path index over one repository working tree.

    Built with a single directory walk. When several files share a
    basename, the lexicographically smallest repository-relative path
    wins, so lookups are deterministic across runs.
    """

    def __init__(self, root: Path, entries: dict[str, str]) -> None:
        self._root = root
        self._entries = entries

    @classmethod
    def build(cls, root: Path, exclude: Iterable[Path] = ()) -> "WorkingTreeIndex":
        excluded = {p.resolve() for p in exclude}
        entries: dict[str, str] = {}
        for dirpath, dirnames, filenames in os.walk(root):
            current = Path(dirpath)
            dirnames[:] = sorted(
                d
                for d in dirnames
                if d not in SKIPPED_DIRECTORIES and (current / d).resolve() not in excluded
            )
            for filename in filenames:
                relative = (current / filename).relative_to(root).as_posix()
                known = entries.get(filename)
                if known is None or relative < known:
                    entries[filename] = relative
        return cls(root, entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, basename: str) -> bool:
        return basename in self._entries

    def lookup(self, basename: str) -> Path | None:
        relative = self._entries.get(basename)
        if relative is None:
            return None
        return self._root / relative


def copy_create_only(source: Path, destination: Path) -> None:
    """Copy ``source`` to ``destination``, failing if the destination exists.

    The existence check and the create are one atomic ``open(..., "xb")``,
    so concurrent writers cannot both claim the same destination. A
    partially written destination is removed before the error propagates.
    """
    created = False
    try:
        with source.open("rb") as src, destination.open("xb") as dst:
            created = True
            shutil.copyfileobj(src, dst)
    except OSError:
        if created:
            destination.unlink(missing_ok=True)
        raise

    try:
        shutil.copystat(source, destination)
    except OSError as exc:
        logger.warning("Could not copy file metadata", destination=str(destination), error=str(exc))


class FileMaterializer:
    """Copies each changed basename from a repository into the output directory.

    Every basename produces exactly one ``ProcessedFileRecord``. Nothing
    raised while handling one file stops the remaining files.
    """

    def materialize(
        self,
        repository_path: Path,
        changed_basenames: Iterable[str],
        output_directory: Path,
        cancel: threading.Event | None = None,
    ) -> list[ProcessedFileRecord]:
        repo = str(repository_path)
        index = WorkingTreeIndex.build(repository_path, exclude=[output_directory])
        logger.debug("Indexed working tree", repository=repo, files=len(index))

        records: list[ProcessedFileRecord] = []
        for basename in sorted(set(changed_basenames)):
            if cancel is not None and cancel.is_set():
                logger.info("Materialization cancelled", repository=repo, remaining=basename)
                break
            records.append(self._materialize_one(index, repo, basename, output_directory))
        return records

    def _materialize_one(
        self,
        index: WorkingTreeIndex,
        repo: str,
        basename: str,
        output_directory: Path,
    ) -> ProcessedFileRecord:
        source = index.lookup(basename)
        if source is None:
            logger.warning("Changed file not found in working tree", repository=repo, file_name=basename)
            return ProcessedFileRecord.failed(basename, repo, NOT_FOUND_REASON)

        destination = output_directory / basename
        try:
            copy_create_only(source, destination)
        except FileExistsError:
            logger.warning(
                "File already exists at destination",
                repository=repo,
                file_name=basename,
                destination=str(destination),
            )
            return ProcessedFileRecord.failed(basename, repo, ALREADY_EXISTS_REASON, str(source))
        except OSError as exc:
            logger.error(
                "Failed to copy file",
                repository=repo,
                file_name=basename,
                source=str(source),
                exc_info=True,
            )
            return ProcessedFileRecord.failed(
                basename, repo, str(exc) or type(exc).__name__, str(source)
            )

        logger.debug("Copied file", repository=repo, file_name=basename, source=str(source))
        return ProcessedFileRecord.copied(basename, repo, str(source))
