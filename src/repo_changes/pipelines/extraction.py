"""Changed-file set extraction from commit history."""

from collections.abc import Iterable
from pathlib import PurePosixPath

import structlog

from repo_changes.core.models.criteria import SearchCriteria
from repo_changes.core.models.repository import ChangeKind, CommitInfo
from repo_changes.git.reader import GitRepositoryReader, RepositoryHandle

logger = structlog.get_logger(__name__)

# Deleted files cannot be copied, and a rename is unrelated to its old name.
COLLECTED_KINDS = frozenset({ChangeKind.ADDED, ChangeKind.MODIFIED})


def filter_commits(commits: Iterable[CommitInfo], criteria: SearchCriteria) -> list[CommitInfo]:
    """Keep commits authored by the criteria's email inside its date window."""
    return [commit for commit in commits if criteria.matches(commit)]


class ChangeSetExtractor:
    """Derives the set of changed file basenames for a list of commits.

    Each commit is diffed against its first parent (root commits against the
    empty tree). Only added and modified entries count, and paths are reduced
    to their basename, so ``src/a.txt`` and ``docs/a.txt`` collapse into a
    single ``a.txt`` entry.
    """

    def __init__(self, reader: GitRepositoryReader) -> None:
        self._reader = reader

    def extract(
        self,
        repository: RepositoryHandle,
        matching_commits: Iterable[CommitInfo],
    ) -> set[str]:
        changed: set[str] = set()
        for commit in matching_commits:
            entries = self._reader.diff_trees(repository, commit.commit_id, commit.first_parent)
            for entry in entries:
                if entry.change_kind not in COLLECTED_KINDS:
                    continue
                name = PurePosixPath(entry.path).name
                if name:
                    changed.add(name)

            logger.debug(
                "Diffed commit",
                repository=str(repository.path),
                commit=commit.commit_id[:8],
                root=commit.is_root,
                entries=len(entries),
            )
        return changed
