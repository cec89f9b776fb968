"""Change-extraction pipelines."""

from repo_changes.pipelines.extraction import ChangeSetExtractor, filter_commits
from repo_changes.pipelines.materialization import FileMaterializer, WorkingTreeIndex
from repo_changes.pipelines.output import OutputPathResolver
from repo_changes.pipelines.scanner import RepositoryScanner

__all__ = [
    "ChangeSetExtractor",
    "FileMaterializer",
    "OutputPathResolver",
    "RepositoryScanner",
    "WorkingTreeIndex",
    "filter_commits",
]
