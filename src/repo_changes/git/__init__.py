"""Git integration module for repo-changes."""

from repo_changes.git.reader import GitRepositoryReader, RepositoryHandle

__all__ = ["GitRepositoryReader", "RepositoryHandle"]
