"""Pytest configuration and fixtures."""

import os
import subprocess
from pathlib import Path

import pytest
import structlog

AUTHOR = "dev@example.com"
IN_WINDOW = "2024-03-10T12:00:00+00:00"


class GitRepo:
    """A throwaway git repository driven through the git CLI."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def _env(self, email: str, when: str) -> dict[str, str]:
        env = dict(os.environ)
        env.update(
            {
                "GIT_CONFIG_NOSYSTEM": "1",
                "GIT_CONFIG_GLOBAL": os.devnull,
                "GIT_AUTHOR_NAME": "Test",
                "GIT_AUTHOR_EMAIL": email,
                "GIT_AUTHOR_DATE": when,
                "GIT_COMMITTER_NAME": "Test",
                "GIT_COMMITTER_EMAIL": email,
                "GIT_COMMITTER_DATE": when,
            }
        )
        return env

    def git(self, *args: str, email: str = AUTHOR, when: str = IN_WINDOW) -> str:
        result = subprocess.run(
            ["git", "-c", "commit.gpgsign=false", *args],
            cwd=self.path,
            capture_output=True,
            text=True,
            check=True,
            env=self._env(email, when),
        )
        return result.stdout.strip()

    def write(self, relative: str, content: str = "content\n") -> Path:
        target = self.path / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content)
        return target

    def delete(self, relative: str) -> None:
        (self.path / relative).unlink()

    def commit(self, message: str = "change", email: str = AUTHOR, when: str = IN_WINDOW) -> str:
        self.git("add", "-A", email=email, when=when)
        self.git("commit", "-q", "-m", message, email=email, when=when)
        return self.git("rev-parse", "HEAD")

    def checkout_new(self, branch: str) -> None:
        self.git("checkout", "-q", "-b", branch)


@pytest.fixture
def make_git_repo():
    """Return a callable creating an initialised repository on branch ``main``."""

    def _make(path: Path) -> GitRepo:
        path.mkdir(parents=True, exist_ok=True)
        repo = GitRepo(path)
        repo.git("init", "-q")
        repo.git("symbolic-ref", "HEAD", "refs/heads/main")
        return repo

    return _make


@pytest.fixture
def git_repo(tmp_path: Path, make_git_repo) -> GitRepo:
    """A repository with one root commit adding three files."""
    repo = make_git_repo(tmp_path / "test-repo")
    repo.write("README.md", "# Test Repo\n")
    repo.write("src/a.txt", "a\n")
    repo.write("docs/guide.md", "guide\n")
    repo.commit("Initial commit")
    return repo


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Undo any logging configuration a CLI invocation installed."""
    yield
    structlog.reset_defaults()
