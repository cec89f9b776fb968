"""Git repository reader using subprocess."""

import subprocess
from datetime import datetime
from pathlib import Path

import structlog

from repo_changes.core.exceptions import RepositoryError
from repo_changes.core.models.repository import BranchInfo, ChangeKind, CommitInfo, DiffEntry

logger = structlog.get_logger(__name__)

_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"
_LOG_FORMAT = f"%H{_FIELD_SEP}%P{_FIELD_SEP}%ae{_FIELD_SEP}%aI{_RECORD_SEP}"
# errors="replace" marks undecodable path bytes with this character
_UNDECODABLE = "\ufffd"

_STATUS_KINDS = {
    "A": ChangeKind.ADDED,
    "M": ChangeKind.MODIFIED,
    "D": ChangeKind.DELETED,
    "R": ChangeKind.RENAMED,
    "C": ChangeKind.COPIED,
    "T": ChangeKind.TYPE_CHANGED,
    "U": ChangeKind.UNMERGED,
}


class RepositoryHandle:
    """An opened repository. Use as a context manager and close before opening the next."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._closed = False

    @property
    def path(self) -> Path:
        return self._path

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        self._closed = True

    def __enter__(self) -> "RepositoryHandle":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"RepositoryHandle({str(self._path)!r})"


class GitRepositoryReader:
    """Reads branches, commits and tree diffs from a working-tree repository.

    Uses subprocess + git CLI directly (no gitpython dependency).
    """

    def __init__(self, git_executable: str = "git") -> None:
        self._git = git_executable

    def _run_git(self, cwd: Path, *args: str) -> str:
        """Run a git command and return stdout."""
        cmd = [self._git, *args]
        logger.debug("Running git command", cmd=" ".join(cmd), cwd=str(cwd))
        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except OSError as exc:
            raise RepositoryError(
                f"Failed to execute git: {exc}",
                details={"repository": str(cwd)},
            ) from exc

        if result.returncode != 0:
            raise RepositoryError(
                f"git command failed: {' '.join(cmd)}",
                details={"repository": str(cwd), "stderr": result.stderr.strip()},
            )
        return result.stdout

    def is_valid_repository(self, path: Path) -> bool:
        """Check that ``path`` is the top level of a git working tree.

        A subdirectory of some enclosing repository does not count.
        """
        if not path.is_dir():
            return False
        try:
            toplevel = self._run_git(path, "rev-parse", "--show-toplevel").strip()
        except RepositoryError:
            return False
        return bool(toplevel) and Path(toplevel).resolve() == path.resolve()

    def open_repository(self, path: Path) -> RepositoryHandle:
        if not self.is_valid_repository(path):
            raise RepositoryError(
                f"Not a git repository: {path}",
                details={"repository": str(path)},
            )
        return RepositoryHandle(path.resolve())

    def branches(self, handle: RepositoryHandle) -> list[BranchInfo]:
        """List local and remote-tracking branches.

        Remote-tracking branches are named like ``origin/main`` and are never
        checked out.
        """
        output = self._run_git(
            handle.path,
            "for-each-ref",
            "--format=%(HEAD)\t%(refname)",
            "refs/heads",
            "refs/remotes",
        )
        result = []
        for line in output.splitlines():
            if "\t" not in line:
                continue
            head_marker, refname = line.split("\t", 1)
            if refname.startswith("refs/heads/"):
                name = refname[len("refs/heads/"):]
            elif refname.startswith("refs/remotes/"):
                name = refname[len("refs/remotes/"):]
                if name.endswith("/HEAD"):
                    continue
            else:
                continue
            result.append(
                BranchInfo(name=name, ref=refname, is_checked_out=head_marker.strip() == "*")
            )
        return result

    def commits(self, handle: RepositoryHandle, branch_name: str) -> list[CommitInfo]:
        """Return every commit reachable from the branch tip, newest first.

        ``branch_name`` may be a short name or a full ref such as
        ``refs/heads/main``; full refs avoid clashes with same-named tags.
        """
        output = self._run_git(
            handle.path,
            "log",
            f"--format={_LOG_FORMAT}",
            branch_name,
            "--",
        )
        commits = []
        for record in output.split(_RECORD_SEP):
            record = record.strip()
            if not record:
                continue
            parts = record.split(_FIELD_SEP)
            if len(parts) != 4:
                logger.warning("Skipping malformed log record", repository=str(handle.path))
                continue
            commit_id, parents, email, authored = parts
            commits.append(
                CommitInfo(
                    commit_id=commit_id,
                    parent_ids=tuple(parents.split()),
                    author_email=email,
                    author_date=datetime.fromisoformat(authored),
                )
            )
        return commits

    def diff_trees(
        self,
        handle: RepositoryHandle,
        commit_id: str,
        parent_id: str | None = None,
    ) -> list[DiffEntry]:
        """Diff a commit's tree against ``parent_id``'s tree.

        Without a parent the commit is diffed against the empty tree, so
        every entry shows up as added.
        """
        args = ["diff-tree", "-r", "-z", "--no-commit-id", "--name-status", "-M"]
        if parent_id is None:
            args += ["--root", commit_id]
        else:
            args += [parent_id, commit_id]
        output = self._run_git(handle.path, *args)
        entries = parse_name_status(output)
        for entry in entries:
            if _UNDECODABLE in entry.path:
                logger.warning(
                    "Changed path is not valid UTF-8 and cannot be matched in the working tree",
                    repository=str(handle.path),
                    commit=commit_id,
                    path=entry.path,
                )
        return entries


def parse_name_status(output: str) -> list[DiffEntry]:
    """Parse ``git diff-tree -z --name-status`` output."""
    tokens = output.split("\0")
    entries: list[DiffEntry] = []
    i = 0
    while i < len(tokens):
        status = tokens[i].strip()
        i += 1
        if not status:
            continue
        kind = _STATUS_KINDS.get(status[0], ChangeKind.UNKNOWN)
        if kind in (ChangeKind.RENAMED, ChangeKind.COPIED):
            if i + 1 >= len(tokens):
                break
            old_path, new_path = tokens[i], tokens[i + 1]
            i += 2
            entries.append(DiffEntry(path=new_path, change_kind=kind, old_path=old_path))
        else:
            if i >= len(tokens):
                break
            entries.append(DiffEntry(path=tokens[i], change_kind=kind))
            i += 1
    return entries
