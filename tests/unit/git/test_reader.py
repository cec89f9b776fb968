"""Tests for the git repository reader."""

from datetime import date
from pathlib import Path

import pytest
from structlog.testing import capture_logs

from repo_changes.core.exceptions import RepositoryError
from repo_changes.core.models.repository import ChangeKind
from repo_changes.git.reader import GitRepositoryReader, RepositoryHandle, parse_name_status


@pytest.mark.unit
class TestGitRepositoryReader:
    """Tests for GitRepositoryReader against real repositories."""

    def test_is_valid_repository(self, git_repo) -> None:
        assert GitRepositoryReader().is_valid_repository(git_repo.path) is True

    def test_plain_directory_is_not_valid(self, tmp_path: Path) -> None:
        plain = tmp_path / "plain"
        plain.mkdir()
        assert GitRepositoryReader().is_valid_repository(plain) is False

    def test_subdirectory_of_repository_is_not_valid(self, git_repo) -> None:
        assert GitRepositoryReader().is_valid_repository(git_repo.path / "src") is False

    def test_open_invalid_repository_raises(self, tmp_path: Path) -> None:
        with pytest.raises(RepositoryError):
            GitRepositoryReader().open_repository(tmp_path)

    def test_handle_closes(self, git_repo) -> None:
        reader = GitRepositoryReader()
        with reader.open_repository(git_repo.path) as repo:
            assert not repo.closed
        assert repo.closed

    def test_branches_mark_checked_out(self, git_repo) -> None:
        git_repo.checkout_new("feature")
        reader = GitRepositoryReader()
        with reader.open_repository(git_repo.path) as repo:
            branches = {b.name: b for b in reader.branches(repo)}

        assert set(branches) == {"main", "feature"}
        assert branches["feature"].is_checked_out is True
        assert branches["main"].is_checked_out is False
        assert branches["main"].ref == "refs/heads/main"

    def test_commits_carry_author_metadata(self, git_repo) -> None:
        git_repo.write("src/a.txt", "changed\n")
        second = git_repo.commit("Second", email="other@example.com", when="2024-04-02T23:30:00-05:00")

        reader = GitRepositoryReader()
        with reader.open_repository(git_repo.path) as repo:
            commits = reader.commits(repo, "refs/heads/main")

        assert len(commits) == 2
        newest, root = commits
        assert newest.commit_id == second
        assert newest.author_email == "other@example.com"
        assert newest.author_local_date == date(2024, 4, 2)
        assert newest.parent_ids == (root.commit_id,)
        assert root.is_root

    def test_root_commit_diffs_against_empty_tree(self, git_repo) -> None:
        reader = GitRepositoryReader()
        with reader.open_repository(git_repo.path) as repo:
            root = reader.commits(repo, "main")[-1]
            entries = reader.diff_trees(repo, root.commit_id)

        assert {e.path for e in entries} == {"README.md", "src/a.txt", "docs/guide.md"}
        assert {e.change_kind for e in entries} == {ChangeKind.ADDED}

    def test_diff_change_kinds(self, git_repo) -> None:
        git_repo.write("src/a.txt", "modified\n")
        git_repo.delete("README.md")
        git_repo.git("mv", "docs/guide.md", "docs/handbook.md")
        git_repo.write("new.txt", "new\n")
        git_repo.commit("Mixed changes")

        reader = GitRepositoryReader()
        with reader.open_repository(git_repo.path) as repo:
            head = reader.commits(repo, "main")[0]
            entries = reader.diff_trees(repo, head.commit_id, head.first_parent)

        kinds = {e.path: e.change_kind for e in entries}
        assert kinds["src/a.txt"] == ChangeKind.MODIFIED
        assert kinds["README.md"] == ChangeKind.DELETED
        assert kinds["docs/handbook.md"] == ChangeKind.RENAMED
        assert kinds["new.txt"] == ChangeKind.ADDED
        renamed = next(e for e in entries if e.change_kind == ChangeKind.RENAMED)
        assert renamed.old_path == "docs/guide.md"

    def test_unknown_branch_raises(self, git_repo) -> None:
        reader = GitRepositoryReader()
        with reader.open_repository(git_repo.path) as repo:
            with pytest.raises(RepositoryError):
                reader.commits(repo, "refs/heads/nope")

    def test_missing_git_executable(self, git_repo) -> None:
        reader = GitRepositoryReader(git_executable="definitely-not-git")
        assert reader.is_valid_repository(git_repo.path) is False

    def test_undecodable_path_is_logged(self, tmp_path: Path) -> None:
        class StubReader(GitRepositoryReader):
            def _run_git(self, cwd: Path, *args: str) -> str:
                return "A\0docs/caf\ufffd.txt\0M\0src/a.txt\0"

        with capture_logs() as logs:
            entries = StubReader().diff_trees(RepositoryHandle(tmp_path), "c0ffee", "beef")

        assert [e.path for e in entries] == ["docs/caf\ufffd.txt", "src/a.txt"]
        warnings = [log for log in logs if log["log_level"] == "warning"]
        assert len(warnings) == 1
        assert warnings[0]["path"] == "docs/caf\ufffd.txt"


@pytest.mark.unit
class TestParseNameStatus:
    """Tests for name-status parsing."""

    def test_parses_all_shapes(self) -> None:
        output = "M\0src/a.txt\0A\0b.txt\0D\0gone.txt\0R087\0old.txt\0new.txt\0T\0link\0"
        entries = parse_name_status(output)

        assert [(e.change_kind, e.path) for e in entries] == [
            (ChangeKind.MODIFIED, "src/a.txt"),
            (ChangeKind.ADDED, "b.txt"),
            (ChangeKind.DELETED, "gone.txt"),
            (ChangeKind.RENAMED, "new.txt"),
            (ChangeKind.TYPE_CHANGED, "link"),
        ]
        assert entries[3].old_path == "old.txt"

    def test_paths_with_spaces_and_tabs(self) -> None:
        entries = parse_name_status("M\0dir with space/a\tb.txt\0")
        assert entries[0].path == "dir with space/a\tb.txt"

    def test_empty_output(self) -> None:
        assert parse_name_status("") == []

    def test_unknown_status(self) -> None:
        entries = parse_name_status("X\0weird\0")
        assert entries[0].change_kind == ChangeKind.UNKNOWN
