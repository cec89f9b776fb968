"""Repository, branch, commit and diff models."""

from datetime import date, datetime
from enum import Enum
from pathlib import Path

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ChangeKind(str, Enum):
    """Classification of a tree diff entry."""

    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"
    COPIED = "copied"
    TYPE_CHANGED = "type_changed"
    UNMERGED = "unmerged"
    UNKNOWN = "unknown"


class RepositoryLocation(BaseModel):
    """A directory believed to be a version-controlled project root."""

    model_config = ConfigDict(frozen=True)

    path: Path
    source_name: str


class PathOverride(BaseModel):
    """Rewrites one enumerated directory to a different path before scanning.

    ``match_path`` is compared against the directory name and its absolute
    path. A relative ``rewritten_path`` is resolved against the root.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    match_path: str = Field(validation_alias=AliasChoices("match_path", "matchPath", "MatchPath"))
    rewritten_path: str = Field(
        validation_alias=AliasChoices("rewritten_path", "rewrittenPath", "RewrittenPath")
    )

    def applies_to(self, directory: Path) -> bool:
        return self.match_path in (directory.name, str(directory))

    def rewrite(self, root: Path) -> Path:
        target = Path(self.rewritten_path).expanduser()
        if not target.is_absolute():
            target = root / target
        return target


class BranchInfo(BaseModel):
    """A branch and whether it is reflected in the working tree."""

    model_config = ConfigDict(frozen=True)

    name: str
    ref: str
    is_checked_out: bool = False


class CommitInfo(BaseModel):
    """Commit metadata needed for filtering and diffing."""

    model_config = ConfigDict(frozen=True)

    commit_id: str
    parent_ids: tuple[str, ...] = ()
    author_email: str
    author_date: datetime

    @property
    def first_parent(self) -> str | None:
        return self.parent_ids[0] if self.parent_ids else None

    @property
    def is_root(self) -> bool:
        return not self.parent_ids

    @property
    def author_local_date(self) -> date:
        """Calendar date in the offset the author's timestamp was stored with."""
        return self.author_date.date()


class DiffEntry(BaseModel):
    """One path-level change between two trees."""

    model_config = ConfigDict(frozen=True)

    path: str
    change_kind: ChangeKind
    old_path: str | None = None
