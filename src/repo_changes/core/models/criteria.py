"""Search criteria for a single run."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, field_validator

from repo_changes.core.models.repository import CommitInfo


def parse_date(value: object) -> object:
    """Reduce date-like input to a calendar date; time of day is ignored."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str):
        text = value.strip()
        try:
            return datetime.fromisoformat(text).date()
        except ValueError as exc:
            raise ValueError(f"Invalid date '{value}' (expected YYYY-MM-DD)") from exc
    return value


class SearchCriteria(BaseModel):
    """Which commits belong to the audit bundle.

    Supplied once per run and never mutated. Date bounds are inclusive
    and compared at day precision.
    """

    model_config = ConfigDict(frozen=True)

    branch_name: str
    date_from: date
    date_to: date
    author_email: str

    @field_validator("branch_name", "author_email")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("date_from", "date_to", mode="before")
    @classmethod
    def _parse_dates(cls, value: object) -> object:
        return parse_date(value)

    def matches(self, commit: CommitInfo) -> bool:
        """Return True if the commit was authored by us inside the window."""
        authored_on = commit.author_local_date
        return (
            self.date_from <= authored_on <= self.date_to
            and commit.author_email == self.author_email
        )
