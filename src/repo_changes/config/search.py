"""Search payload loading and validation."""

import json
from datetime import date
from pathlib import Path
from typing import Any

import structlog
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from repo_changes.core.exceptions import ConfigurationError
from repo_changes.core.models.criteria import SearchCriteria, parse_date
from repo_changes.core.models.repository import PathOverride

logger = structlog.get_logger(__name__)

SECTION_NAME = "SearcherInfo"


class SearchConfig(BaseModel):
    """The configuration payload for one run.

    Accepts snake_case keys as well as the ``SearcherInfo`` layout
    (``ProjectsPath``, ``SearchedBranch``, ``dateFrom``, ``dateTo``,
    ``AuthorEmail``, ``DestinationOutputPath``, ``PathOverrides``).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    projects_path: Path = Field(
        validation_alias=AliasChoices("projects_path", "projectsPath", "ProjectsPath")
    )
    branch_to_search: str = Field(
        validation_alias=AliasChoices(
            "branch_to_search", "branchToSearch", "SearchedBranch", "BranchToSearch"
        )
    )
    date_from: date = Field(validation_alias=AliasChoices("date_from", "dateFrom", "DateFrom"))
    date_to: date = Field(validation_alias=AliasChoices("date_to", "dateTo", "DateTo"))
    author_email: str = Field(
        validation_alias=AliasChoices("author_email", "authorEmail", "AuthorEmail")
    )
    destination_output_path: Path | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "destination_output_path", "destinationOutputPath", "DestinationOutputPath"
        ),
    )
    path_overrides: list[PathOverride] = Field(
        default_factory=list,
        validation_alias=AliasChoices("path_overrides", "pathOverrides", "PathOverrides"),
    )

    @field_validator("branch_to_search", "author_email")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("projects_path", mode="before")
    @classmethod
    def _path_not_blank(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            raise ValueError("must not be empty")
        return value

    @field_validator("projects_path")
    @classmethod
    def _projects_path_exists(cls, value: Path) -> Path:
        value = value.expanduser()
        if not value.is_dir():
            raise ValueError(f"directory does not exist: {value}")
        return value

    @field_validator("destination_output_path", mode="before")
    @classmethod
    def _blank_destination_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("date_from", "date_to", mode="before")
    @classmethod
    def _parse_dates(cls, value: Any) -> Any:
        return parse_date(value)

    def to_criteria(self) -> SearchCriteria:
        if self.date_from > self.date_to:
            logger.warning(
                "dateFrom is after dateTo, no commit can match",
                date_from=self.date_from.isoformat(),
                date_to=self.date_to.isoformat(),
            )
        return SearchCriteria(
            branch_name=self.branch_to_search,
            date_from=self.date_from,
            date_to=self.date_to,
            author_email=self.author_email,
        )


def format_validation_error(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "payload"
        problems.append(f"{location}: {error['msg']}")
    return "; ".join(problems)


def read_config_file(path: Path) -> dict[str, Any]:
    """Read a JSON payload, unwrapping the ``SearcherInfo`` section if present."""
    if not path.is_file():
        raise ConfigurationError(
            f"Configuration file not found: {path}",
            details={"config_file": str(path)},
        )
    try:
        data = json.loads(path.read_text(encoding="utf-8-sig"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(
            f"Cannot read configuration file {path}: {exc}",
            details={"config_file": str(path)},
        ) from exc

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Configuration file {path} must contain a JSON object",
            details={"config_file": str(path)},
        )
    section = data.get(SECTION_NAME, data)
    if not isinstance(section, dict):
        raise ConfigurationError(
            f"Section {SECTION_NAME} in {path} must be an object",
            details={"config_file": str(path)},
        )
    return dict(section)


def build_search_config(values: dict[str, Any]) -> SearchConfig:
    """Validate a raw payload into a SearchConfig."""
    try:
        return SearchConfig.model_validate(values)
    except ValidationError as exc:
        raise ConfigurationError(
            f"Invalid search configuration: {format_validation_error(exc)}",
            details={"errors": exc.errors(include_url=False)},
        ) from exc


def load_search_config(
    path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> SearchConfig:
    """Load the payload from ``path`` (optional) and apply non-None overrides.

    Overrides use the snake_case field names and replace any alias of the
    same field found in the file.
    """
    values: dict[str, Any] = read_config_file(path) if path is not None else {}
    for key, value in (overrides or {}).items():
        if value is None:
            continue
        for alias in _aliases(key):
            values.pop(alias, None)
        values[key] = value
    return build_search_config(values)


def _aliases(field_name: str) -> list[str]:
    field = SearchConfig.model_fields[field_name]
    choices = field.validation_alias
    if isinstance(choices, AliasChoices):
        return [c for c in choices.choices if isinstance(c, str)]
    return [field_name]
