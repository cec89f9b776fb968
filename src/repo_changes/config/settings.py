"""Application settings using Pydantic Settings."""

from functools import lru_cache

from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from repo_changes.config.search import format_validation_error
from repo_changes.core.exceptions import ConfigurationError


class Settings(BaseSettings):
    """Process-level settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="REPO_CHANGES_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Logging
    log_level: str = "INFO"
    log_format: str = "console"  # "console" | "json"

    # Search payload (JSON, original appsettings layout supported)
    config_file: str = "appsettings.json"

    # Execution
    workers: int = 1
    git_executable: str = "git"

    # Optional machine-readable summary
    report_json: str | None = None

    @property
    def is_json_logging(self) -> bool:
        return self.log_format.lower() == "json"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Raises ConfigurationError when an environment value does not validate.
    """
    try:
        return Settings()
    except ValidationError as exc:
        raise ConfigurationError(
            f"Invalid settings: {format_validation_error(exc)}",
            details={"errors": exc.errors(include_url=False)},
        ) from exc
