"""CLI for repo-changes."""

import sys
from pathlib import Path
from typing import Any

import click
import structlog

from repo_changes.config.logging import configure_logging
from repo_changes.config.search import SearchConfig, load_search_config
from repo_changes.config.settings import get_settings
from repo_changes.core.exceptions import ConfigurationError
from repo_changes.core.models.repository import PathOverride
from repo_changes.services.search import ExitCode, SearchService
from repo_changes.utils.reporting import render_summary_text

logger = structlog.get_logger(__name__)


def _parse_overrides(values: tuple[str, ...]) -> list[PathOverride] | None:
    if not values:
        return None
    overrides = []
    for value in values:
        match, sep, rewritten = value.partition("=")
        if not sep or not match.strip() or not rewritten.strip():
            raise click.BadParameter(f"expected MATCH=REWRITE, got '{value}'", param_hint="--override")
        overrides.append(PathOverride(match_path=match.strip(), rewritten_path=rewritten.strip()))
    return overrides


def _load_config(config_file: str | None, overrides: dict[str, Any]) -> SearchConfig:
    """Load the payload; the default config file is optional, an explicit one is not."""
    settings = get_settings()
    if config_file is not None:
        path: Path | None = Path(config_file)
    else:
        default = Path(settings.config_file)
        path = default if default.is_file() else None
    return load_search_config(path, overrides)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--json-logs", is_flag=True, help="Emit logs as JSON lines")
def cli(verbose: bool, json_logs: bool) -> None:
    """repo-changes: bundle a contributor's changed files across repositories."""
    try:
        settings = get_settings()
    except ConfigurationError as exc:
        click.echo(f"Error: {exc.message}", err=True)
        sys.exit(int(ExitCode.CONFIGURATION_ERROR))
    log_level = "DEBUG" if verbose else settings.log_level
    configure_logging(log_level=log_level, json_logs=json_logs or settings.is_json_logging)


@cli.command()
@click.option("--config", "-c", "config_file", help="JSON configuration file (default: appsettings.json)")
@click.option("--projects-path", "-p", help="Directory containing the repositories")
@click.option("--branch", "-b", help="Branch to search")
@click.option("--date-from", help="First day of the window (YYYY-MM-DD)")
@click.option("--date-to", help="Last day of the window (YYYY-MM-DD)")
@click.option("--author-email", "-a", help="Author email to match exactly")
@click.option("--destination", "-d", help="Existing, empty output directory")
@click.option("--override", "-o", multiple=True, help="Rewrite a project directory: MATCH=REWRITE")
@click.option("--workers", "-w", type=click.IntRange(min=1), default=None, help="Repositories processed in parallel")
@click.option("--report-json", help="Also write the summary as JSON to this path")
def search(
    config_file: str | None,
    projects_path: str | None,
    branch: str | None,
    date_from: str | None,
    date_to: str | None,
    author_email: str | None,
    destination: str | None,
    override: tuple[str, ...],
    workers: int | None,
    report_json: str | None,
) -> None:
    """Copy files changed by an author's commits into one output directory.

    Exit codes: 0 all files copied, 1 some files failed, 2 configuration
    error, 3 aborted because the branch was not checked out.
    """
    overrides = {
        "projects_path": projects_path,
        "branch_to_search": branch,
        "date_from": date_from,
        "date_to": date_to,
        "author_email": author_email,
        "destination_output_path": destination,
        "path_overrides": _parse_overrides(override),
    }

    settings = get_settings()
    updates: dict[str, Any] = {}
    if workers is not None:
        updates["workers"] = workers
    if report_json is not None:
        updates["report_json"] = report_json
    if updates:
        settings = settings.model_copy(update=updates)

    try:
        config = _load_config(config_file, overrides)
        outcome = SearchService(settings).run(config)
    except ConfigurationError as exc:
        logger.error("Configuration error", error=exc.message)
        click.echo(f"Error: {exc.message}", err=True)
        sys.exit(int(ExitCode.CONFIGURATION_ERROR))

    click.echo(render_summary_text(outcome.summary, outcome.output_directory))
    sys.exit(int(outcome.exit_code))


@cli.command("check-config")
@click.option("--config", "-c", "config_file", help="JSON configuration file (default: appsettings.json)")
def check_config(config_file: str | None) -> None:
    """Validate the configuration payload without scanning."""
    try:
        config = _load_config(config_file, {})
    except ConfigurationError as exc:
        click.echo(f"Error: {exc.message}", err=True)
        sys.exit(int(ExitCode.CONFIGURATION_ERROR))

    click.echo("Configuration OK")
    click.echo(f"  Projects path: {config.projects_path}")
    click.echo(f"  Branch:        {config.branch_to_search}")
    click.echo(f"  Window:        {config.date_from.isoformat()} .. {config.date_to.isoformat()}")
    click.echo(f"  Author:        {config.author_email}")
    click.echo(f"  Destination:   {config.destination_output_path or '(default)'}")
    for item in config.path_overrides:
        click.echo(f"  Override:      {item.match_path} -> {item.rewritten_path}")


if __name__ == "__main__":
    cli()
