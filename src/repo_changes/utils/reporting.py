"""Rendering of run summaries."""

import json
from datetime import datetime, timezone
from pathlib import Path

from repo_changes import __version__
from repo_changes.core.models.report import RunSummary


def render_summary_text(summary: RunSummary, output_directory: Path | None = None) -> str:
    """Human-readable run summary: counts first, then one line per failure."""
    lines = []
    if output_directory is not None:
        lines.append(f"Output directory: {output_directory}")
    lines.append(f"Repositories scanned: {len(summary.repositories_scanned)}")
    lines.append(f"Repositories skipped: {len(summary.repositories_skipped)}")
    lines.append(f"Copied: {summary.copied_count}")
    lines.append(f"Failed: {summary.failed_count}")
    if summary.aborted:
        lines.append(f"Aborted: {summary.abort_reason}")

    if summary.failures:
        lines.append("")
        lines.append("Failures:")
        for record in summary.failures:
            lines.append(f"  - {record.file_name} [{record.repository_path}]: {record.error_reason}")
    return "\n".join(lines)


def build_json_report(summary: RunSummary, output_directory: Path | None = None) -> dict:
    return {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "tool_version": __version__,
        "output_directory": str(output_directory) if output_directory is not None else None,
        **summary.model_dump(mode="json"),
    }


def write_json_report(summary: RunSummary, path: Path, output_directory: Path | None = None) -> None:
    path.write_text(json.dumps(build_json_report(summary, output_directory), indent=2))
