"""
CLI commands for donor imports, donor-list maintenance and progress cleanup.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

import click
from flask.cli import ScriptInfo

from donor_app.importer.adapters import SpreadsheetAdapterError, load_donor_rows
from donor_app.importer.pipeline import ImportSummary, reconcile_donor_rows
from donor_app.importer.utils import cleanup_upload, resolve_upload_directory
from donor_app.models import EventDonorList, db
from donor_app.services.donor_list_stats import recompute_all_lists, recompute_list_stats
from donor_app.services.progress_tracker import get_progress_tracker


def _format_summary(path: Path, summary: ImportSummary) -> str:
    lines = [
        f"Donor import from {path}",
        f"  imported: {summary.imported}",
        f"  updated:  {summary.updated}",
        f"  skipped:  {summary.skipped}",
        f"  errors:   {len(summary.errors)}",
    ]
    for error in summary.errors[:20]:
        lines.append(f"    row {error['row']}: {error['error']}")
    if len(summary.errors) > 20:
        lines.append(f"    ... {len(summary.errors) - 20} more")
    return "\n".join(lines)


@click.group(name="importer")
def importer_cli():
    """Donor importer commands."""


@importer_cli.command("donors")
@click.argument("file_path", type=click.Path(path_type=Path, exists=True, dir_okay=False))
@click.option(
    "--summary-json",
    is_flag=True,
    help="Emit a machine-readable summary payload after completion.",
)
@click.pass_context
def importer_donors(ctx, file_path: Path, summary_json: bool):
    """Import donors from a CSV or .xlsx file, creating or updating by name/organization."""
    info = ctx.ensure_object(ScriptInfo)
    app = info.load_app()
    with app.app_context():
        try:
            rows = load_donor_rows(file_path)
        except SpreadsheetAdapterError as exc:
            raise click.ClickException(str(exc)) from exc

        summary = reconcile_donor_rows(
            rows,
            progress_interval=int(app.config.get("IMPORTER_PROGRESS_INTERVAL", 10) or 10),
        )
        if not rows:
            summary.add_error(1, "No data rows found in the file")
        app.logger.info("CLI donor import from %s: %s", file_path, summary.completion_message())

    click.echo(_format_summary(file_path, summary))
    if summary_json:
        click.echo(json.dumps(summary.as_dict(), indent=2, sort_keys=True))


@importer_cli.command("cleanup-uploads")
@click.option(
    "--max-age-hours",
    default=72,
    show_default=True,
    type=int,
    help="Remove importer uploads older than the specified number of hours.",
)
@click.pass_context
def importer_cleanup_uploads(ctx, max_age_hours: int):
    """
    Delete stale importer upload files from the configured storage directory.
    """

    info = ctx.ensure_object(ScriptInfo)
    app = info.load_app()

    with app.app_context():
        uploads_dir = resolve_upload_directory(app)
        cutoff = datetime.now(timezone.utc) - timedelta(hours=max_age_hours)
        removed = 0
        for path in uploads_dir.iterdir():
            if not path.is_file():
                continue
            try:
                modified = datetime.fromtimestamp(path.stat().st_mtime, timezone.utc)
            except FileNotFoundError:
                continue
            if modified < cutoff:
                cleanup_upload(path)
                removed += 1

    click.echo(f"Removed {removed} upload file(s) older than {max_age_hours} hours from {uploads_dir}.")


@click.group(name="lists")
def lists_cli():
    """Event donor-list maintenance commands."""


@lists_cli.command("recompute")
@click.argument("list_id", required=False, type=int)
@click.pass_context
def lists_recompute(ctx, list_id: Optional[int]):
    """Recount donor-list counters from their entries (one list, or all)."""
    info = ctx.ensure_object(ScriptInfo)
    app = info.load_app()
    with app.app_context():
        if list_id is not None:
            donor_list = db.session.get(EventDonorList, list_id)
            if donor_list is None:
                raise click.ClickException(f"Donor list {list_id} not found.")
            changed = [list_id] if recompute_list_stats(donor_list) else []
        else:
            changed = recompute_all_lists()
        db.session.commit()

    if changed:
        click.echo(f"Corrected {len(changed)} donor list(s): {', '.join(str(i) for i in changed)}")
    else:
        click.echo("All donor list counters are consistent.")


@click.group(name="progress")
def progress_cli():
    """Progress tracker commands."""


@progress_cli.command("sweep")
@click.pass_context
def progress_sweep(ctx):
    """Remove expired and stuck operations from this process's tracker."""
    info = ctx.ensure_object(ScriptInfo)
    app = info.load_app()
    removed = get_progress_tracker(app).cleanup_operations()
    click.echo(f"Removed {removed} operation(s).")


def register_cli(app) -> None:
    for group in (importer_cli, lists_cli, progress_cli):
        if group.name in app.cli.commands:
            app.cli.commands.pop(group.name)
        app.cli.add_command(group)
