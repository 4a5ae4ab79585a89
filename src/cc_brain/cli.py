"""cc-brain command line: load, save, recall, archive, project-id.

Logs go to stderr; `load` writes only the brain payload to stdout so it can be
used directly as a session-start hook.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path

import click

from cc_brain.config import BrainConfig, load_config
from cc_brain.memory.archive import AUTO_PRUNE_DAYS, ArchiveManager
from cc_brain.memory.loader import assemble_brain
from cc_brain.memory.recall import format_report, search_archive
from cc_brain.memory.saver import BrainSaver, format_change
from cc_brain.memory.schema import BrainInputError, parse_payload
from cc_brain.memory.store import BrainPaths
from cc_brain.project_id import get_project_brain_path, get_project_id, init_brain_id

EXIT_INVALID_JSON = 1
EXIT_VALIDATION = 2


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _parse_days(ctx: click.Context, param: click.Parameter, value: str | None) -> int | None:
    if value is None:
        return None
    match = re.fullmatch(r"(\d+)d?", value.strip())
    if not match:
        raise click.BadParameter("expected a number of days, e.g. 90d")
    return int(match.group(1))


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to cc-brain.toml",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None):
    """cc-brain - persistent memory for coding sessions."""
    config = load_config(config_path)
    _setup_logging(config.log_level)
    ctx.obj = config


# =========================================================================
# Load / save
# =========================================================================


@cli.command("load")
@click.pass_obj
def load_cmd(config: BrainConfig):
    """Print the brain payload for a new session (nothing if empty)."""
    brain = assemble_brain(BrainPaths.from_config(config))
    if brain:
        click.echo(brain)


@cli.command("save")
@click.option("--json", "payload", required=True, help="JSON payload (t1_user, t1_prefs, t2, t3)")
@click.option("--dry-run", is_flag=True, help="Preview changes without saving")
@click.pass_context
def save_cmd(ctx: click.Context, payload: str, dry_run: bool):
    """Validate and save a structured update to the brain.

    \b
    Example:
      cc-brain save --dry-run --json '{"t2": {"focus": "testing"}}'
      cc-brain save --json '{"t3": "Added search functionality"}'
    """
    try:
        data = parse_payload(payload)
    except BrainInputError as e:
        click.echo("Error: Invalid JSON", err=True)
        click.echo(str(e), err=True)
        ctx.exit(EXIT_INVALID_JSON)

    saver = BrainSaver(BrainPaths.from_config(ctx.obj))
    result = saver.save(data, dry_run=dry_run)

    if not result.ok:
        click.echo("Validation errors:", err=True)
        for issue in result.errors:
            click.echo(f"  - {issue}", err=True)
        ctx.exit(EXIT_VALIDATION)

    if not result.changes:
        click.echo("No changes to apply.")
        return

    if dry_run:
        click.echo("DRY RUN - Preview of changes:")
    for change in result.changes:
        click.echo("")
        click.echo(format_change(change))

    if dry_run:
        click.echo("\nRun without --dry-run to apply changes.")
        return

    click.echo("")
    for change in result.changes:
        click.echo(f"Saved: {change.tier} → {change.path}")
    click.echo("\nBrain updated successfully.")


# =========================================================================
# Recall
# =========================================================================


@cli.command("recall")
@click.argument("query")
@click.option("--context", "show_context", is_flag=True, help="Show surrounding lines")
@click.option("--json", "as_json", is_flag=True, help="Output results as JSON")
@click.pass_obj
def recall_cmd(config: BrainConfig, query: str, show_context: bool, as_json: bool):
    """Search the archive and current context for QUERY (regex or text)."""
    paths = BrainPaths.from_config(config)
    results = search_archive(paths, query, context=show_context)

    if as_json:
        click.echo(json.dumps([r.to_dict() for r in results], indent=2, ensure_ascii=False))
        return

    click.echo(format_report(results, query, highlight=lambda s: click.style(s, fg="yellow")))
    if not results:
        click.echo(f"\nArchive location: {paths.archive_dir}")


# =========================================================================
# Archive
# =========================================================================


@cli.group("archive")
@click.pass_context
def archive_group(ctx: click.Context):
    """List, inspect and prune archive entries."""
    ctx.obj = ArchiveManager(BrainPaths.from_config(ctx.obj).archive_dir)


@archive_group.command("list")
@click.pass_obj
def archive_list(manager: ArchiveManager):
    """List archive entries, newest first."""
    entries = manager.get_entries()
    if not entries:
        click.echo("Archive is empty.")
        return

    click.echo(f"Archive: {manager.archive_dir}\n")
    for entry in entries:
        click.echo(f"  {entry.date}  {entry.size_kb:>8}  {entry.name}")
    click.echo(f"\nTotal: {len(entries)} entries")


@archive_group.command("stats")
@click.pass_obj
def archive_stats(manager: ArchiveManager):
    """Show archive statistics."""
    stats = manager.stats()
    if not stats.count:
        click.echo("Archive is empty.")
        return

    click.echo("Archive Statistics")
    click.echo("──────────────────")
    click.echo(f"Location:  {manager.archive_dir}")
    click.echo(f"Entries:   {stats.count}")
    click.echo(f"Total:     {stats.total_size / 1024:.1f}kb")
    click.echo(f"Oldest:    {stats.oldest.date} ({stats.oldest.name})")
    click.echo(f"Newest:    {stats.newest.date} ({stats.newest.name})")


@archive_group.command("prune")
@click.option("--keep", type=click.IntRange(min=0), default=None, help="Keep only the last N entries")
@click.option(
    "--older-than", "older_than", callback=_parse_days, default=None,
    help="Delete entries older than N days (e.g. 90d)",
)
@click.pass_obj
def archive_prune(manager: ArchiveManager, keep: int | None, older_than: int | None):
    """Delete entries by count (--keep) or by age (--older-than)."""
    if keep is not None:
        deleted = manager.prune_by_count(keep)
        summary = f"Pruned {len(deleted)} entries, kept {keep}"
        nothing = f"Nothing to prune (keeping {keep})"
    elif older_than is not None:
        deleted = manager.prune_by_age(older_than)
        summary = f"Pruned {len(deleted)} entries older than {older_than} days"
        nothing = f"Nothing to prune (no entries older than {older_than} days)"
    else:
        raise click.UsageError("prune requires --keep <n> or --older-than <days>")

    if not deleted:
        click.echo(nothing)
        return
    for name in deleted:
        click.echo(f"Deleted: {name}")
    click.echo(f"\n{summary}")


@archive_group.command("auto-prune")
@click.argument("days", type=click.IntRange(min=0), default=AUTO_PRUNE_DAYS)
@click.pass_obj
def archive_auto_prune(manager: ArchiveManager, days: int):
    """Delete entries older than DAYS (default 90)."""
    deleted = manager.auto_prune(days)
    if deleted:
        click.echo(f"Auto-pruned {len(deleted)} archive entries older than {days} days:")
        for name in deleted:
            click.echo(f"  - {name}")


# =========================================================================
# Project identity
# =========================================================================


@cli.command("project-id")
@click.option("--init", "init", is_flag=True, help="Create .brain-id if it does not exist")
@click.option("--path", "show_path", is_flag=True, help="Print the project brain directory")
@click.pass_obj
def project_id_cmd(config: BrainConfig, init: bool, show_path: bool):
    """Print the stable ID of the current project."""
    if init:
        brain_id, created = init_brain_id(config.project_dir)
        marker = config.project_dir / ".brain-id"
        click.echo(f"{'Created' if created else 'Already exists'}: {marker}")
        click.echo(f"ID: {brain_id}")
    elif show_path:
        click.echo(str(get_project_brain_path(config)))
    else:
        click.echo(get_project_id(config.project_dir))


def main() -> None:
    cli(prog_name="cc-brain")
