"""Structured brain saver: validate, merge and persist a save payload.

T1 documents are merged section by section, T2 is regenerated from scratch and
every T3 summary becomes a new archive file. Nothing is written unless every
requested tier fits its line budget.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from cc_brain.memory.document import parse_document
from cc_brain.memory.schema import ValidationIssue, validate_input
from cc_brain.memory.store import (
    LIMITS,
    WARN_RATIO,
    BrainPaths,
    count_lines,
    read_text,
    safe_write_text,
)

logger = logging.getLogger(__name__)

TEMPLATES = {
    "t1_user": "# User Profile\n",
    "t1_prefs": "# Code & Tool Preferences\n",
}

PREVIEW_LINES = 15


@dataclass
class Change:
    """One document the save would write."""

    tier: str
    path: Path
    before: str | None
    after: str
    lines: int
    is_new: bool = False

    @property
    def status(self) -> str:
        if self.is_new:
            return "NEW FILE"
        if not self.before:
            return "CREATE"
        return f"UPDATE ({count_lines(self.before)} → {self.lines} lines)"


@dataclass
class SaveResult:
    changes: list[Change] = field(default_factory=list)
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    written: list[Path] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


# ── Rendering ────────────────────────────────────────────────


def _scalar(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def _bullets(items: list) -> list[str]:
    return [f"- {_scalar(item)}" for item in items]


def format_section_body(key: str, value: Any) -> str | None:
    """Render one update value as the body of `## key`. None for empty values."""
    if isinstance(value, list):
        return "\n".join(_bullets(value)) if value else None

    if isinstance(value, dict):
        if not value:
            return None
        lines: list[str] = []
        for k, v in value.items():
            if isinstance(v, list):
                lines.extend(_bullets(v))
            elif isinstance(v, dict):
                lines.append(f"### {k}")
                lines.extend(f"- {k2}: {_scalar(v2)}" for k2, v2 in v.items())
            else:
                lines.append(f"- {k}: {_scalar(v)}")
        return "\n".join(lines)

    return f"- {key}: {_scalar(value)}"


def merge_content(existing: str | None, updates: dict, template: str) -> str:
    """Merge section updates into a T1 document, replacing sections in place."""
    if not existing or not existing.strip():
        existing = template

    doc = parse_document(existing)
    for section, value in updates.items():
        body = format_section_body(section, value)
        if body is None:
            continue
        doc.set_section(section, body)
    return doc.render()


def generate_context(data: dict) -> str:
    """Regenerate context.md from the t2 fields, in fixed order."""
    lines = ["# Project Context", ""]

    if data.get("what"):
        lines += ["## What", data["what"], ""]

    focus = data.get("focus")
    if focus:
        lines.append("## Current Focus")
        lines += _bullets(focus) if isinstance(focus, list) else [focus]
        lines.append("")

    decisions = data.get("decisions")
    if decisions:
        lines.append("## Decisions")
        if isinstance(decisions, dict):
            lines += [f"- {d}: {_scalar(why)}" for d, why in decisions.items()]
        else:
            lines += _bullets(decisions)
        lines.append("")

    files = data.get("files")
    if files:
        lines.append("## Key Files")
        if isinstance(files, dict):
            lines += [f"- `{f}`: {_scalar(desc)}" for f, desc in files.items()]
        else:
            lines += _bullets(files)
        lines.append("")

    blockers = data.get("blockers")
    if blockers:
        lines.append("## Blockers")
        lines += _bullets(blockers) if isinstance(blockers, list) else [blockers]
        lines.append("")

    return "\n".join(lines)


def generate_archive_entry(summary: str, now: datetime) -> str:
    """Session summary document: a dated heading, then the summary."""
    return f"# Session {now:%Y-%m-%d} {now:%H:%M:%S}\n\n{summary.strip()}\n"


def format_change(change: Change) -> str:
    """Boxed preview of a change: status line and the first lines of content."""
    out = [
        f"┌── {change.tier} ({change.lines} lines) ──",
        f"│ Path: {change.path}",
        f"│ Status: {change.status}",
        "├──────────────────────────────",
    ]
    out += [f"│ {line}" for line in change.after.split("\n")[:PREVIEW_LINES]]
    if change.lines > PREVIEW_LINES:
        out.append(f"│ ... ({change.lines - PREVIEW_LINES} more lines)")
    out.append("└──────────────────────────────")
    return "\n".join(out)


# ── Saver ────────────────────────────────────────────────────


class BrainSaver:
    """Validates save payloads and writes the approved tier documents."""

    def __init__(self, paths: BrainPaths) -> None:
        self.paths = paths

    def prepare(self, data: Any, now: datetime | None = None) -> SaveResult:
        """Validate and build every change; never touches disk."""
        issues = validate_input(data)
        if issues:
            return SaveResult(errors=issues)

        result = SaveResult()
        for tier in ("t1_user", "t1_prefs"):
            if data.get(tier) is not None:
                path = self.paths.tier_path(tier)
                existing = read_text(path)
                updated = merge_content(existing, data[tier], TEMPLATES[tier])
                self._check_budget(result, tier, path, existing, updated)

        if data.get("t2") is not None:
            path = self.paths.context
            self._check_budget(result, "t2", path, read_text(path), generate_context(data["t2"]))

        if data.get("t3"):
            now = now or datetime.now()
            content = generate_archive_entry(data["t3"], now)
            result.changes.append(
                Change(
                    tier="t3",
                    path=self._archive_path(now),
                    before=None,
                    after=content,
                    lines=count_lines(content),
                    is_new=True,
                )
            )

        if result.errors:
            result.changes = []
        return result

    def _check_budget(
        self,
        result: SaveResult,
        tier: str,
        path: Path,
        existing: str | None,
        updated: str,
    ) -> None:
        limit = LIMITS[tier]
        lines = count_lines(updated)
        if lines > limit:
            result.errors.append(ValidationIssue(tier, f"{tier} exceeds limit: {lines}/{limit} lines"))
            return

        if lines > limit * WARN_RATIO:
            warning = f"{tier} at {lines}/{limit} lines ({round(lines / limit * 100)}%)"
            logger.warning("Budget warning: %s", warning)
            result.warnings.append(warning)
        result.changes.append(Change(tier=tier, path=path, before=existing, after=updated, lines=lines))

    def _archive_path(self, now: datetime) -> Path:
        """`archive/YYYY-MM-DD-HHMMSS.md`, with a counter if that name is taken."""
        stem = now.strftime("%Y-%m-%d-%H%M%S")
        path = self.paths.archive_dir / f"{stem}.md"
        counter = 2
        while path.exists():
            path = self.paths.archive_dir / f"{stem}-{counter}.md"
            counter += 1
        return path

    def apply(self, changes: list[Change]) -> list[Path]:
        """Atomically write each change. No isolation across files."""
        written = []
        for change in changes:
            change.path.parent.mkdir(parents=True, exist_ok=True)
            safe_write_text(change.path, change.after)
            logger.info("Saved %s → %s", change.tier, change.path)
            written.append(change.path)
        return written

    def save(self, data: Any, dry_run: bool = False, now: datetime | None = None) -> SaveResult:
        """Prepare, then apply unless `dry_run` or validation failed."""
        result = self.prepare(data, now=now)
        if result.ok and not dry_run:
            result.written = self.apply(result.changes)
        return result
