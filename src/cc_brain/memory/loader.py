"""Session bootstrap: assemble the bounded brain payload.

T1 (always):    user.md, preferences.md         40 lines each
T2 (project):   projects/<id>/context.md        120 lines
T3 (on-demand): projects/<id>/archive/          counted, never loaded

Archive entries older than 90 days are pruned on the way in (best-effort).
"""

from __future__ import annotations

import logging
import re

from cc_brain.memory.archive import AUTO_PRUNE_DAYS, ArchiveManager
from cc_brain.memory.store import LIMITS, BrainPaths, read_bounded

logger = logging.getLogger(__name__)

FOOTER = "Above is your persistent memory. Use /save to update, /recall to search archive."

# Wrapper tags, archive marker and bracketed notices carry no memory content
_MARKUP_RE = re.compile(
    r"</?(?:brain|user-profile|preferences)>"
    r"|<project id=\"[^\"]*\">|</project>"
    r"|<archive [^>]*/>"
    r"|^\[.*\]$",
    re.MULTILINE,
)


def _auto_prune(paths: BrainPaths, days: int) -> list[str]:
    try:
        return ArchiveManager(paths.archive_dir).auto_prune(days, silent=True)
    except OSError as e:
        logger.debug("Auto-prune skipped: %s", e)
        return []


def has_content(block: str) -> bool:
    return bool(_MARKUP_RE.sub("", block).strip())


def assemble_brain(paths: BrainPaths, prune_days: int = AUTO_PRUNE_DAYS) -> str:
    """Build the `<brain>` block. Returns "" when there is nothing to load."""
    paths.ensure_project_dirs()
    pruned = _auto_prune(paths, prune_days)

    parts = ["<brain>"]
    if pruned:
        parts.append(
            f"[Auto-pruned {len(pruned)} archive entries older than {prune_days} days: "
            f"{', '.join(pruned)}]"
        )

    user = read_bounded(paths.user, LIMITS["t1_user"])
    if user and user.strip():
        parts.append(f"<user-profile>\n{user.strip()}\n</user-profile>")

    prefs = read_bounded(paths.preferences, LIMITS["t1_prefs"])
    if prefs and prefs.strip():
        parts.append(f"<preferences>\n{prefs.strip()}\n</preferences>")

    context = read_bounded(paths.context, LIMITS["t2"])
    if context and context.strip():
        parts.append(f'<project id="{paths.project_id}">\n{context.strip()}\n</project>')

    archived = ArchiveManager(paths.archive_dir).count()
    if archived:
        parts.append(f'<archive entries="{archived}" hint="Use /recall to search" />')

    parts.append("</brain>")
    brain = "\n".join(parts)

    if not has_content(brain):
        return ""
    logger.debug("Loaded brain for project %s (%d chars)", paths.project_id, len(brain))
    return f"{brain}\n\n---\n{FOOTER}"
