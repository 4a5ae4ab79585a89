"""Tier locations, line budgets and the file primitives shared by every entry point."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from cc_brain.project_id import get_project_id

if TYPE_CHECKING:
    from cc_brain.config import BrainConfig

logger = logging.getLogger(__name__)

# Line budgets per tier
LIMITS = {
    "t1_user": 40,
    "t1_prefs": 40,
    "t2": 120,
}

WARN_RATIO = 0.8
TRUNCATION_MARKER = "... (truncated)"


@dataclass(frozen=True)
class BrainPaths:
    """Resolved file locations for one brain directory and one project."""

    brain_dir: Path
    project_id: str

    @classmethod
    def from_config(cls, config: BrainConfig) -> BrainPaths:
        return cls(brain_dir=config.brain_dir, project_id=get_project_id(config.project_dir))

    @property
    def user(self) -> Path:
        return self.brain_dir / "user.md"

    @property
    def preferences(self) -> Path:
        return self.brain_dir / "preferences.md"

    @property
    def project_dir(self) -> Path:
        return self.brain_dir / "projects" / self.project_id

    @property
    def context(self) -> Path:
        return self.project_dir / "context.md"

    @property
    def archive_dir(self) -> Path:
        return self.project_dir / "archive"

    def tier_path(self, tier: str) -> Path:
        """Path of a singleton tier document (t1_user, t1_prefs, t2)."""
        return {
            "t1_user": self.user,
            "t1_prefs": self.preferences,
            "t2": self.context,
        }[tier]

    def ensure_project_dirs(self) -> None:
        """Create the project and archive directories. Idempotent."""
        self.archive_dir.mkdir(parents=True, exist_ok=True)


def count_lines(content: str | None) -> int:
    """Number of newline-separated lines; a trailing newline counts as an empty last line."""
    if not content:
        return 0
    return len(content.split("\n"))


def read_text(path: Path) -> str | None:
    """Read a document, or None if it does not exist."""
    if not path.exists():
        return None
    return path.read_text(encoding="utf-8")


def read_bounded(path: Path, line_limit: int) -> str | None:
    """Read a document, keeping only the first `line_limit` lines."""
    content = read_text(path)
    if content is None:
        return None

    lines = content.split("\n")
    if len(lines) > line_limit:
        content = "\n".join(lines[:line_limit]) + "\n" + TRUNCATION_MARKER
    return content


def safe_write_text(path: Path, content: str) -> None:
    """Atomic write: write a sibling temp file, then rename it over the target.

    The temp file is removed if anything fails; the target is only replaced
    after the full content has been written.
    """
    tmp = path.with_name(f"{path.name}.tmp.{os.getpid()}")
    try:
        tmp.write_text(content, encoding="utf-8")
        os.replace(tmp, path)
    except Exception:
        tmp.unlink(missing_ok=True)
        raise
