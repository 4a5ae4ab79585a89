"""Stable project identity that survives directory renames.

Priority:
1. `.brain-id` file in the project root (a UUID written by `init_brain_id`)
2. The project directory's name
"""

from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cc_brain.config import BrainConfig

logger = logging.getLogger(__name__)

BRAIN_ID_FILE = ".brain-id"


def get_project_id(project_dir: Path) -> str:
    marker = project_dir / BRAIN_ID_FILE
    if marker.exists():
        return marker.read_text(encoding="utf-8").strip()
    return project_dir.name


def get_project_brain_path(config: BrainConfig) -> Path:
    return config.brain_dir / "projects" / get_project_id(config.project_dir)


def init_brain_id(project_dir: Path) -> tuple[str, bool]:
    """Create `.brain-id` if missing. Returns (id, created)."""
    marker = project_dir / BRAIN_ID_FILE
    if marker.exists():
        return marker.read_text(encoding="utf-8").strip(), False

    brain_id = str(uuid.uuid4())
    marker.write_text(brain_id + "\n", encoding="utf-8")
    logger.info("Created %s (%s)", marker, brain_id)
    return brain_id, True
