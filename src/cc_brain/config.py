"""Configuration loading from environment variables and cc-brain.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

_DEFAULT_BRAIN_DIR = Path.home() / ".claude" / "brain"
_CONFIG_FILENAME = "cc-brain.toml"


@dataclass
class BrainConfig:
    """Per-invocation configuration, threaded into every component."""

    brain_dir: Path = _DEFAULT_BRAIN_DIR
    project_dir: Path = field(default_factory=Path.cwd)
    log_level: str = "WARNING"


def load_config(config_path: Path | None = None) -> BrainConfig:
    """Load configuration from environment variables and optional cc-brain.toml.

    Priority: environment variables > cc-brain.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text())
    else:
        for candidate in [Path.cwd() / _CONFIG_FILENAME, Path.home() / ".claude" / _CONFIG_FILENAME]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text())
                break

    brain_dir = os.getenv("CC_BRAIN_DIR") or file_data.get("brain_dir") or str(_DEFAULT_BRAIN_DIR)
    project_dir = os.getenv("CLAUDE_PROJECT_DIR") or str(Path.cwd())

    return BrainConfig(
        brain_dir=Path(brain_dir).expanduser(),
        project_dir=Path(project_dir),
        log_level=os.getenv("CC_BRAIN_LOG_LEVEL", file_data.get("log_level", "WARNING")),
    )
