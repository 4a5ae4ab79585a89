"""Shape validation for the save payload.

Payload:
    {
      "t1_user":  {section: value, ...},   # merged into user.md
      "t1_prefs": {section: value, ...},   # merged into preferences.md
      "t2":       {what, focus, decisions, files, blockers},  # regenerates context.md
      "t3":       "Session summary..."     # new archive entry
    }
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

VALID_KEYS = ("t1_user", "t1_prefs", "t2", "t3")
T2_FIELDS = ("what", "focus", "decisions", "files", "blockers")

# Accepted value types per t2 field
_T2_TYPES: dict[str, tuple[type, ...]] = {
    "what": (str,),
    "focus": (list, str),
    "decisions": (list, dict),
    "files": (list, dict),
    "blockers": (list, str),
}

_TYPE_NAMES = {str: "a string", list: "an array", dict: "an object"}


class BrainInputError(ValueError):
    """The save payload is not parseable JSON."""


@dataclass(frozen=True)
class ValidationIssue:
    """A single reason a save payload was rejected."""

    field: str
    message: str

    def __str__(self) -> str:
        return self.message


def parse_payload(raw: str) -> Any:
    """Decode a JSON payload; no partial parse is attempted."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise BrainInputError(f"Invalid JSON: {e}") from e


def _describe(types: tuple[type, ...]) -> str:
    return " or ".join(_TYPE_NAMES[t] for t in types)


def validate_input(data: Any) -> list[ValidationIssue]:
    """Check the payload shape. An empty list means it may be processed."""
    if not isinstance(data, dict):
        return [ValidationIssue("input", "Input must be a JSON object")]

    issues: list[ValidationIssue] = []
    for key in data:
        if key not in VALID_KEYS:
            issues.append(
                ValidationIssue(key, f'Unknown key: "{key}" (valid: {", ".join(VALID_KEYS)})')
            )

    for key in ("t1_user", "t1_prefs", "t2"):
        value = data.get(key)
        if value is not None and not isinstance(value, dict):
            issues.append(ValidationIssue(key, f"{key} must be an object"))

    t3 = data.get("t3")
    if t3 is not None and not isinstance(t3, str):
        issues.append(ValidationIssue("t3", "t3 must be a string"))

    t2 = data.get("t2")
    if isinstance(t2, dict):
        issues.extend(_validate_t2(t2))

    return issues


def _validate_t2(t2: dict) -> list[ValidationIssue]:
    issues = []
    for name, value in t2.items():
        if name not in _T2_TYPES:
            issues.append(
                ValidationIssue(
                    f"t2.{name}",
                    f'Unknown t2 field: "{name}" (valid: {", ".join(T2_FIELDS)})',
                )
            )
            continue
        types = _T2_TYPES[name]
        if value is not None and not isinstance(value, types):
            issues.append(ValidationIssue(f"t2.{name}", f"t2.{name} must be {_describe(types)}"))
    return issues
