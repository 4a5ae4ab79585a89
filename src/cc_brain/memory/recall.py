"""Archive search (recall): scored line search over T3 entries and context.md."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from cc_brain.memory.store import BrainPaths

logger = logging.getLogger(__name__)

HEADING_RE = re.compile(r"^#{1,6}\s")
DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")

HEADING_BONUS = 2
CONTEXT_RADIUS = 2
CURRENT = "current"


@dataclass(frozen=True)
class SearchPattern:
    """A compiled query; `literal` is set when the query was not a valid regex."""

    query: str
    regex: re.Pattern
    literal: bool = False


def compile_query(query: str) -> SearchPattern:
    """Case-insensitive regex, or the escaped literal if the regex is invalid."""
    try:
        return SearchPattern(query, re.compile(query, re.IGNORECASE))
    except re.error:
        return SearchPattern(query, re.compile(re.escape(query), re.IGNORECASE), literal=True)


@dataclass
class Match:
    line: int
    text: str
    context: list[tuple[int, str]] | None = None
    # raw line starts with a markdown heading marker
    heading: bool = False

    def to_dict(self) -> dict:
        data: dict = {"line": self.line, "text": self.text}
        if self.context is not None:
            data["context"] = [{"line": n, "text": t} for n, t in self.context]
        return data


@dataclass
class SearchResult:
    file: str
    date: str
    path: Path
    matches: list[Match] = field(default_factory=list)
    score: int = 0

    @property
    def match_count(self) -> int:
        return len(self.matches)

    def to_dict(self) -> dict:
        return {
            "file": self.file,
            "date": self.date,
            "path": str(self.path),
            "matches": [m.to_dict() for m in self.matches],
            "matchCount": self.match_count,
            "score": self.score,
        }


def date_token(filename: str) -> str:
    """First YYYY-MM-DD in an archive file name, else "unknown"."""
    found = DATE_RE.search(filename)
    return found.group() if found else "unknown"


def search_lines(lines: list[str], pattern: SearchPattern, context: bool = False) -> list[Match]:
    """One match per line that the pattern hits anywhere."""
    matches = []
    for i, line in enumerate(lines):
        if not pattern.regex.search(line):
            continue
        match = Match(line=i + 1, text=line.strip(), heading=bool(HEADING_RE.match(line)))
        if context:
            start = max(0, i - CONTEXT_RADIUS)
            end = min(len(lines) - 1, i + CONTEXT_RADIUS)
            match.context = [(j + 1, lines[j].strip()) for j in range(start, end + 1) if j != i]
        matches.append(match)
    return matches


def score_matches(matches: list[Match]) -> int:
    return sum(1 + (HEADING_BONUS if m.heading else 0) for m in matches)


def _search_file(path: Path, date: str, pattern: SearchPattern, context: bool) -> SearchResult | None:
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None

    matches = search_lines(content.split("\n"), pattern, context)
    if not matches:
        return None
    return SearchResult(
        file=path.name, date=date, path=path, matches=matches, score=score_matches(matches)
    )


def search_archive(paths: BrainPaths, query: str, context: bool = False) -> list[SearchResult]:
    """Search archive entries and the current context.md.

    context.md always comes first; archive hits follow by score, then newest date.
    """
    pattern = compile_query(query)
    if pattern.literal:
        logger.debug("Query %r is not a valid regex, matching literally", query)

    results: list[SearchResult] = []
    if paths.archive_dir.is_dir():
        for path in paths.archive_dir.glob("*.md"):
            result = _search_file(path, date_token(path.name), pattern, context)
            if result:
                results.append(result)

    results.sort(key=lambda r: r.date, reverse=True)
    results.sort(key=lambda r: r.score, reverse=True)

    current = _search_file(paths.context, CURRENT, pattern, context)
    if current:
        results.insert(0, current)
    return results


def format_report(
    results: list[SearchResult],
    query: str,
    highlight: Callable[[str], str] | None = None,
) -> str:
    """Human-readable report grouped by file."""
    if not results:
        return f'No results found for: "{query}"'

    pattern = compile_query(query)
    total = sum(r.match_count for r in results)
    out = [f'Found {total} matches in {len(results)} files for: "{query}"', ""]
    for result in results:
        out.append(f"── {result.file} ({result.date}) ──")
        for match in result.matches:
            text = match.text
            if highlight:
                text = pattern.regex.sub(lambda m: highlight(m.group(0)) if m.group(0) else "", text)
            out.append(f"  L{match.line}: {text}")
            for n, ctx in match.context or []:
                out.append(f"     {n}: {ctx}")
        out.append("")
    return "\n".join(out).rstrip("\n")
