"""T3 archive management: list, measure and prune session entries."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path

logger = logging.getLogger(__name__)

AUTO_PRUNE_DAYS = 90


@dataclass
class ArchiveEntry:
    name: str
    path: Path
    mtime: datetime
    size: int

    @property
    def date(self) -> str:
        return self.mtime.strftime("%Y-%m-%d")

    @property
    def size_kb(self) -> str:
        return f"{self.size / 1024:.1f}kb"


@dataclass
class ArchiveStats:
    count: int
    total_size: int
    oldest: ArchiveEntry | None
    newest: ArchiveEntry | None


class ArchiveManager:
    """Operations on one project's archive directory."""

    def __init__(self, archive_dir: Path) -> None:
        self.archive_dir = archive_dir

    def get_entries(self) -> list[ArchiveEntry]:
        """All `*.md` entries, newest modification time first."""
        if not self.archive_dir.is_dir():
            return []

        entries = []
        for path in self.archive_dir.glob("*.md"):
            stat = path.stat()
            entries.append(
                ArchiveEntry(
                    name=path.name,
                    path=path,
                    mtime=datetime.fromtimestamp(stat.st_mtime),
                    size=stat.st_size,
                )
            )
        return sorted(entries, key=lambda e: e.mtime, reverse=True)

    def count(self) -> int:
        if not self.archive_dir.is_dir():
            return 0
        return sum(1 for _ in self.archive_dir.glob("*.md"))

    def stats(self) -> ArchiveStats:
        entries = self.get_entries()
        return ArchiveStats(
            count=len(entries),
            total_size=sum(e.size for e in entries),
            oldest=entries[-1] if entries else None,
            newest=entries[0] if entries else None,
        )

    def _delete(self, entries: list[ArchiveEntry], silent: bool = False) -> list[str]:
        """Delete entries one by one; a failed unlink skips that entry only."""
        deleted = []
        for entry in entries:
            try:
                entry.path.unlink()
            except OSError as e:
                logger.debug("Could not delete archive entry %s: %s", entry.name, e)
                continue
            if not silent:
                logger.info("Deleted archive entry: %s", entry.name)
            deleted.append(entry.name)
        return deleted

    def prune_by_count(self, keep: int) -> list[str]:
        """Keep the `keep` newest entries, delete the rest."""
        entries = self.get_entries()
        return self._delete(entries[max(keep, 0):])

    def prune_by_age(self, days: int) -> list[str]:
        """Delete entries last modified strictly before `now - days`."""
        cutoff = datetime.now() - timedelta(days=days)
        return self._delete([e for e in self.get_entries() if e.mtime < cutoff])

    def auto_prune(self, days: int = AUTO_PRUNE_DAYS, silent: bool = False) -> list[str]:
        """Age-based prune used at session start. Always returns the deleted names."""
        cutoff = datetime.now() - timedelta(days=days)
        deleted = self._delete([e for e in self.get_entries() if e.mtime < cutoff], silent=True)
        if deleted and not silent:
            logger.info(
                "Auto-pruned %d archive entries older than %d days: %s",
                len(deleted),
                days,
                ", ".join(deleted),
            )
        return deleted
