"""Tests for archive listing and retention."""

from __future__ import annotations

import os
import time
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from cc_brain.memory.archive import ArchiveManager

DAY = 24 * 60 * 60
NOW = datetime(2026, 3, 1, 12, 0, 0)


class _FrozenDatetime(datetime):
    @classmethod
    def now(cls, tz=None):
        return NOW


def _entry(archive: Path, name: str, age_days: float = 0, content: str = "entry\n") -> Path:
    path = archive / name
    path.write_text(content, encoding="utf-8")
    ts = time.time() - age_days * DAY
    os.utime(path, (ts, ts))
    return path


@pytest.fixture
def archive(tmp_path: Path) -> Path:
    d = tmp_path / "archive"
    d.mkdir()
    return d


@pytest.fixture
def manager(archive: Path) -> ArchiveManager:
    return ArchiveManager(archive)


class TestEntries:
    def test_missing_directory(self, tmp_path: Path):
        manager = ArchiveManager(tmp_path / "nope")
        assert manager.get_entries() == []
        assert manager.count() == 0

    def test_newest_first(self, archive: Path, manager: ArchiveManager):
        _entry(archive, "2025-01-10.md", age_days=10)
        _entry(archive, "2025-01-20.md", age_days=0)
        _entry(archive, "2025-01-15.md", age_days=5)
        names = [e.name for e in manager.get_entries()]
        assert names == ["2025-01-20.md", "2025-01-15.md", "2025-01-10.md"]

    def test_only_markdown(self, archive: Path, manager: ArchiveManager):
        _entry(archive, "test.md")
        _entry(archive, "notes.txt")
        assert [e.name for e in manager.get_entries()] == ["test.md"]
        assert manager.count() == 1

    def test_entry_metadata(self, archive: Path, manager: ArchiveManager):
        path = _entry(archive, "2025-01-15.md", content="x" * 2048)
        entry = manager.get_entries()[0]
        assert entry.path == path
        assert entry.size == 2048
        assert entry.size_kb == "2.0kb"
        assert len(entry.date) == 10


class TestStats:
    def test_empty(self, manager: ArchiveManager):
        stats = manager.stats()
        assert stats.count == 0
        assert stats.oldest is None and stats.newest is None

    def test_totals(self, archive: Path, manager: ArchiveManager):
        _entry(archive, "a.md", age_days=3, content="aaaa")
        _entry(archive, "b.md", age_days=1, content="bb")
        stats = manager.stats()
        assert stats.count == 2
        assert stats.total_size == 6
        assert stats.oldest.name == "a.md"
        assert stats.newest.name == "b.md"


class TestPruneByCount:
    def test_keeps_newest(self, archive: Path, manager: ArchiveManager):
        _entry(archive, "2025-01-10.md", age_days=10)
        _entry(archive, "2025-01-15.md", age_days=5)
        _entry(archive, "2025-01-20.md", age_days=0)

        deleted = manager.prune_by_count(1)

        assert sorted(deleted) == ["2025-01-10.md", "2025-01-15.md"]
        assert [p.name for p in archive.iterdir()] == ["2025-01-20.md"]

    def test_nothing_to_prune(self, archive: Path, manager: ArchiveManager):
        _entry(archive, "a.md")
        assert manager.prune_by_count(5) == []
        assert (archive / "a.md").exists()


class TestPruneByAge:
    def test_deletes_older_than_cutoff(self, archive: Path, manager: ArchiveManager):
        old = _entry(archive, "old-file.md", age_days=40)
        new = _entry(archive, "new-file.md", age_days=1)

        deleted = manager.prune_by_age(30)

        assert deleted == ["old-file.md"]
        assert not old.exists()
        assert new.exists()

    def test_nothing_to_prune(self, archive: Path, manager: ArchiveManager):
        _entry(archive, "recent.md", age_days=1)
        assert manager.prune_by_age(30) == []


class TestAutoPrune:
    def test_ninety_day_window(self, archive: Path, manager: ArchiveManager):
        stale = _entry(archive, "stale.md", age_days=91)
        fresh = _entry(archive, "fresh.md", age_days=89)

        deleted = manager.auto_prune(90)

        assert deleted == ["stale.md"]
        assert not stale.exists()
        assert fresh.exists()

    def test_silent_still_returns_names(self, archive: Path, manager: ArchiveManager, caplog):
        _entry(archive, "stale.md", age_days=120)
        with caplog.at_level("INFO"):
            deleted = manager.auto_prune(90, silent=True)
        assert deleted == ["stale.md"]
        assert "Auto-pruned" not in caplog.text

    def test_logs_when_not_silent(self, archive: Path, manager: ArchiveManager, caplog):
        _entry(archive, "stale.md", age_days=120)
        with caplog.at_level("INFO"):
            manager.auto_prune(90)
        assert "Auto-pruned 1 archive entries" in caplog.text

    def test_exact_cutoff_is_kept(self, archive: Path, manager: ArchiveManager, monkeypatch):
        monkeypatch.setattr("cc_brain.memory.archive.datetime", _FrozenDatetime)
        cutoff = (NOW - timedelta(days=90)).timestamp()
        boundary = _entry(archive, "boundary.md")
        os.utime(boundary, (cutoff, cutoff))
        older = _entry(archive, "older.md")
        os.utime(older, (cutoff - 1, cutoff - 1))

        deleted = manager.auto_prune(90)

        assert deleted == ["older.md"]
        assert boundary.exists()

    def test_failed_unlink_skips_entry(self, archive: Path, manager: ArchiveManager, monkeypatch):
        _entry(archive, "a.md", age_days=100)
        locked = _entry(archive, "b.md", age_days=101)
        real_unlink = Path.unlink

        def unlink(self, missing_ok=False):
            if self.name == "b.md":
                raise PermissionError("locked")
            return real_unlink(self, missing_ok=missing_ok)

        monkeypatch.setattr(Path, "unlink", unlink)
        deleted = manager.auto_prune(90, silent=True)

        assert deleted == ["a.md"]
        assert locked.exists()
        assert not (archive / "a.md").exists()
