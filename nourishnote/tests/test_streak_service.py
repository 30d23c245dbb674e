from datetime import datetime, timedelta, timezone

from nourishnote.features.entries import service as entry_service
from nourishnote.features.entries.persistence import EntryPersistence
from nourishnote.features.profiles import service as profile_service
from nourishnote.features.streaks import service as streak_service

NOW = datetime(2024, 7, 4, 18, 0, tzinfo=timezone.utc)


def _boom(*args, **kwargs):
    raise RuntimeError("db down")


def test_snapshot_from_stored_entries():
    for days in (2, 1, 0):
        entry_service.create_entry("u1", f"entry {days}", extractor=lambda t: {}, now=NOW - timedelta(days=days, hours=1))
    snapshot = streak_service.get_streak_snapshot("u1", now=NOW)
    assert snapshot.current_streak == 3
    assert snapshot.total_entries == 3
    assert snapshot.entries_remaining == 1


def test_failed_entry_fetch_reads_as_empty(monkeypatch, caplog):
    monkeypatch.setattr(EntryPersistence, "list_timestamps", staticmethod(_boom))
    snapshot = streak_service.get_streak_snapshot("u1", now=NOW)
    assert snapshot.total_entries == 0
    assert snapshot.entries_remaining == 2
    assert "db down" in caplog.text


def test_failed_timezone_fetch_reads_as_utc(monkeypatch):
    monkeypatch.setattr(profile_service, "get_timezone", _boom)
    assert streak_service.effective_timezone("u1") == "UTC"


def test_override_beats_saved_preference():
    profile_service.set_timezone("u1", "Asia/Tokyo")
    assert streak_service.effective_timezone("u1") == "Asia/Tokyo"
    assert streak_service.effective_timezone("u1", "Europe/London") == "Europe/London"
    assert streak_service.effective_timezone("u1", "Bad/Zone") == "UTC"


def test_zone_names_are_canonicalized():
    assert streak_service.effective_timezone("u1", "america/new_york") == "America/New_York"
    assert streak_service.effective_timezone("u1", "ASIA/TOKYO") == "Asia/Tokyo"
