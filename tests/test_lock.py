"""
Tests for time-locked entries: the lock is a pure function of the stored
`lockedUntil` and the read time, never a stored flag.
"""
from datetime import datetime, timedelta, timezone

import pytest

from wishboard.core.clock import as_utc, is_locked
from wishboard.services import entries as entry_service


# ---------------------------------------------------------------------------
# Unit tests on pure functions
# ---------------------------------------------------------------------------

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


class TestIsLocked:
    def test_no_lock(self):
        assert is_locked(None, NOW) is False

    def test_future_is_locked(self):
        assert is_locked(NOW + timedelta(seconds=1), NOW) is True

    def test_past_is_unlocked(self):
        assert is_locked(NOW - timedelta(days=1), NOW) is False

    def test_exact_instant_is_unlocked(self):
        assert is_locked(NOW, NOW) is False

    def test_naive_timestamp_treated_as_utc(self):
        assert is_locked(datetime(2026, 6, 1, 13, 0), NOW) is True
        assert is_locked(datetime(2026, 6, 1, 11, 0), NOW) is False

    def test_other_offsets_compared_in_utc(self):
        plus_two = timezone(timedelta(hours=2))
        # 13:30+02:00 is 11:30 UTC
        assert is_locked(datetime(2026, 6, 1, 13, 30, tzinfo=plus_two), NOW) is False

    def test_as_utc(self):
        assert as_utc(None) is None
        assert as_utc(datetime(2026, 1, 1)).tzinfo == timezone.utc


# ---------------------------------------------------------------------------
# API behaviour
# ---------------------------------------------------------------------------

class TestLockedReads:
    def test_future_lock_hides_content_on_detail(self, client, make_entry):
        created = make_entry(
            content="Secret wish", imageUrl="https://cdn.example.com/s.jpg",
            lockedUntil="2999-01-01T00:00:00Z",
        )
        data = client.get(f"/entries/{created['id']}").json()["data"]
        assert data["isLocked"] is True
        assert data["content"] is None
        assert data["imageUrl"] is None
        assert data["lockedUntil"].startswith("2999-01-01")

    def test_future_lock_hides_content_in_list(self, client, make_entry):
        make_entry(content="Secret wish", lockedUntil="2999-01-01T00:00:00Z")
        data = client.get("/entries").json()["data"]
        assert data[0]["content"] is None

    def test_past_lock_shows_content(self, client, make_entry):
        created = make_entry(content="Old wish", lockedUntil="2000-01-01T00:00:00Z")
        data = client.get(f"/entries/{created['id']}").json()["data"]
        assert data["isLocked"] is False
        assert data["content"] == "Old wish"

    def test_content_appears_once_time_passes(self, store, client, make_entry):
        created = make_entry(content="Capsule", lockedUntil="2030-01-01T00:00:00Z")
        before = datetime(2029, 12, 31, 23, 59, tzinfo=timezone.utc)
        after = datetime(2030, 1, 1, 0, 0, 1, tzinfo=timezone.utc)

        with store.repository() as repo:
            locked = entry_service.get_entry(repo, created["id"], now=before)
            unlocked = entry_service.get_entry(repo, created["id"], now=after)
            again = entry_service.get_entry(repo, created["id"], now=before)

        assert locked.is_locked is True and locked.content is None
        assert unlocked.is_locked is False and unlocked.content == "Capsule"
        # Same stored data, same answer for the same instant.
        assert again.is_locked is True

    @pytest.mark.parametrize("stamp", ["2999-01-01T00:00:00", "2999-01-01T02:00:00+02:00"])
    def test_lock_input_formats(self, client, make_entry, stamp):
        created = make_entry(lockedUntil=stamp)
        assert created["isLocked"] is True
