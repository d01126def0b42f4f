"""
Tests specific to the JSON file backend.
"""
import json

import pytest

from wishboard.domain import EntryType
from wishboard.stores import JsonBoardStore
from wishboard.stores.base import DuplicateReactionError


@pytest.fixture()
def path(tmp_path):
    return tmp_path / "db.json"


class TestJsonBoardStore:
    def test_open_creates_empty_document(self, path):
        JsonBoardStore(path).open()
        assert json.loads(path.read_text()) == {
            "users": [], "entries": [], "reactions": [], "comments": [],
        }

    def test_data_survives_new_instance(self, path):
        first = JsonBoardStore(path)
        first.open()
        with first.repository() as repo:
            alex = repo.get_or_create_user("Alex")
            entry = repo.create_entry(alex, EntryType.WISH, "Learn Rust", 2026)

        with JsonBoardStore(path).repository() as repo:
            loaded = repo.get_entry(entry.id)
        assert loaded.content == "Learn Rust"
        assert loaded.user.name == "Alex"

    def test_nothing_written_when_scope_fails(self, path):
        store = JsonBoardStore(path)
        store.open()
        with pytest.raises(RuntimeError):
            with store.repository() as repo:
                repo.get_or_create_user("Alex")
                raise RuntimeError("abort")
        assert json.loads(path.read_text())["users"] == []

    def test_duplicate_reaction_rejected(self, path):
        store = JsonBoardStore(path)
        with store.repository() as repo:
            alex = repo.get_or_create_user("Alex")
            entry = repo.create_entry(alex, EntryType.MEMORY, "Trip", 2025)
            repo.add_reaction(entry.id, alex, "🎉")
            with pytest.raises(DuplicateReactionError):
                repo.add_reaction(entry.id, alex, "🎉")

    def test_legacy_entries_only_file_is_upgraded(self, path):
        path.write_text(json.dumps({"entries": [{
            "_id": "abc123",
            "user": "Alex",
            "type": "MEMORY",
            "content": "Old memory",
            "year": 2024,
            "createdAt": "2024-12-31T10:00:00+00:00",
        }]}))
        store = JsonBoardStore(path)
        with store.repository() as repo:
            entry = repo.get_entry("abc123")
            assert entry.user.name == "Alex"
            assert entry.image_url is None
            assert entry.locked_until is None
            assert [u.name for u in repo.list_users()] == ["Alex"]

    def test_ping(self, path):
        store = JsonBoardStore(path)
        assert store.ping() is True
        path.write_text("{broken")
        assert store.ping() is False
