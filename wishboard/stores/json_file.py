"""
Flat JSON file store.

The whole board lives in one document:

    {"users": [...], "entries": [...], "reactions": [...], "comments": [...]}

Each `repository()` scope holds the store lock, reads the file and works on
the in-memory document; `commit()` writes it back atomically (temp file +
os.replace). A scope that ends in an error writes nothing. Requests queue on
`guard()` in the event loop before taking the lock. Both locks are
process-local: run a single worker when using this backend.

Files written by the earlier entries-only layout (`{"entries": [...]}` with
`_id` and a plain `user` name per entry) are upgraded on read.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Iterator, Optional

import anyio

from wishboard.core.clock import as_utc, utcnow
from wishboard.core.errors import StorageError
from wishboard.domain import (
    CommentRecord,
    EntryPatch,
    EntryRecord,
    EntryType,
    ReactionRecord,
    UserRecord,
    new_id,
)
from wishboard.stores.base import BoardRepository, BoardStore, DuplicateReactionError

logger = logging.getLogger(__name__)

_COLLECTIONS = ("users", "entries", "reactions", "comments")


def _dump_dt(value: Optional[datetime]) -> Optional[str]:
    return as_utc(value).isoformat() if value else None


def _load_dt(value: Optional[str]) -> Optional[datetime]:
    return as_utc(datetime.fromisoformat(value)) if value else None


def _empty_document() -> dict[str, list]:
    return {name: [] for name in _COLLECTIONS}


def _upgrade_legacy(doc: dict[str, Any]) -> dict[str, Any]:
    for name in _COLLECTIONS:
        doc.setdefault(name, [])
    users_by_name = {u["name"]: u for u in doc["users"]}
    for row in doc["entries"]:
        if "id" not in row and "_id" in row:
            row["id"] = row.pop("_id")
        if "userId" not in row and "user" in row:
            name = row.pop("user")
            user = users_by_name.get(name)
            if user is None:
                user = {"id": new_id(), "name": name}
                doc["users"].append(user)
                users_by_name[name] = user
            row["userId"] = user["id"]
        row.setdefault("imageUrl", None)
        row.setdefault("lockedUntil", None)
    return doc


class JsonBoardRepository(BoardRepository):

    def __init__(self, doc: dict[str, Any], save: Callable[[dict[str, Any]], None]):
        self.doc = doc
        self.dirty = False
        self._save = save

    # --- row helpers ---

    def _users_by_id(self) -> dict[str, UserRecord]:
        return {u["id"]: UserRecord(id=u["id"], name=u["name"]) for u in self.doc["users"]}

    def _reaction(self, row: dict, users: dict[str, UserRecord]) -> ReactionRecord:
        return ReactionRecord(
            id=row["id"], entry_id=row["entryId"], user=users[row["userId"]], emoji=row["emoji"]
        )

    def _comment(self, row: dict, users: dict[str, UserRecord]) -> CommentRecord:
        return CommentRecord(
            id=row["id"],
            entry_id=row["entryId"],
            user=users[row["userId"]],
            content=row["content"],
            created_at=_load_dt(row["createdAt"]),
        )

    def _entry(self, row: dict, users: dict[str, UserRecord]) -> EntryRecord:
        return EntryRecord(
            id=row["id"],
            user=users[row["userId"]],
            entry_type=EntryType(row["type"]),
            content=row["content"],
            year=row["year"],
            image_url=row.get("imageUrl"),
            locked_until=_load_dt(row.get("lockedUntil")),
            created_at=_load_dt(row["createdAt"]),
            reactions=self.list_reactions(row["id"]),
            comments=self.list_comments(row["id"]),
        )

    def _entry_row(self, entry_id: str) -> Optional[dict]:
        return next((e for e in self.doc["entries"] if e["id"] == entry_id), None)

    # --- users ---

    def find_user(self, name: str) -> Optional[UserRecord]:
        row = next((u for u in self.doc["users"] if u["name"] == name), None)
        return UserRecord(id=row["id"], name=row["name"]) if row else None

    def get_or_create_user(self, name: str) -> UserRecord:
        user = self.find_user(name)
        if user is not None:
            return user
        row = {"id": new_id(), "name": name}
        self.doc["users"].append(row)
        self.dirty = True
        return UserRecord(id=row["id"], name=name)

    def list_users(self) -> list[UserRecord]:
        return sorted(self._users_by_id().values(), key=lambda u: u.name)

    # --- entries ---

    def list_entries(
        self,
        user_name: Optional[str] = None,
        entry_type: Optional[EntryType] = None,
    ) -> list[EntryRecord]:
        users = self._users_by_id()
        rows = self.doc["entries"]
        if user_name is not None:
            rows = [e for e in rows if users[e["userId"]].name == user_name]
        if entry_type is not None:
            rows = [e for e in rows if e["type"] == EntryType(entry_type).value]
        records = [self._entry(e, users) for e in rows]
        records.sort(key=lambda e: e.created_at, reverse=True)
        return records

    def get_entry(self, entry_id: str) -> Optional[EntryRecord]:
        row = self._entry_row(entry_id)
        return self._entry(row, self._users_by_id()) if row else None

    def create_entry(
        self,
        user: UserRecord,
        entry_type: EntryType,
        content: str,
        year: int,
        image_url: Optional[str] = None,
        locked_until: Optional[datetime] = None,
    ) -> EntryRecord:
        row = {
            "id": new_id(),
            "userId": user.id,
            "type": EntryType(entry_type).value,
            "content": content,
            "year": year,
            "imageUrl": image_url,
            "lockedUntil": _dump_dt(locked_until),
            "createdAt": _dump_dt(utcnow()),
        }
        self.doc["entries"].append(row)
        self.dirty = True
        return self._entry(row, self._users_by_id())

    def update_entry(self, entry_id: str, patch: EntryPatch) -> Optional[EntryRecord]:
        row = self._entry_row(entry_id)
        if row is None:
            return None
        changes = patch.changes()
        if "content" in changes:
            row["content"] = changes["content"]
        if "image_url" in changes:
            row["imageUrl"] = changes["image_url"]
        if "locked_until" in changes:
            row["lockedUntil"] = _dump_dt(changes["locked_until"])
        self.dirty = True
        return self._entry(row, self._users_by_id())

    def delete_entry(self, entry_id: str) -> bool:
        if self._entry_row(entry_id) is None:
            return False
        self.doc["entries"] = [e for e in self.doc["entries"] if e["id"] != entry_id]
        self.doc["reactions"] = [r for r in self.doc["reactions"] if r["entryId"] != entry_id]
        self.doc["comments"] = [c for c in self.doc["comments"] if c["entryId"] != entry_id]
        self.dirty = True
        return True

    # --- reactions ---

    def list_reactions(self, entry_id: str) -> list[ReactionRecord]:
        users = self._users_by_id()
        return [
            self._reaction(r, users) for r in self.doc["reactions"] if r["entryId"] == entry_id
        ]

    def add_reaction(self, entry_id: str, user: UserRecord, emoji: str) -> ReactionRecord:
        for r in self.doc["reactions"]:
            if r["entryId"] == entry_id and r["userId"] == user.id and r["emoji"] == emoji:
                raise DuplicateReactionError(entry_id, user.name, emoji)
        row = {"id": new_id(), "entryId": entry_id, "userId": user.id, "emoji": emoji}
        self.doc["reactions"].append(row)
        self.dirty = True
        return ReactionRecord(id=row["id"], entry_id=entry_id, user=user, emoji=emoji)

    def remove_reaction(self, entry_id: str, user: UserRecord, emoji: str) -> bool:
        before = len(self.doc["reactions"])
        self.doc["reactions"] = [
            r for r in self.doc["reactions"]
            if not (r["entryId"] == entry_id and r["userId"] == user.id and r["emoji"] == emoji)
        ]
        removed = len(self.doc["reactions"]) < before
        self.dirty = self.dirty or removed
        return removed

    # --- comments ---

    def list_comments(self, entry_id: str) -> list[CommentRecord]:
        users = self._users_by_id()
        rows = [c for c in self.doc["comments"] if c["entryId"] == entry_id]
        records = [self._comment(c, users) for c in rows]
        records.sort(key=lambda c: c.created_at)
        return records

    def get_comment(self, comment_id: str) -> Optional[CommentRecord]:
        row = next((c for c in self.doc["comments"] if c["id"] == comment_id), None)
        return self._comment(row, self._users_by_id()) if row else None

    def add_comment(self, entry_id: str, user: UserRecord, content: str) -> CommentRecord:
        row = {
            "id": new_id(),
            "entryId": entry_id,
            "userId": user.id,
            "content": content,
            "createdAt": _dump_dt(utcnow()),
        }
        self.doc["comments"].append(row)
        self.dirty = True
        return self._comment(row, {user.id: user})

    def delete_comment(self, comment_id: str) -> bool:
        before = len(self.doc["comments"])
        self.doc["comments"] = [c for c in self.doc["comments"] if c["id"] != comment_id]
        removed = len(self.doc["comments"]) < before
        self.dirty = self.dirty or removed
        return removed

    # --- unit of work ---

    def commit(self) -> None:
        if not self.dirty:
            return
        try:
            self._save(self.doc)
        except OSError as exc:
            logger.error("Writing the JSON store failed: %s", exc)
            raise StorageError(backend="json") from exc
        self.dirty = False


class JsonBoardStore(BoardStore):
    name = "json"

    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)
        self._lock = threading.Lock()
        # Created on first use, inside the running event loop.
        self._guard: Optional[anyio.Lock] = None

    def open(self) -> None:
        with self._lock:
            if not self.path.exists():
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self._write(_empty_document())
                logger.info("Created JSON store at %s", self.path)

    def close(self) -> None:
        pass

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return _empty_document()
        with self.path.open("r", encoding="utf-8") as fh:
            raw = fh.read()
        if not raw.strip():
            return _empty_document()
        return _upgrade_legacy(json.loads(raw))

    def _write(self, doc: dict[str, Any]) -> None:
        fd, tmp_path = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(doc, fh, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    @contextmanager
    def repository(self) -> Iterator[JsonBoardRepository]:
        with self._lock:
            repo = JsonBoardRepository(self._read(), save=self._write)
            yield repo
            repo.commit()

    def guard(self) -> anyio.Lock:
        if self._guard is None:
            self._guard = anyio.Lock()
        return self._guard

    def ping(self) -> bool:
        try:
            with self._lock:
                self._read()
        except (OSError, ValueError):
            return False
        return True
