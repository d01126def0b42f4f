"""
Client-side board state with optimistic updates.

Every mutating action goes through the same small state machine:

    APPLIED      local state changed before the request is sent
    CONFIRMED    request succeeded; the whole list is re-fetched
    ROLLED_BACK  request failed; the pre-action snapshot is restored, a
                 re-fetch is attempted, and the error is re-raised

The re-fetch after every action is deliberate: the server is the source of
truth and local state is simply replaced (last response wins).
"""
from __future__ import annotations

import copy
import enum
import logging
import time
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Callable, Iterator, Optional

import httpx

from wishboard.client.api import BoardAPIError, BoardClient

logger = logging.getLogger(__name__)


class ActionState(str, enum.Enum):
    APPLIED = "applied"
    CONFIRMED = "confirmed"
    ROLLED_BACK = "rolled_back"


def _temp_id() -> str:
    return f"temp-{int(time.time() * 1000)}"


class BoardSession:

    def __init__(self, client: BoardClient, user_name: str):
        self.client = client
        self.user_name = user_name
        self.entries: list[dict] = []
        self.last_state: Optional[ActionState] = None

    # --- reads ---

    def refresh(self) -> list[dict]:
        self.entries = self.client.list_entries()
        return self.entries

    def find(self, entry_id: str) -> Optional[dict]:
        return next((e for e in self.entries if e["id"] == entry_id), None)

    def my_emojis(self, entry_id: str) -> list[str]:
        entry = self.find(entry_id)
        if entry is None:
            return []
        return [r["emoji"] for r in entry["reactions"] if r["user"]["name"] == self.user_name]

    # --- state machine ---

    def _resync_quietly(self) -> None:
        try:
            self.refresh()
        except (BoardAPIError, httpx.HTTPError) as exc:
            logger.warning("Re-sync after failed action also failed: %s", exc)

    @contextmanager
    def _optimistic(self, apply: Callable[[list[dict]], None]) -> Iterator[None]:
        snapshot = copy.deepcopy(self.entries)
        apply(self.entries)
        self.last_state = ActionState.APPLIED
        try:
            yield
        except (BoardAPIError, httpx.HTTPError):
            self.entries = snapshot
            self.last_state = ActionState.ROLLED_BACK
            self._resync_quietly()
            raise
        self.last_state = ActionState.CONFIRMED
        self.refresh()

    def _edit_entry(self, entry_id: str, fn: Callable[[dict], None]) -> Callable[[list[dict]], None]:
        def apply(entries: list[dict]) -> None:
            for entry in entries:
                if entry["id"] == entry_id:
                    fn(entry)
        return apply

    # --- entries ---

    def create_entry(self, entry_type: str, content: str, year: int, **options: Any) -> dict:
        created = self.client.create_entry(self.user_name, entry_type, content, year, **options)
        self.refresh()
        return created

    def update_entry(self, entry_id: str, **changes: Any) -> dict:
        updated = self.client.update_entry(entry_id, self.user_name, **changes)
        self.refresh()
        return updated

    def delete_entry(self, entry_id: str) -> None:
        def apply(entries: list[dict]) -> None:
            entries[:] = [e for e in entries if e["id"] != entry_id]

        with self._optimistic(apply):
            self.client.delete_entry(entry_id, self.user_name)

    # --- reactions ---

    def toggle_reaction(self, entry_id: str, emoji: str) -> None:
        """
        Same emoji again removes it; a different emoji replaces the user's
        current one (unreact old, then react new; not atomic); otherwise adds.
        """
        mine = self.my_emojis(entry_id)
        me = self.user_name

        if emoji in mine:
            def remove(entry: dict) -> None:
                entry["reactions"] = [
                    r for r in entry["reactions"]
                    if not (r["emoji"] == emoji and r["user"]["name"] == me)
                ]

            with self._optimistic(self._edit_entry(entry_id, remove)):
                self.client.unreact(entry_id, me, emoji)
            return

        def replace(entry: dict) -> None:
            kept = [r for r in entry["reactions"] if r["user"]["name"] != me]
            kept.append({"id": _temp_id(), "entryId": entry_id, "emoji": emoji, "user": {"name": me}})
            entry["reactions"] = kept

        with self._optimistic(self._edit_entry(entry_id, replace)):
            for old in mine:
                self.client.unreact(entry_id, me, old)
            self.client.react(entry_id, me, emoji)

    # --- comments ---

    def add_comment(self, entry_id: str, content: str) -> None:
        def append(entry: dict) -> None:
            entry.setdefault("comments", []).append({
                "id": _temp_id(),
                "entryId": entry_id,
                "content": content,
                "createdAt": datetime.now().astimezone().isoformat(),
                "user": {"name": self.user_name},
            })

        with self._optimistic(self._edit_entry(entry_id, append)):
            self.client.add_comment(entry_id, self.user_name, content)

    def delete_comment(self, comment_id: str) -> None:
        def apply(entries: list[dict]) -> None:
            for entry in entries:
                entry["comments"] = [c for c in entry.get("comments", []) if c["id"] != comment_id]

        with self._optimistic(apply):
            self.client.delete_comment(comment_id, self.user_name)
