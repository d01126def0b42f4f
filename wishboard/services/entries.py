"""
Entry service: CRUD on memories / wishes plus the read-time lock rule.

Public API
----------
list_entries(repo, user_name, entry_type, now)           → list[EntryView]
get_entry(repo, entry_id, now)                           → EntryView
create_entry(repo, user_name, entry_type, content, ...)  → EntryView
update_entry(repo, entry_id, user_name, patch, now)      → EntryView
delete_entry(repo, entry_id, user_name)                  → None

Only the owner may update or delete an entry. A locked entry (lockedUntil in
the future) is returned without content or image.
Mutations end with `repo.commit()`, so a failed save is reported to the caller.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from wishboard.core.clock import as_utc, is_locked, utcnow
from wishboard.core.errors import EntryNotFoundError, InvalidFieldError, NotOwnerError
from wishboard.domain import EntryPatch, EntryRecord, EntryType, UNSET
from wishboard.services.users import normalize_name, resolve_user
from wishboard.stores.base import BoardRepository

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Read model
# ---------------------------------------------------------------------------

@dataclass
class EntryView:
    """An entry as seen at a given instant."""
    entry: EntryRecord
    is_locked: bool

    @property
    def content(self) -> Optional[str]:
        return None if self.is_locked else self.entry.content

    @property
    def image_url(self) -> Optional[str]:
        return None if self.is_locked else self.entry.image_url


def view(entry: EntryRecord, now: Optional[datetime] = None) -> EntryView:
    return EntryView(entry=entry, is_locked=is_locked(entry.locked_until, now or utcnow()))


def _require_owner(entry: EntryRecord, user_name: str) -> None:
    if entry.user.name != user_name:
        logger.warning(
            "Refused change of entry %s by %r (owner %r)", entry.id, user_name, entry.user.name
        )
        raise NotOwnerError("entry", entry.id, user_name)


def _load(repo: BoardRepository, entry_id: str) -> EntryRecord:
    entry = repo.get_entry(entry_id)
    if entry is None:
        raise EntryNotFoundError(entry_id)
    return entry


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------

def list_entries(
    repo: BoardRepository,
    user_name: Optional[str] = None,
    entry_type: Optional[EntryType] = None,
    now: Optional[datetime] = None,
) -> list[EntryView]:
    now = now or utcnow()
    entries = repo.list_entries(user_name=user_name, entry_type=entry_type)
    return [view(e, now) for e in entries]


def get_entry(repo: BoardRepository, entry_id: str, now: Optional[datetime] = None) -> EntryView:
    return view(_load(repo, entry_id), now)


def create_entry(
    repo: BoardRepository,
    user_name: str,
    entry_type: EntryType,
    content: str,
    year: int,
    image_url: Optional[str] = None,
    locked_until: Optional[datetime] = None,
) -> EntryView:
    user = resolve_user(repo, user_name)
    entry = repo.create_entry(
        user=user,
        entry_type=EntryType(entry_type),
        content=content,
        year=year,
        image_url=image_url or None,
        locked_until=as_utc(locked_until),
    )
    repo.commit()
    logger.info("Created %s entry %s for %r", entry.entry_type.value, entry.id, user.name)
    return view(entry)


def update_entry(
    repo: BoardRepository,
    entry_id: str,
    user_name: str,
    patch: EntryPatch,
    now: Optional[datetime] = None,
) -> EntryView:
    """
    Apply a partial update. Fields left UNSET keep their value; None clears
    `image_url` / `locked_until`. `content` cannot be cleared.
    """
    user_name = normalize_name(user_name)
    if patch.content is None:
        raise InvalidFieldError("content", "content must not be null")
    if patch.image_url is not UNSET and not patch.image_url:
        patch.image_url = None
    if patch.locked_until is not UNSET:
        patch.locked_until = as_utc(patch.locked_until)

    _require_owner(_load(repo, entry_id), user_name)
    updated = repo.update_entry(entry_id, patch)
    if updated is None:
        raise EntryNotFoundError(entry_id)
    repo.commit()
    logger.info("Updated entry %s (%s)", entry_id, ", ".join(patch.changes()) or "no changes")
    return view(updated, now)


def delete_entry(repo: BoardRepository, entry_id: str, user_name: str) -> None:
    user_name = normalize_name(user_name)
    _require_owner(_load(repo, entry_id), user_name)
    if not repo.delete_entry(entry_id):
        raise EntryNotFoundError(entry_id)
    repo.commit()
    logger.info("Deleted entry %s with its reactions and comments", entry_id)
