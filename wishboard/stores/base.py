"""
Storage interface shared by the SQL and JSON-file backends.

A `BoardStore` is the process-wide handle (connection pool or file path),
opened once at startup. Each request borrows a `BoardRepository` through
`BoardStore.repository()`; the repository is only valid inside that scope.

Repositories enforce storage-level invariants (unique user names, unique
(entry, user, emoji) reactions, cascade on entry delete). Policy such as
ownership checks lives in `wishboard.services`, and every mutating service
calls `repo.commit()` before it returns.
"""
from __future__ import annotations

import abc
from contextlib import AbstractAsyncContextManager, AbstractContextManager, nullcontext
from datetime import datetime
from typing import Optional

from wishboard.domain import (
    CommentRecord,
    EntryPatch,
    EntryRecord,
    EntryType,
    ReactionRecord,
    UserRecord,
)


class DuplicateReactionError(Exception):
    """Raised by a repository when (entry, user, emoji) already exists."""


class BoardRepository(abc.ABC):

    # --- users ---

    @abc.abstractmethod
    def find_user(self, name: str) -> Optional[UserRecord]: ...

    @abc.abstractmethod
    def get_or_create_user(self, name: str) -> UserRecord: ...

    @abc.abstractmethod
    def list_users(self) -> list[UserRecord]: ...

    # --- entries ---

    @abc.abstractmethod
    def list_entries(
        self,
        user_name: Optional[str] = None,
        entry_type: Optional[EntryType] = None,
    ) -> list[EntryRecord]:
        """Newest first, each with user, reactions and comments expanded."""

    @abc.abstractmethod
    def get_entry(self, entry_id: str) -> Optional[EntryRecord]: ...

    @abc.abstractmethod
    def create_entry(
        self,
        user: UserRecord,
        entry_type: EntryType,
        content: str,
        year: int,
        image_url: Optional[str] = None,
        locked_until: Optional[datetime] = None,
    ) -> EntryRecord: ...

    @abc.abstractmethod
    def update_entry(self, entry_id: str, patch: EntryPatch) -> Optional[EntryRecord]: ...

    @abc.abstractmethod
    def delete_entry(self, entry_id: str) -> bool:
        """Delete an entry with its reactions and comments. False if absent."""

    # --- reactions ---

    @abc.abstractmethod
    def list_reactions(self, entry_id: str) -> list[ReactionRecord]: ...

    @abc.abstractmethod
    def add_reaction(self, entry_id: str, user: UserRecord, emoji: str) -> ReactionRecord:
        """Raises DuplicateReactionError if the tuple already exists."""

    @abc.abstractmethod
    def remove_reaction(self, entry_id: str, user: UserRecord, emoji: str) -> bool: ...

    # --- comments ---

    @abc.abstractmethod
    def list_comments(self, entry_id: str) -> list[CommentRecord]:
        """Oldest first."""

    @abc.abstractmethod
    def get_comment(self, comment_id: str) -> Optional[CommentRecord]: ...

    @abc.abstractmethod
    def add_comment(self, entry_id: str, user: UserRecord, content: str) -> CommentRecord: ...

    @abc.abstractmethod
    def delete_comment(self, comment_id: str) -> bool: ...

    # --- unit of work ---

    @abc.abstractmethod
    def commit(self) -> None:
        """Persist pending changes. Raises StorageError when the backend refuses."""


class BoardStore(abc.ABC):
    """Process-wide storage handle."""

    name: str = "store"

    @abc.abstractmethod
    def open(self) -> None: ...

    @abc.abstractmethod
    def close(self) -> None: ...

    @abc.abstractmethod
    def repository(self) -> AbstractContextManager[BoardRepository]: ...

    def guard(self) -> AbstractAsyncContextManager:
        """
        Held by a request for the whole lifetime of its repository. Awaited on
        the event loop, so waiting requests do not occupy worker threads.
        """
        return nullcontext()

    @abc.abstractmethod
    def ping(self) -> bool:
        """True when the backing storage is reachable."""
