"""
Backend-neutral records returned by every store.

Both the SQL and the JSON-file store hand these dataclasses to the service
layer, so services and routers never depend on which backend is configured.
"""
from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional


def new_id() -> str:
    return uuid.uuid4().hex


class EntryType(str, enum.Enum):
    MEMORY = "MEMORY"
    WISH = "WISH"


class _Unset:
    """Marker for 'field absent from the request' (distinct from None)."""

    _instance: Optional["_Unset"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


@dataclass(frozen=True)
class UserRecord:
    id: str
    name: str


@dataclass
class ReactionRecord:
    id: str
    entry_id: str
    user: UserRecord
    emoji: str


@dataclass
class CommentRecord:
    id: str
    entry_id: str
    user: UserRecord
    content: str
    created_at: datetime


@dataclass
class EntryRecord:
    id: str
    user: UserRecord
    entry_type: EntryType
    content: str
    year: int
    created_at: datetime
    image_url: Optional[str] = None
    locked_until: Optional[datetime] = None
    reactions: list[ReactionRecord] = field(default_factory=list)
    comments: list[CommentRecord] = field(default_factory=list)


@dataclass
class EntryPatch:
    """
    Recognized fields of a partial entry update and their effect.

    content       UNSET → unchanged, str → set
    image_url     UNSET → unchanged, str → set, None → cleared
    locked_until  UNSET → unchanged, datetime → set, None → cleared
    """
    content: Any = UNSET
    image_url: Any = UNSET
    locked_until: Any = UNSET

    def changes(self) -> dict[str, Any]:
        return {
            name: value
            for name, value in (
                ("content", self.content),
                ("image_url", self.image_url),
                ("locked_until", self.locked_until),
            )
            if value is not UNSET
        }
