"""
Entry request / response schemas.

List:    GET  /entries          → list[EntryOut]
Create:  POST /entries          → EntryCreate → EntryOut
Update:  PUT  /entries/{id}     → EntryUpdate → EntryOut
"""
from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Optional

from pydantic import Field, field_validator

from wishboard.domain import EntryPatch, EntryType, UNSET
from wishboard.schemas.comments import CommentOut
from wishboard.schemas.common import CamelModel, UserOut
from wishboard.schemas.reactions import ReactionOut
from wishboard.services.entries import EntryView

MAX_CONTENT_LENGTH = 5_000


def _blank_to_none(v: Any) -> Any:
    if isinstance(v, str) and not v.strip():
        return None
    return v


def _strip_and_check_empty(v: Any) -> Any:
    stripped = v.strip() if isinstance(v, str) else v
    if isinstance(stripped, str) and not stripped:
        raise ValueError("must not be empty after stripping whitespace")
    return stripped


class EntryCreate(CamelModel):
    """A new memory or wish. The user is created on first use of the name."""

    user_name: Annotated[str, Field(
        min_length=1,
        max_length=64,
        description="Display name of the author.",
        examples=["Alex"],
    )]
    entry_type: EntryType = Field(alias="type", examples=["WISH"])
    content: Annotated[str, Field(
        min_length=1,
        max_length=MAX_CONTENT_LENGTH,
        examples=["Learn Rust"],
    )]
    year: Annotated[int, Field(ge=1900, le=3000, examples=[2026])]
    image_url: Optional[str] = Field(default=None, max_length=1024)
    locked_until: Optional[datetime] = Field(
        default=None,
        description="Hide content and image until this instant (naive values are UTC).",
    )

    @field_validator("user_name", "content", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return _strip_and_check_empty(v)

    @field_validator("image_url", "locked_until", mode="before")
    @classmethod
    def blank_is_none(cls, v: Any) -> Any:
        return _blank_to_none(v)


class EntryUpdate(CamelModel):
    """
    Partial update. Only fields present in the body change:
    `content` is set; `imageUrl` / `lockedUntil` are set, or cleared by
    null or "". `userName` identifies the caller and must be the owner.
    """

    user_name: Annotated[str, Field(min_length=1, max_length=64)]
    content: Optional[str] = Field(default=None, max_length=MAX_CONTENT_LENGTH)
    image_url: Optional[str] = Field(default=None, max_length=1024)
    locked_until: Optional[datetime] = None

    @field_validator("user_name", "content", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return _strip_and_check_empty(v)

    @field_validator("image_url", "locked_until", mode="before")
    @classmethod
    def blank_is_none(cls, v: Any) -> Any:
        return _blank_to_none(v)

    def to_patch(self) -> EntryPatch:
        present = self.model_fields_set
        return EntryPatch(
            content=self.content if "content" in present else UNSET,
            image_url=self.image_url if "image_url" in present else UNSET,
            locked_until=self.locked_until if "locked_until" in present else UNSET,
        )


class EntryOut(CamelModel):
    id: str
    user_id: str
    user: UserOut
    entry_type: EntryType = Field(alias="type")
    content: Optional[str] = Field(description="Null while the entry is locked.")
    year: int
    image_url: Optional[str] = Field(default=None, description="Null while the entry is locked.")
    locked_until: Optional[datetime] = None
    is_locked: bool = False
    created_at: datetime
    reactions: list[ReactionOut] = Field(default_factory=list)
    comments: list[CommentOut] = Field(default_factory=list)

    @classmethod
    def from_view(cls, view: EntryView) -> "EntryOut":
        entry = view.entry
        return cls(
            id=entry.id,
            user_id=entry.user.id,
            user=UserOut.from_record(entry.user),
            entry_type=entry.entry_type,
            content=view.content,
            year=entry.year,
            image_url=view.image_url,
            locked_until=entry.locked_until,
            is_locked=view.is_locked,
            created_at=entry.created_at,
            reactions=[ReactionOut.from_record(r) for r in entry.reactions],
            comments=[CommentOut.from_record(c) for c in entry.comments],
        )
