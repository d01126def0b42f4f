from __future__ import annotations

from datetime import datetime
from typing import Annotated

from pydantic import Field

from wishboard.domain import CommentRecord
from wishboard.schemas.common import CamelModel, UserOut


class CommentCreate(CamelModel):
    entry_id: Annotated[str, Field(min_length=1)]
    user_name: Annotated[str, Field(min_length=1, max_length=64, examples=["Alex"])]
    content: Annotated[str, Field(min_length=1, max_length=2000, examples=["hi"])]


class CommentOut(CamelModel):
    id: str
    entry_id: str
    user_id: str
    content: str
    created_at: datetime
    user: UserOut

    @classmethod
    def from_record(cls, comment: CommentRecord) -> "CommentOut":
        return cls(
            id=comment.id,
            entry_id=comment.entry_id,
            user_id=comment.user.id,
            content=comment.content,
            created_at=comment.created_at,
            user=UserOut.from_record(comment.user),
        )
