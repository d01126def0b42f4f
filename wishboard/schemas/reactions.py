from __future__ import annotations

from typing import Annotated

from pydantic import Field

from wishboard.domain import ReactionRecord
from wishboard.schemas.common import CamelModel, UserOut


class ReactionCreate(CamelModel):
    entry_id: Annotated[str, Field(min_length=1)]
    user_name: Annotated[str, Field(min_length=1, max_length=64, examples=["Alex"])]
    emoji: Annotated[str, Field(min_length=1, max_length=32, examples=["❤️"])]


class ReactionOut(CamelModel):
    id: str
    entry_id: str
    user_id: str
    emoji: str
    user: UserOut

    @classmethod
    def from_record(cls, reaction: ReactionRecord) -> "ReactionOut":
        return cls(
            id=reaction.id,
            entry_id=reaction.entry_id,
            user_id=reaction.user.id,
            emoji=reaction.emoji,
            user=UserOut.from_record(reaction.user),
        )
