from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from wishboard.core.clock import utcnow
from wishboard.db.base import Base
from wishboard.domain import EntryType
from wishboard.domain import new_id

if TYPE_CHECKING:
    from wishboard.models.comment import Comment
    from wishboard.models.reaction import Reaction
    from wishboard.models.user import User


class Entry(Base):
    __tablename__ = "entries"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("users.id"), nullable=False, index=True
    )
    entry_type: Mapped[EntryType] = mapped_column(
        "type", Enum(EntryType, name="entry_type_enum"), nullable=False, index=True
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    image_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    locked_until: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False, index=True
    )

    user: Mapped["User"] = relationship(lazy="joined")
    reactions: Mapped[list["Reaction"]] = relationship(
        back_populates="entry",
        cascade="all, delete-orphan",
    )
    comments: Mapped[list["Comment"]] = relationship(
        back_populates="entry",
        cascade="all, delete-orphan",
        order_by="Comment.created_at",
    )
