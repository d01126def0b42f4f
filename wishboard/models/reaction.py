from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from wishboard.db.base import Base
from wishboard.domain import new_id

if TYPE_CHECKING:
    from wishboard.models.entry import Entry
    from wishboard.models.user import User


class Reaction(Base):
    """
    One emoji left by one user on one entry.

    Uniqueness: (entry_id, user_id, emoji). The same user may leave several
    different emojis on an entry, never the same one twice.
    """

    __tablename__ = "reactions"
    __table_args__ = (
        UniqueConstraint("entry_id", "user_id", "emoji", name="uq_reaction_entry_user_emoji"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    entry_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("entries.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("users.id"), nullable=False
    )
    emoji: Mapped[str] = mapped_column(String(32), nullable=False)

    entry: Mapped["Entry"] = relationship(back_populates="reactions")
    user: Mapped["User"] = relationship(lazy="joined")
