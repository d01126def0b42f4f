"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- users ---
    op.create_table(
        "users",
        sa.Column("id", sa.String(32), nullable=False),
        sa.Column("name", sa.String(64), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_name", "users", ["name"], unique=True)

    # --- entries ---
    op.create_table(
        "entries",
        sa.Column("id", sa.String(32), nullable=False),
        sa.Column("user_id", sa.String(32), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("type", sa.Enum("MEMORY", "WISH", name="entry_type_enum"), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("image_url", sa.String(1024), nullable=True),
        sa.Column("locked_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_entries_user_id", "entries", ["user_id"])
    op.create_index("ix_entries_type", "entries", ["type"])
    op.create_index("ix_entries_created_at", "entries", ["created_at"])

    # --- reactions ---
    op.create_table(
        "reactions",
        sa.Column("id", sa.String(32), nullable=False),
        sa.Column(
            "entry_id", sa.String(32),
            sa.ForeignKey("entries.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("user_id", sa.String(32), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("emoji", sa.String(32), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("entry_id", "user_id", "emoji", name="uq_reaction_entry_user_emoji"),
    )
    op.create_index("ix_reactions_entry_id", "reactions", ["entry_id"])

    # --- comments ---
    op.create_table(
        "comments",
        sa.Column("id", sa.String(32), nullable=False),
        sa.Column(
            "entry_id", sa.String(32),
            sa.ForeignKey("entries.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("user_id", sa.String(32), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_comments_entry_id", "comments", ["entry_id"])


def downgrade() -> None:
    op.drop_index("ix_comments_entry_id", table_name="comments")
    op.drop_table("comments")
    op.drop_index("ix_reactions_entry_id", table_name="reactions")
    op.drop_table("reactions")
    op.drop_index("ix_entries_created_at", table_name="entries")
    op.drop_index("ix_entries_type", table_name="entries")
    op.drop_index("ix_entries_user_id", table_name="entries")
    op.drop_table("entries")
    sa.Enum(name="entry_type_enum").drop(op.get_bind(), checkfirst=True)
    op.drop_index("ix_users_name", table_name="users")
    op.drop_table("users")
