"""
Comment service. Anyone may comment; only the author may delete.
"""
from __future__ import annotations

import logging

from wishboard.core.errors import (
    CommentNotFoundError,
    EntryNotFoundError,
    InvalidFieldError,
    NotOwnerError,
)
from wishboard.domain import CommentRecord
from wishboard.services.users import normalize_name, resolve_user
from wishboard.stores.base import BoardRepository

logger = logging.getLogger(__name__)

MAX_COMMENT_LENGTH = 2000


def list_comments(repo: BoardRepository, entry_id: str) -> list[CommentRecord]:
    """Oldest first; empty for unknown or deleted entries."""
    return repo.list_comments(entry_id)


def add_comment(repo: BoardRepository, entry_id: str, user_name: str, content: str) -> CommentRecord:
    content = content.strip() if isinstance(content, str) else ""
    if not content:
        raise InvalidFieldError("content", "content must not be empty")
    if len(content) > MAX_COMMENT_LENGTH:
        raise InvalidFieldError("content", f"content must be at most {MAX_COMMENT_LENGTH} characters")
    if repo.get_entry(entry_id) is None:
        raise EntryNotFoundError(entry_id)
    user = resolve_user(repo, user_name)
    comment = repo.add_comment(entry_id, user, content)
    repo.commit()
    return comment


def delete_comment(repo: BoardRepository, comment_id: str, user_name: str) -> None:
    user_name = normalize_name(user_name)
    comment = repo.get_comment(comment_id)
    if comment is None:
        raise CommentNotFoundError(comment_id)
    if comment.user.name != user_name:
        logger.warning(
            "Refused deletion of comment %s by %r (author %r)",
            comment_id, user_name, comment.user.name,
        )
        raise NotOwnerError("comment", comment_id, user_name)
    repo.delete_comment(comment_id)
    repo.commit()
