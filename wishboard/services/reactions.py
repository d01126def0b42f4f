"""
Reaction service.

Policy: a reaction is unique per (entry, user, emoji). A user may leave
several different emojis on one entry; repeating the same one is a conflict.
Switching emoji is a client concern (unreact old, then react new).
"""
from __future__ import annotations

import logging

from wishboard.core.errors import (
    EntryNotFoundError,
    InvalidFieldError,
    ReactionExistsError,
    ReactionNotFoundError,
    UserNotFoundError,
)
from wishboard.domain import ReactionRecord
from wishboard.services.users import normalize_name, resolve_user
from wishboard.stores.base import BoardRepository, DuplicateReactionError

logger = logging.getLogger(__name__)

MAX_EMOJI_LENGTH = 32


def _normalize_emoji(emoji: str | None) -> str:
    stripped = emoji.strip() if isinstance(emoji, str) else ""
    if not stripped:
        raise InvalidFieldError("emoji", "emoji must not be empty")
    if len(stripped) > MAX_EMOJI_LENGTH:
        raise InvalidFieldError("emoji", f"emoji must be at most {MAX_EMOJI_LENGTH} characters")
    return stripped


def list_reactions(repo: BoardRepository, entry_id: str) -> list[ReactionRecord]:
    """Reactions of an entry; empty for unknown or deleted entries."""
    return repo.list_reactions(entry_id)


def react(repo: BoardRepository, entry_id: str, user_name: str, emoji: str) -> ReactionRecord:
    emoji = _normalize_emoji(emoji)
    if repo.get_entry(entry_id) is None:
        raise EntryNotFoundError(entry_id)
    user = resolve_user(repo, user_name)
    try:
        reaction = repo.add_reaction(entry_id, user, emoji)
    except DuplicateReactionError as exc:
        logger.warning("Duplicate %s reaction by %r on entry %s", emoji, user.name, entry_id)
        raise ReactionExistsError(entry_id, user.name, emoji) from exc
    repo.commit()
    return reaction


def unreact(repo: BoardRepository, entry_id: str, user_name: str, emoji: str) -> None:
    user_name = normalize_name(user_name)
    emoji = _normalize_emoji(emoji)
    user = repo.find_user(user_name)
    if user is None:
        raise UserNotFoundError(user_name)
    if not repo.remove_reaction(entry_id, user, emoji):
        raise ReactionNotFoundError(entry_id, user_name, emoji)
    repo.commit()
