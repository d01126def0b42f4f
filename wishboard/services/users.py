"""
User identity resolution.

There is no authentication: a user is whatever display name the client
sends. Every write path that names a user goes through `resolve_user`, which
returns the existing record or creates it (find-or-create).
"""
from __future__ import annotations

import logging

from wishboard.core.errors import InvalidFieldError
from wishboard.domain import UserRecord
from wishboard.stores.base import BoardRepository

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 64


def normalize_name(name: str | None, field: str = "userName") -> str:
    stripped = name.strip() if isinstance(name, str) else ""
    if not stripped:
        raise InvalidFieldError(field, f"{field} must not be empty")
    if len(stripped) > MAX_NAME_LENGTH:
        raise InvalidFieldError(field, f"{field} must be at most {MAX_NAME_LENGTH} characters")
    return stripped


def resolve_user(repo: BoardRepository, name: str) -> UserRecord:
    name = normalize_name(name)
    existing = repo.find_user(name)
    if existing is not None:
        return existing
    user = repo.get_or_create_user(name)
    logger.info("Created user %r (%s)", user.name, user.id)
    return user


def list_users(repo: BoardRepository) -> list[UserRecord]:
    return repo.list_users()
