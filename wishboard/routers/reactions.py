"""
Reactions router.

GET    /reactions?entryId=                     — reactions on an entry
POST   /reactions                              — add (409 on duplicate)
DELETE /reactions?entryId=&userName=&emoji=    — remove
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from wishboard.core.errors import MissingParametersError
from wishboard.deps import get_repository
from wishboard.schemas.common import DeletedOut, Envelope
from wishboard.schemas.reactions import ReactionCreate, ReactionOut
from wishboard.services import reactions as reaction_service
from wishboard.stores.base import BoardRepository

router = APIRouter(prefix="/reactions", tags=["reactions"])


@router.get("", response_model=Envelope[list[ReactionOut]], summary="List reactions on an entry")
def list_reactions(
    entry_id: Optional[str] = Query(default=None, alias="entryId"),
    repo: BoardRepository = Depends(get_repository),
):
    """Unknown or deleted entries have no reactions: the list is empty."""
    if not entry_id:
        raise MissingParametersError("entryId")
    reactions = reaction_service.list_reactions(repo, entry_id)
    return Envelope[list[ReactionOut]](data=[ReactionOut.from_record(r) for r in reactions])


@router.post(
    "",
    response_model=Envelope[ReactionOut],
    status_code=status.HTTP_201_CREATED,
    summary="React to an entry with an emoji",
    responses={
        404: {"description": "Entry not found."},
        409: {"description": "Same user already reacted with this emoji."},
    },
)
def add_reaction(payload: ReactionCreate, repo: BoardRepository = Depends(get_repository)):
    reaction = reaction_service.react(
        repo, entry_id=payload.entry_id, user_name=payload.user_name, emoji=payload.emoji
    )
    return Envelope[ReactionOut](data=ReactionOut.from_record(reaction))


@router.delete(
    "",
    response_model=Envelope[DeletedOut],
    summary="Remove an emoji reaction",
    responses={
        400: {"description": "Missing parameters."},
        404: {"description": "User or reaction not found."},
    },
)
def remove_reaction(
    entry_id: Optional[str] = Query(default=None, alias="entryId"),
    user_name: Optional[str] = Query(default=None, alias="userName"),
    emoji: Optional[str] = Query(default=None),
    repo: BoardRepository = Depends(get_repository),
):
    missing = [
        name for name, value in (("entryId", entry_id), ("userName", user_name), ("emoji", emoji))
        if not value
    ]
    if missing:
        raise MissingParametersError(*missing)
    reaction_service.unreact(repo, entry_id=entry_id, user_name=user_name, emoji=emoji)
    return Envelope[DeletedOut](data=DeletedOut(id=entry_id, message="Reaction removed"))
