"""
Entries router.

GET    /entries            — list, filter by `user` and/or `type`
POST   /entries            — create
GET    /entries/{id}       — fetch one
PUT    /entries/{id}       — partial update (owner only)
DELETE /entries/{id}       — delete with reactions and comments (owner only)
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from wishboard.core.errors import MissingParametersError
from wishboard.deps import get_repository
from wishboard.domain import EntryType
from wishboard.schemas.common import DeletedOut, Envelope
from wishboard.schemas.entries import EntryCreate, EntryOut, EntryUpdate
from wishboard.services import entries as entry_service
from wishboard.stores.base import BoardRepository

router = APIRouter(prefix="/entries", tags=["entries"])


@router.get(
    "",
    response_model=Envelope[list[EntryOut]],
    summary="List entries (newest first)",
)
def list_entries(
    user: Optional[str] = Query(default=None, description="Owner display name.", examples=["Alex"]),
    entry_type: Optional[EntryType] = Query(default=None, alias="type", examples=["MEMORY"]),
    repo: BoardRepository = Depends(get_repository),
):
    """
    Every entry comes with its owner, its reactions (each with the reacting
    user) and its comments (oldest first). Filters intersect.
    Locked entries are listed without `content` / `imageUrl`.
    """
    views = entry_service.list_entries(repo, user_name=user, entry_type=entry_type)
    return Envelope[list[EntryOut]](data=[EntryOut.from_view(v) for v in views])


@router.post(
    "",
    response_model=Envelope[EntryOut],
    status_code=status.HTTP_201_CREATED,
    summary="Create a memory or wish",
    responses={400: {"description": "Validation error (missing field, bad type, etc.)"}},
)
def create_entry(payload: EntryCreate, repo: BoardRepository = Depends(get_repository)):
    """The author is looked up by `userName` and created on first use."""
    view = entry_service.create_entry(
        repo,
        user_name=payload.user_name,
        entry_type=payload.entry_type,
        content=payload.content,
        year=payload.year,
        image_url=payload.image_url,
        locked_until=payload.locked_until,
    )
    return Envelope[EntryOut](data=EntryOut.from_view(view))


@router.get(
    "/{entry_id}",
    response_model=Envelope[EntryOut],
    summary="Retrieve a single entry",
    responses={404: {"description": "Entry not found."}},
)
def get_entry(entry_id: str, repo: BoardRepository = Depends(get_repository)):
    view = entry_service.get_entry(repo, entry_id)
    return Envelope[EntryOut](data=EntryOut.from_view(view))


@router.put(
    "/{entry_id}",
    response_model=Envelope[EntryOut],
    summary="Partially update an entry",
    responses={
        400: {"description": "Validation error."},
        403: {"description": "Caller is not the owner."},
        404: {"description": "Entry not found."},
    },
)
def update_entry(
    entry_id: str,
    payload: EntryUpdate,
    repo: BoardRepository = Depends(get_repository),
):
    """
    Only `content`, `imageUrl` and `lockedUntil` can change. Absent fields
    keep their value; `imageUrl: null` removes the photo and
    `lockedUntil: null` lifts the lock.
    """
    view = entry_service.update_entry(
        repo, entry_id, user_name=payload.user_name, patch=payload.to_patch()
    )
    return Envelope[EntryOut](data=EntryOut.from_view(view))


@router.delete(
    "/{entry_id}",
    response_model=Envelope[DeletedOut],
    summary="Delete an entry",
    responses={
        400: {"description": "Missing userName."},
        403: {"description": "Caller is not the owner."},
        404: {"description": "Entry not found."},
    },
)
def delete_entry(
    entry_id: str,
    user_name: Optional[str] = Query(default=None, alias="userName"),
    repo: BoardRepository = Depends(get_repository),
):
    if not user_name:
        raise MissingParametersError("userName")
    entry_service.delete_entry(repo, entry_id, user_name=user_name)
    return Envelope[DeletedOut](data=DeletedOut(id=entry_id, message="Entry deleted"))
