"""
Comments router.

GET    /comments?entryId=           — comments on an entry, oldest first
POST   /comments                    — add
DELETE /comments?id=&userName=      — delete own comment
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from wishboard.core.errors import MissingParametersError
from wishboard.deps import get_repository
from wishboard.schemas.comments import CommentCreate, CommentOut
from wishboard.schemas.common import DeletedOut, Envelope
from wishboard.services import comments as comment_service
from wishboard.stores.base import BoardRepository

router = APIRouter(prefix="/comments", tags=["comments"])


@router.get("", response_model=Envelope[list[CommentOut]], summary="List comments on an entry")
def list_comments(
    entry_id: Optional[str] = Query(default=None, alias="entryId"),
    repo: BoardRepository = Depends(get_repository),
):
    if not entry_id:
        raise MissingParametersError("entryId")
    comments = comment_service.list_comments(repo, entry_id)
    return Envelope[list[CommentOut]](data=[CommentOut.from_record(c) for c in comments])


@router.post(
    "",
    response_model=Envelope[CommentOut],
    status_code=status.HTTP_201_CREATED,
    summary="Comment on an entry",
    responses={404: {"description": "Entry not found."}},
)
def add_comment(payload: CommentCreate, repo: BoardRepository = Depends(get_repository)):
    comment = comment_service.add_comment(
        repo, entry_id=payload.entry_id, user_name=payload.user_name, content=payload.content
    )
    return Envelope[CommentOut](data=CommentOut.from_record(comment))


@router.delete(
    "",
    response_model=Envelope[DeletedOut],
    summary="Delete your own comment",
    responses={
        400: {"description": "Missing parameters."},
        403: {"description": "Caller is not the author."},
        404: {"description": "Comment not found."},
    },
)
def delete_comment(
    comment_id: Optional[str] = Query(default=None, alias="id"),
    user_name: Optional[str] = Query(default=None, alias="userName"),
    repo: BoardRepository = Depends(get_repository),
):
    missing = [name for name, value in (("id", comment_id), ("userName", user_name)) if not value]
    if missing:
        raise MissingParametersError(*missing)
    comment_service.delete_comment(repo, comment_id=comment_id, user_name=user_name)
    return Envelope[DeletedOut](data=DeletedOut(id=comment_id, message="Comment deleted"))
