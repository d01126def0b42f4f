"""
Users router.

GET /users — known display names (users are created implicitly by writes)
"""
from fastapi import APIRouter, Depends

from wishboard.deps import get_repository
from wishboard.schemas.common import Envelope, UserOut
from wishboard.services import users as user_service
from wishboard.stores.base import BoardRepository

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=Envelope[list[UserOut]], summary="List known users")
def list_users(repo: BoardRepository = Depends(get_repository)):
    users = user_service.list_users(repo)
    return Envelope[list[UserOut]](data=[UserOut.from_record(u) for u in users])
