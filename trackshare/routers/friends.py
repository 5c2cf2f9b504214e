from fastapi import APIRouter, Depends
from sqlmodel import Session

from .. import responses
from ..dependencies import get_db, require_user
from ..models import User
from ..services import auth, friending

router = APIRouter(prefix="/api")


@router.get("/friends")
async def get_friends(
    current_user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    return auth.ids_to_usernames(db, friending.get_friends(db, current_user.id))


@router.delete("/friends/{friend}")
async def remove_friend(
    friend: str,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    friend_id = auth.get_user_by_username(db, friend).id
    friending.remove_friend(db, current_user.id, friend_id)
    return {"msg": "Unfriended!"}


@router.get("/friend/requests")
async def get_requests(
    current_user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    return responses.friend_requests(db, friending.get_requests(db, current_user.id))


@router.post("/friend/requests/{to}")
async def send_friend_request(
    to: str,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    to_id = auth.get_user_by_username(db, to).id
    request = friending.send_request(db, current_user.id, to_id)
    return {"msg": "Sent request!", "request": responses.friend_requests(db, [request])[0]}


@router.delete("/friend/requests/{to}")
async def remove_friend_request(
    to: str,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    to_id = auth.get_user_by_username(db, to).id
    friending.remove_request(db, current_user.id, to_id)
    return {"msg": "Removed request!"}


@router.put("/friend/accept/{from_username}")
async def accept_friend_request(
    from_username: str,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    from_id = auth.get_user_by_username(db, from_username).id
    friending.accept_request(db, from_id, current_user.id)
    return {"msg": "Accepted request!"}


@router.put("/friend/reject/{from_username}")
async def reject_friend_request(
    from_username: str,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    from_id = auth.get_user_by_username(db, from_username).id
    friending.reject_request(db, from_id, current_user.id)
    return {"msg": "Rejected request!"}
