import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select, or_

from ..errors import (
    AlreadyFriendsError,
    FriendNotFoundError,
    FriendRequestAlreadyExistsError,
    FriendRequestNotFoundError,
    SelfFriendError,
)
from ..models import FriendRequest, Friendship
from ..models.friend import ACCEPTED, PENDING, REJECTED

logger = logging.getLogger(__name__)


def _pair(user1: int, user2: int) -> Tuple[int, int]:
    return (user1, user2) if user1 < user2 else (user2, user1)


def _get_friendship(db: Session, user1: int, user2: int) -> Optional[Friendship]:
    low, high = _pair(user1, user2)
    return db.exec(select(Friendship).where(
        Friendship.user1_id == low,
        Friendship.user2_id == high
    )).first()


def _get_pending_request(db: Session, from_id: int, to_id: int) -> Optional[FriendRequest]:
    return db.exec(select(FriendRequest).where(
        FriendRequest.from_id == from_id,
        FriendRequest.to_id == to_id,
        FriendRequest.status == PENDING
    )).first()


def send_request(db: Session, from_id: int, to_id: int) -> FriendRequest:
    if from_id == to_id:
        raise SelfFriendError(from_id)
    if _get_friendship(db, from_id, to_id):
        raise AlreadyFriendsError(from_id, to_id)
    # A pending request the other way round also blocks a new one
    if _get_pending_request(db, to_id, from_id):
        raise FriendRequestAlreadyExistsError(to_id, from_id)

    request = FriendRequest(from_id=from_id, to_id=to_id)
    try:
        db.add(request)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise FriendRequestAlreadyExistsError(from_id, to_id) from e
    db.refresh(request)
    logger.info("Friend request %s sent from %s to %s", request.id, from_id, to_id)
    return request


def remove_request(db: Session, from_id: int, to_id: int) -> None:
    request = _get_pending_request(db, from_id, to_id)
    if not request:
        raise FriendRequestNotFoundError(from_id, to_id)
    db.delete(request)
    db.commit()


def _answer_request(db: Session, from_id: int, to_id: int, status: str) -> FriendRequest:
    request = _get_pending_request(db, from_id, to_id)
    if not request:
        raise FriendRequestNotFoundError(from_id, to_id)
    request.status = status
    request.updated_at = datetime.utcnow()
    db.add(request)
    return request


def accept_request(db: Session, from_id: int, to_id: int) -> FriendRequest:
    """Accept a pending request and record the friendship in one commit."""
    request = _answer_request(db, from_id, to_id, ACCEPTED)
    if not _get_friendship(db, from_id, to_id):
        low, high = _pair(from_id, to_id)
        db.add(Friendship(user1_id=low, user2_id=high))
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise AlreadyFriendsError(from_id, to_id) from e
    db.refresh(request)
    logger.info("Users %s and %s are now friends", from_id, to_id)
    return request


def reject_request(db: Session, from_id: int, to_id: int) -> FriendRequest:
    request = _answer_request(db, from_id, to_id, REJECTED)
    db.commit()
    db.refresh(request)
    return request


def get_requests(db: Session, user_id: int) -> List[FriendRequest]:
    """Requests sent or received by a user, newest first."""
    statement = (
        select(FriendRequest)
        .where(or_(FriendRequest.from_id == user_id, FriendRequest.to_id == user_id))
        .order_by(FriendRequest.id.desc())
    )
    return db.exec(statement).all()


def get_friends(db: Session, user_id: int) -> List[int]:
    friendships = db.exec(select(Friendship).where(
        or_(Friendship.user1_id == user_id, Friendship.user2_id == user_id)
    ).order_by(Friendship.id)).all()
    return [
        friendship.user2_id if friendship.user1_id == user_id else friendship.user1_id
        for friendship in friendships
    ]


def remove_friend(db: Session, user_id: int, friend_id: int) -> None:
    friendship = _get_friendship(db, user_id, friend_id)
    if not friendship:
        raise FriendNotFoundError(user_id, friend_id)
    db.delete(friendship)
    db.commit()
