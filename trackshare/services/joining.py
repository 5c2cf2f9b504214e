import logging
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..errors import AlreadyMemberError, NotMemberError
from ..models import Membership

logger = logging.getLogger(__name__)


def join(db: Session, user_id: int, competition_id: int) -> Membership:
    """Enroll a user in a competition.

    The unique (competition, user) constraint decides between concurrent joins,
    so exactly one of them succeeds.
    """
    membership = Membership(user_id=user_id, competition_id=competition_id)
    try:
        db.add(membership)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise AlreadyMemberError(user_id, competition_id) from e
    db.refresh(membership)
    logger.info("User %s joined competition %s", user_id, competition_id)
    return membership


def leave(db: Session, user_id: int, competition_id: int) -> None:
    membership = db.exec(select(Membership).where(
        Membership.user_id == user_id,
        Membership.competition_id == competition_id
    )).first()

    if not membership:
        raise NotMemberError(user_id, competition_id)

    db.delete(membership)
    db.commit()
    logger.info("User %s left competition %s", user_id, competition_id)


def get_members(db: Session, competition_id: int) -> List[int]:
    statement = (
        select(Membership.user_id)
        .where(Membership.competition_id == competition_id)
        .order_by(Membership.id)
    )
    return list(db.exec(statement).all())


def get_user_memberships(db: Session, user_id: int) -> List[Membership]:
    statement = select(Membership).where(Membership.user_id == user_id).order_by(Membership.id)
    return db.exec(statement).all()


def is_member(db: Session, user_id: int, competition_id: int) -> bool:
    return db.exec(select(Membership).where(
        Membership.user_id == user_id,
        Membership.competition_id == competition_id
    )).first() is not None


def remove_competition(db: Session, competition_id: int) -> int:
    """Drop every membership of a competition. Returns how many were removed."""
    memberships = db.exec(
        select(Membership).where(Membership.competition_id == competition_id)
    ).all()
    for membership in memberships:
        db.delete(membership)
    db.commit()
    return len(memberships)
