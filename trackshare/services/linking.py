"""Links: a user's opt-in record exposing their ownership of one item.

The owner/author of a post, comment, data point or competition is only shown to
other users when the owner has linked the item. Items are identified by their
kind and id, since every content table has its own id space.
"""

import logging
from typing import List, Optional, Set, Tuple

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..errors import AlreadyLinkedError, NotLinkedError
from ..models import Link, LinkKind

logger = logging.getLogger(__name__)


def link(db: Session, user_id: int, kind: LinkKind, item_id: int) -> Link:
    """Link an item to its owner. Raises AlreadyLinkedError if the pair exists."""
    new_link = Link(user_id=user_id, kind=kind, item_id=item_id)
    try:
        db.add(new_link)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise AlreadyLinkedError(user_id, kind.value, item_id) from e
    db.refresh(new_link)
    logger.info("Linked %s %s to user %s", kind.value, item_id, user_id)
    return new_link


def unlink(db: Session, user_id: int, kind: LinkKind, item_id: int) -> None:
    """Remove a link. Raises NotLinkedError if the pair does not exist."""
    existing = _get_link(db, user_id, kind, item_id)
    if not existing:
        raise NotLinkedError(user_id, kind.value, item_id)
    db.delete(existing)
    db.commit()


def unlink_item(db: Session, kind: LinkKind, item_id: int) -> int:
    """Remove every link on an item. Returns how many were removed."""
    links = get_by_item(db, kind, item_id)
    for existing in links:
        db.delete(existing)
    db.commit()
    return len(links)


def get_links(db: Session, kind: Optional[LinkKind] = None) -> List[Link]:
    """All links, most recent first."""
    statement = select(Link)
    if kind is not None:
        statement = statement.where(Link.kind == kind)
    return db.exec(statement.order_by(Link.id.desc())).all()


def get_by_user(db: Session, user_id: int, kind: Optional[LinkKind] = None) -> List[Link]:
    statement = select(Link).where(Link.user_id == user_id)
    if kind is not None:
        statement = statement.where(Link.kind == kind)
    return db.exec(statement.order_by(Link.id.desc())).all()


def get_by_item(db: Session, kind: LinkKind, item_id: int) -> List[Link]:
    statement = select(Link).where(Link.kind == kind, Link.item_id == item_id)
    return db.exec(statement.order_by(Link.id.desc())).all()


def has_link(db: Session, user_id: int, kind: LinkKind, item_id: int) -> bool:
    return _get_link(db, user_id, kind, item_id) is not None


def linked_pairs(db: Session, kind: LinkKind) -> Set[Tuple[int, int]]:
    """(user_id, item_id) of every link of one kind, for redacting lists."""
    return {(existing.user_id, existing.item_id) for existing in get_links(db, kind)}


def _get_link(db: Session, user_id: int, kind: LinkKind, item_id: int) -> Optional[Link]:
    statement = select(Link).where(
        Link.user_id == user_id,
        Link.kind == kind,
        Link.item_id == item_id
    )
    return db.exec(statement).first()
