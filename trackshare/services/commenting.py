import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlmodel import Session, select

from ..errors import CommentAuthorMismatchError, NotFoundError
from ..models import Comment
from . import posting

logger = logging.getLogger(__name__)


def create(db: Session, author_id: int, post_id: int, content: str) -> Comment:
    """Comment on a post. The post has to exist."""
    posting.assert_post_exists(db, post_id)
    comment = Comment(author_id=author_id, post_id=post_id, content=content)
    db.add(comment)
    db.commit()
    db.refresh(comment)
    logger.info("Comment %s created on post %s by user %s", comment.id, post_id, author_id)
    return comment


def get_comments(db: Session) -> List[Comment]:
    return db.exec(select(Comment).order_by(Comment.id.desc())).all()


def get_by_author(db: Session, author_id: int) -> List[Comment]:
    return db.exec(
        select(Comment).where(Comment.author_id == author_id).order_by(Comment.id.desc())
    ).all()


def get_by_item(db: Session, post_id: int) -> List[Comment]:
    return db.exec(
        select(Comment).where(Comment.post_id == post_id).order_by(Comment.id.desc())
    ).all()


def get_comment(db: Session, comment_id: int) -> Comment:
    comment = db.get(Comment, comment_id)
    if not comment:
        raise NotFoundError("Comment {0} does not exist!", comment_id)
    return comment


def update(db: Session, comment_id: int, content: Optional[str] = None) -> Comment:
    comment = get_comment(db, comment_id)
    if content is not None:
        comment.content = content
    comment.updated_at = datetime.utcnow()
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return comment


def delete(db: Session, comment_id: int) -> None:
    db.delete(get_comment(db, comment_id))
    db.commit()


def assert_user_is_author(db: Session, comment_id: int, user_id: int) -> None:
    comment = get_comment(db, comment_id)
    if comment.author_id != user_id:
        raise CommentAuthorMismatchError(user_id, comment_id)


def redact_author(comment: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in comment.items() if key != "author"}
