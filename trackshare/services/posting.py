import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlmodel import Session, select

from ..errors import NotFoundError, PostAuthorMismatchError
from ..models import Post

logger = logging.getLogger(__name__)


def create(db: Session, author_id: int, content: str, options: Optional[Dict[str, Any]] = None) -> Post:
    post = Post(author_id=author_id, content=content, options=options)
    db.add(post)
    db.commit()
    db.refresh(post)
    logger.info("Post %s created by user %s", post.id, author_id)
    return post


def get_posts(db: Session) -> List[Post]:
    """All posts, newest first."""
    return db.exec(select(Post).order_by(Post.id.desc())).all()


def get_by_author(db: Session, author_id: int) -> List[Post]:
    return db.exec(select(Post).where(Post.author_id == author_id).order_by(Post.id.desc())).all()


def get_post(db: Session, post_id: int) -> Post:
    post = db.get(Post, post_id)
    if not post:
        raise NotFoundError("Post {0} does not exist!", post_id)
    return post


def update(
    db: Session,
    post_id: int,
    content: Optional[str] = None,
    options: Optional[Dict[str, Any]] = None
) -> Post:
    post = get_post(db, post_id)
    if content is not None:
        post.content = content
    if options is not None:
        post.options = options
    post.updated_at = datetime.utcnow()
    db.add(post)
    db.commit()
    db.refresh(post)
    return post


def delete(db: Session, post_id: int) -> None:
    db.delete(get_post(db, post_id))
    db.commit()


def assert_post_exists(db: Session, post_id: int) -> None:
    get_post(db, post_id)


def assert_user_is_author(db: Session, post_id: int, user_id: int) -> None:
    post = get_post(db, post_id)
    if post.author_id != user_id:
        raise PostAuthorMismatchError(user_id, post_id)


def redact_author(post: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in post.items() if key != "author"}
