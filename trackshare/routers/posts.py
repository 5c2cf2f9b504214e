from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlmodel import Session

from .. import responses
from ..dependencies import get_db, require_user
from ..models import LinkKind, User
from ..services import auth, commenting, linking, posting

router = APIRouter(prefix="/api")


class PostCreate(BaseModel):
    """Schema for creating a post."""
    model_config = ConfigDict(populate_by_name=True)

    is_linked: bool = Field(default=False, alias="isLinked")
    content: str
    options: Optional[Dict[str, Any]] = None


class PostUpdate(BaseModel):
    content: Optional[str] = None
    options: Optional[Dict[str, Any]] = None


@router.get("/posts")
async def get_posts(
    author: Optional[str] = None,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    """All posts, or the posts of one author. Unlinked authors are redacted."""
    if author:
        author_id = auth.get_user_by_username(db, author).id
        posts = posting.get_by_author(db, author_id)
    else:
        posts = posting.get_posts(db)
    return responses.posts(db, current_user.id, posts)


@router.post("/posts")
async def create_post(
    post_data: PostCreate,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    post = posting.create(db, current_user.id, post_data.content, post_data.options)
    if post_data.is_linked:
        linking.link(db, current_user.id, LinkKind.POST, post.id)
    return {"msg": "Post successfully created!", "post": responses.post(db, current_user.id, post)}


@router.patch("/posts/{post_id}")
async def update_post(
    post_id: int,
    update: PostUpdate,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    posting.assert_user_is_author(db, post_id, current_user.id)
    post = posting.update(db, post_id, update.content, update.options)
    return {"msg": "Post successfully updated!", "post": responses.post(db, current_user.id, post)}


@router.delete("/posts/{post_id}")
async def delete_post(
    post_id: int,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    """Delete a post along with its links, its comments and their links."""
    posting.assert_user_is_author(db, post_id, current_user.id)
    for comment in commenting.get_by_item(db, post_id):
        linking.unlink_item(db, LinkKind.COMMENT, comment.id)
        commenting.delete(db, comment.id)
    linking.unlink_item(db, LinkKind.POST, post_id)
    posting.delete(db, post_id)
    return {"msg": "Post deleted successfully!"}
