from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlmodel import Session

from .. import responses
from ..dependencies import get_db, require_user
from ..models import LinkKind, User
from ..services import auth, commenting, linking

router = APIRouter(prefix="/api")


class CommentCreate(BaseModel):
    """Schema for commenting on a post."""
    model_config = ConfigDict(populate_by_name=True)

    is_linked: bool = Field(default=False, alias="isLinked")
    post_id: int = Field(alias="postId")
    content: str


class CommentUpdate(BaseModel):
    content: Optional[str] = None


@router.get("/comments")
async def get_comments(
    author: Optional[str] = None,
    post: Optional[int] = None,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    """All comments, narrowed to one author and/or one post."""
    if author:
        author_id = auth.get_user_by_username(db, author).id
        comments = commenting.get_by_author(db, author_id)
    elif post is not None:
        comments = commenting.get_by_item(db, post)
    else:
        comments = commenting.get_comments(db)
    if post is not None:
        comments = [comment for comment in comments if comment.post_id == post]
    return responses.comments(db, current_user.id, comments)


@router.post("/comments")
async def create_comment(
    comment_data: CommentCreate,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    comment = commenting.create(db, current_user.id, comment_data.post_id, comment_data.content)
    if comment_data.is_linked:
        linking.link(db, current_user.id, LinkKind.COMMENT, comment.id)
    return {
        "msg": "Comment successfully created!",
        "comment": responses.comment(db, current_user.id, comment)
    }


@router.patch("/comments/{comment_id}")
async def update_comment(
    comment_id: int,
    update: CommentUpdate,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    commenting.assert_user_is_author(db, comment_id, current_user.id)
    comment = commenting.update(db, comment_id, update.content)
    return {
        "msg": "Comment successfully updated!",
        "comment": responses.comment(db, current_user.id, comment)
    }


@router.delete("/comments/{comment_id}")
async def delete_comment(
    comment_id: int,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    commenting.assert_user_is_author(db, comment_id, current_user.id)
    linking.unlink_item(db, LinkKind.COMMENT, comment_id)
    commenting.delete(db, comment_id)
    return {"msg": "Comment deleted successfully!"}
