from enum import Enum
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import Session

from .. import responses
from ..dependencies import get_db, require_user
from ..errors import CompetitionOwnerMismatchError
from ..models import LinkKind, User
from ..services import auth, commenting, competing, joining, linking, posting, tracking

router = APIRouter(prefix="/api/links")


class LinkCollection(str, Enum):
    POSTS = "posts"
    COMMENTS = "comments"
    DATA = "data"
    COMPETITIONS = "competitions"

    @property
    def kind(self) -> LinkKind:
        return {
            LinkCollection.POSTS: LinkKind.POST,
            LinkCollection.COMMENTS: LinkKind.COMMENT,
            LinkCollection.DATA: LinkKind.DATA,
            LinkCollection.COMPETITIONS: LinkKind.COMPETITION,
        }[self]


class LinkCreate(BaseModel):
    id: int


def assert_user_can_link(db: Session, user_id: int, kind: LinkKind, item_id: int) -> None:
    """Only the owner of an item may link it. Members may link a competition
    to show their membership."""
    if kind == LinkKind.POST:
        posting.assert_user_is_author(db, item_id, user_id)
    elif kind == LinkKind.COMMENT:
        commenting.assert_user_is_author(db, item_id, user_id)
    elif kind == LinkKind.DATA:
        tracking.assert_user_is_owner(db, item_id, user_id)
    else:
        try:
            competing.assert_user_is_owner(db, user_id, item_id)
        except CompetitionOwnerMismatchError:
            if not joining.is_member(db, user_id, item_id):
                raise


@router.get("")
async def get_links(
    user: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """All links, or the links of one user, most recent first."""
    if user:
        user_id = auth.get_user_by_username(db, user).id
        return responses.links(db, linking.get_by_user(db, user_id))
    return responses.links(db, linking.get_links(db))


@router.get("/{collection}")
async def get_collection_links(
    collection: LinkCollection,
    user: Optional[str] = None,
    db: Session = Depends(get_db)
):
    if user:
        user_id = auth.get_user_by_username(db, user).id
        return responses.links(db, linking.get_by_user(db, user_id, collection.kind))
    return responses.links(db, linking.get_links(db, collection.kind))


@router.post("/{collection}")
async def create_link(
    collection: LinkCollection,
    link_data: LinkCreate,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    assert_user_can_link(db, current_user.id, collection.kind, link_data.id)
    link = linking.link(db, current_user.id, collection.kind, link_data.id)
    return {"msg": "Item successfully linked with user!", "link": responses.link(db, link)}


@router.get("/{collection}/{item_id}")
async def get_item_links(
    collection: LinkCollection,
    item_id: int,
    db: Session = Depends(get_db)
):
    return responses.links(db, linking.get_by_item(db, collection.kind, item_id))


@router.delete("/{collection}/{item_id}")
async def delete_link(
    collection: LinkCollection,
    item_id: int,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    linking.unlink(db, current_user.id, collection.kind, item_id)
    return {"msg": "Item successfully unlinked from user!"}
