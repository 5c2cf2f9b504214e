from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlmodel import Session

from .. import responses
from ..dependencies import get_db, require_user
from ..models import LinkKind, User
from ..services import auth, competing, joining, linking

router = APIRouter(prefix="/api/competitions")


class CompetitionCreate(BaseModel):
    """Schema for creating a competition."""
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1)
    end_date: datetime = Field(alias="endDate")


class CompetitionUpdate(BaseModel):
    """Schema for updating a competition. ``owner`` is a username."""
    model_config = ConfigDict(populate_by_name=True)

    new_name: Optional[str] = Field(default=None, alias="newName", min_length=1)
    owner: Optional[str] = None
    end_date: Optional[datetime] = Field(default=None, alias="endDate")


@router.get("")
async def get_competitions(
    username: Optional[str] = None,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    """Active competitions, soonest-ending first, optionally only those a user
    is a member of. Unlinked owners are redacted."""
    competitions = competing.get_competitions(db)
    if username:
        user_id = auth.get_user_by_username(db, username).id
        joined = {membership.competition_id for membership in joining.get_user_memberships(db, user_id)}
        competitions = [competition for competition in competitions if competition.id in joined]
    return responses.competitions(db, current_user.id, competitions)


@router.post("")
async def create_competition(
    competition_data: CompetitionCreate,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    """Create a competition and enroll its creator."""
    competition = competing.create(db, current_user.id, competition_data.name, competition_data.end_date)
    joining.join(db, current_user.id, competition.id)
    return {
        "msg": "Competition successfully created and joined!",
        "competition": responses.competition(db, current_user.id, competition)
    }


@router.patch("/{name}")
async def update_competition(
    name: str,
    update: CompetitionUpdate,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    competition = competing.get_by_name(db, name)
    competing.assert_user_is_owner(db, current_user.id, competition.id)
    owner_id = auth.get_user_by_username(db, update.owner).id if update.owner else None
    competition = competing.update(db, competition.id, update.new_name, owner_id, update.end_date)
    return {
        "msg": "Competition successfully updated!",
        "competition": responses.competition(db, current_user.id, competition)
    }


@router.delete("/{name}")
async def delete_competition(
    name: str,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    """Delete a competition together with its memberships and links."""
    competition = competing.get_by_name(db, name)
    competing.assert_user_is_owner(db, current_user.id, competition.id)
    competition_id = competition.id
    joining.remove_competition(db, competition_id)
    linking.unlink_item(db, LinkKind.COMPETITION, competition_id)
    competing.delete(db, competition_id)
    return {"msg": "Competition deleted successfully!"}


@router.get("/{name}/leaderboard")
async def get_leaderboard(
    name: str,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    """Competition data ranked by score, highest first."""
    competition = competing.get_by_name(db, name)
    ranked = competing.get_leaderboard(db, competition.id)
    return responses.leaderboard(db, current_user.id, ranked)


@router.get("/{name}/users")
async def get_competition_members(
    name: str,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    competition = competing.get_by_name(db, name)
    member_ids = joining.get_members(db, competition.id)
    return responses.members(db, current_user.id, competition.id, member_ids)


@router.post("/{name}/users")
async def join_competition(
    name: str,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    competition = competing.get_by_name(db, name)
    joining.join(db, current_user.id, competition.id)
    return {"msg": "Competition successfully joined!"}


@router.delete("/{name}/users")
async def leave_competition(
    name: str,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    competition = competing.get_by_name(db, name)
    joining.leave(db, current_user.id, competition.id)
    return {"msg": "Competition successfully left!"}
