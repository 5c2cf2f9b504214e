import datetime as dt
import logging
from typing import Callable, ContextManager, Optional, Tuple

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict, Field
from sqlmodel import Session

from .. import responses
from ..database import get_session_factory
from ..dependencies import get_db, require_user
from ..models import LinkKind, User
from ..services import auth, competing, fanout, linking, tracking
from ..services.tracking import SortOption

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


class DataCreate(BaseModel):
    """Schema for logging a score."""
    model_config = ConfigDict(populate_by_name=True)

    is_linked: bool = Field(default=False, alias="isLinked")
    date: dt.date
    score: float


class DataUpdate(BaseModel):
    date: Optional[dt.date] = None
    score: Optional[float] = None


def parse_date_range(date_range: str) -> Tuple[dt.date, dt.date]:
    """Parse ``YYYY-MM-DD_YYYY-MM-DD`` into an inclusive (start, end) pair."""
    try:
        start, end = date_range.split("_")
        return dt.date.fromisoformat(start), dt.date.fromisoformat(end)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="dateRange must be formatted as YYYY-MM-DD_YYYY-MM-DD"
        )


@router.get("/data")
async def get_data(
    username: Optional[str] = None,
    date: Optional[dt.date] = None,
    date_range: Optional[str] = Query(default=None, alias="dateRange"),
    sort: Optional[SortOption] = None,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    """Filter and sort logged data. Owners of unlinked data are redacted."""
    user_id = auth.get_user_by_username(db, username).id if username else None
    parsed_range = parse_date_range(date_range) if date_range else None
    data = tracking.get_data(db, user_id, date, parsed_range, sort)
    return responses.data_points(db, current_user.id, data)


@router.post("/data")
async def log_data(
    data_in: DataCreate,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_db),
    session_factory: Callable[[], ContextManager[Session]] = Depends(get_session_factory)
):
    """
    Log a score, then add it to every competition the user belongs to.
    The competitions are updated in a background task after the response.
    """
    data_point = tracking.log(db, current_user.id, data_in.date, data_in.score)
    if data_in.is_linked:
        linking.link(db, current_user.id, LinkKind.DATA, data_point.id)

    background_tasks.add_task(fanout.run_fan_out, session_factory, current_user.id, data_point.id)
    logger.debug("Scheduled competition fan-out for data %s", data_point.id)

    msg = "Data successfully logged!"
    if data_in.is_linked:
        msg += " Linked data to user!"
    return {"msg": msg, "data": responses.data_point(db, current_user.id, data_point)}


@router.patch("/data/{data_id}")
async def update_data(
    data_id: int,
    update: DataUpdate,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    tracking.assert_user_is_owner(db, data_id, current_user.id)
    competing.assert_data_not_in_ended_competition(db, data_id)
    data_point = tracking.update(db, data_id, update.date, update.score)
    return {"msg": "Data successfully updated!", "data": responses.data_point(db, current_user.id, data_point)}


@router.delete("/data/{data_id}")
async def delete_data(
    data_id: int,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_db)
):
    tracking.assert_user_is_owner(db, data_id, current_user.id)
    competing.assert_data_not_in_ended_competition(db, data_id)
    linking.unlink_item(db, LinkKind.DATA, data_id)
    tracking.delete(db, data_id)
    return {"msg": "Data successfully deleted!"}
