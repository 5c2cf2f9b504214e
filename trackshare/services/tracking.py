import logging
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from sqlmodel import Session, select

from ..errors import DataOwnerMismatchError, NotFoundError
from ..models import DataPoint

logger = logging.getLogger(__name__)


class SortOption(str, Enum):
    SCORE = "score"
    DATE = "date"


def log(db: Session, user_id: int, day: date, score: float) -> DataPoint:
    """Record a score for a user on a given day."""
    data_point = DataPoint(user_id=user_id, date=day, score=score)
    db.add(data_point)
    db.commit()
    db.refresh(data_point)
    logger.info("Logged data %s for user %s", data_point.id, user_id)
    return data_point


def get_data(
    db: Session,
    user_id: Optional[int] = None,
    day: Optional[date] = None,
    date_range: Optional[Tuple[date, date]] = None,
    sort: Optional[SortOption] = None
) -> List[DataPoint]:
    """
    Get data points, most recent first, narrowed by every filter given:
    owner, exact day, or an inclusive (start, end) range of days.
    Optionally sorted descending by score or by date; ties keep the
    most-recent-first order.
    """
    statement = select(DataPoint)
    if user_id is not None:
        statement = statement.where(DataPoint.user_id == user_id)
    if day is not None:
        statement = statement.where(DataPoint.date == day)
    if date_range is not None:
        start, end = date_range
        statement = statement.where(DataPoint.date >= start, DataPoint.date <= end)
    data = db.exec(statement.order_by(DataPoint.id.desc())).all()

    if sort == SortOption.SCORE:
        return sorted(data, key=lambda d: d.score, reverse=True)
    if sort == SortOption.DATE:
        return sorted(data, key=lambda d: d.date, reverse=True)
    return list(data)


def get_data_point(db: Session, data_id: int) -> DataPoint:
    data_point = db.get(DataPoint, data_id)
    if not data_point:
        raise NotFoundError("Data {0} does not exist!", data_id)
    return data_point


def get_by_ids(db: Session, ids: List[int]) -> List[DataPoint]:
    if not ids:
        return []
    return db.exec(select(DataPoint).where(DataPoint.id.in_(ids))).all()


def update(db: Session, data_id: int, day: Optional[date] = None, score: Optional[float] = None) -> DataPoint:
    data_point = get_data_point(db, data_id)
    if day is not None:
        data_point.date = day
    if score is not None:
        data_point.score = score
    data_point.updated_at = datetime.utcnow()
    db.add(data_point)
    db.commit()
    db.refresh(data_point)
    return data_point


def delete(db: Session, data_id: int) -> None:
    db.delete(get_data_point(db, data_id))
    db.commit()


def assert_user_is_owner(db: Session, data_id: int, user_id: int) -> None:
    data_point = get_data_point(db, data_id)
    if data_point.user_id != user_id:
        raise DataOwnerMismatchError(data_id, user_id)


def redact_user(data: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of a data point representation without its owner."""
    return {key: value for key, value in data.items() if key != "user"}
