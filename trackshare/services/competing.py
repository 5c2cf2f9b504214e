import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..errors import (
    AlreadyOwnerError,
    CompetitionEndedError,
    CompetitionOwnerMismatchError,
    DateNotInFutureError,
    DuplicateCompetitionNameError,
    NotFoundError,
)
from ..models import Competition, CompetitionEntry, DataPoint
from . import tracking

logger = logging.getLogger(__name__)


def as_utc(value: datetime) -> datetime:
    """Normalize to the naive UTC datetimes stored in the database."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def is_ended(competition: Competition) -> bool:
    return competition.end_date <= datetime.utcnow()


def create(db: Session, owner_id: int, name: str, end_date: datetime) -> Competition:
    """Create a competition with no data. The end date must be in the future."""
    end_date = as_utc(end_date)
    _assert_name_unique(db, name)
    _assert_date_in_future(end_date)

    competition = Competition(name=name, owner_id=owner_id, end_date=end_date)
    _commit(db, competition)
    logger.info("Created competition %s (%s) owned by %s", competition.id, name, owner_id)
    return competition


def update(
    db: Session,
    competition_id: int,
    name: Optional[str] = None,
    owner_id: Optional[int] = None,
    end_date: Optional[datetime] = None
) -> Competition:
    """Partially update a competition that has not ended yet.

    Every supplied field is validated before anything is written.
    """
    competition = get_competition(db, competition_id)
    if is_ended(competition):
        raise CompetitionEndedError(competition_id)

    if name is not None and name != competition.name:
        _assert_name_unique(db, name)
    if owner_id is not None and owner_id == competition.owner_id:
        raise AlreadyOwnerError(owner_id, competition_id)
    if end_date is not None:
        end_date = as_utc(end_date)
        _assert_date_in_future(end_date)

    if name is not None:
        competition.name = name
    if owner_id is not None:
        competition.owner_id = owner_id
    if end_date is not None:
        competition.end_date = end_date
    competition.updated_at = datetime.utcnow()
    return _commit(db, competition)


def input_data(db: Session, competition_id: int, data_point_id: int) -> CompetitionEntry:
    """Append a data point to a competition that has not ended yet."""
    competition = get_competition(db, competition_id)
    if is_ended(competition):
        raise CompetitionEndedError(competition_id)

    entry = CompetitionEntry(competition_id=competition_id, data_point_id=data_point_id)
    competition.updated_at = datetime.utcnow()
    db.add(entry)
    db.add(competition)
    db.commit()
    db.refresh(entry)
    return entry


def delete(db: Session, competition_id: int) -> None:
    """Delete a competition and its data entries.

    Memberships and links are left to the caller.
    """
    competition = get_competition(db, competition_id)
    entries = db.exec(
        select(CompetitionEntry).where(CompetitionEntry.competition_id == competition_id)
    ).all()
    for entry in entries:
        db.delete(entry)
    db.delete(competition)
    db.commit()
    logger.info("Deleted competition %s", competition_id)


def get_competitions(db: Session) -> List[Competition]:
    """Active competitions, soonest-ending first."""
    statement = (
        select(Competition)
        .where(Competition.end_date > datetime.utcnow())
        .order_by(Competition.end_date, Competition.id)
    )
    return db.exec(statement).all()


def get_competition(db: Session, competition_id: int) -> Competition:
    competition = db.get(Competition, competition_id)
    if not competition:
        raise NotFoundError("Competition {0} does not exist!", competition_id)
    return competition


def get_by_name(db: Session, name: str) -> Competition:
    competition = db.exec(select(Competition).where(Competition.name == name)).first()
    if not competition:
        raise NotFoundError("Competition {0} does not exist!", name)
    return competition


def ids_to_names(db: Session, ids: List[int]) -> List[str]:
    if not ids:
        return []
    competitions = db.exec(select(Competition).where(Competition.id.in_(set(ids)))).all()
    by_id = {competition.id: competition.name for competition in competitions}
    return [by_id.get(competition_id, str(competition_id)) for competition_id in ids]


def get_data_ids(db: Session, competition_id: int) -> List[int]:
    """Ids of the data points contributed to a competition, in arrival order."""
    statement = (
        select(CompetitionEntry.data_point_id)
        .where(CompetitionEntry.competition_id == competition_id)
        .order_by(CompetitionEntry.id)
    )
    return list(db.exec(statement).all())


def get_leaderboard(db: Session, competition_id: int) -> List[DataPoint]:
    """
    Data points of a competition ranked by score, highest first.
    Equal scores keep arrival order. Data points deleted since they were
    contributed are skipped.
    """
    get_competition(db, competition_id)
    data_ids = get_data_ids(db, competition_id)
    by_id = {data.id: data for data in tracking.get_by_ids(db, data_ids)}
    ordered = [by_id[data_id] for data_id in data_ids if data_id in by_id]
    return sorted(ordered, key=lambda data: data.score, reverse=True)


def assert_data_not_in_ended_competition(db: Session, data_point_id: int) -> None:
    """Data held by an ended competition is frozen, so its results stay final."""
    statement = (
        select(Competition)
        .join(CompetitionEntry, CompetitionEntry.competition_id == Competition.id)
        .where(CompetitionEntry.data_point_id == data_point_id)
    )
    for competition in db.exec(statement).all():
        if is_ended(competition):
            raise CompetitionEndedError(competition.id)


def assert_user_is_owner(db: Session, user_id: int, competition_id: int) -> None:
    competition = get_competition(db, competition_id)
    if competition.owner_id != user_id:
        raise CompetitionOwnerMismatchError(user_id, competition_id)


def redact_owner(competition: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of a competition representation without its owner."""
    return {key: value for key, value in competition.items() if key != "owner"}


def _assert_name_unique(db: Session, name: str) -> None:
    if db.exec(select(Competition).where(Competition.name == name)).first():
        raise DuplicateCompetitionNameError(name)


def _assert_date_in_future(end_date: datetime) -> None:
    if end_date <= datetime.utcnow():
        raise DateNotInFutureError(end_date)


def _commit(db: Session, competition: Competition) -> Competition:
    # Two concurrent creates can both pass the name check; the unique index decides
    name = competition.name
    try:
        db.add(competition)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateCompetitionNameError(name) from e
    db.refresh(competition)
    return competition
