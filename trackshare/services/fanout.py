"""Propagation of a newly logged data point into the logger's competitions.

Runs after the data point has been committed, usually as a FastAPI background
task. Each competition is written independently: a failure (for example a
competition that ended in the meantime) is logged and reported, never retried,
and never undoes the data point or the writes to sibling competitions.
"""

import logging
from typing import Callable, ContextManager, List, Optional

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from ..errors import AppError
from . import competing, joining

logger = logging.getLogger(__name__)


class FanoutOutcome(BaseModel):
    competition_id: int
    ok: bool
    error: Optional[str] = None


class FanoutReport(BaseModel):
    data_point_id: int
    outcomes: List[FanoutOutcome] = []

    @property
    def delivered(self) -> List[int]:
        return [outcome.competition_id for outcome in self.outcomes if outcome.ok]

    @property
    def failed(self) -> List[int]:
        return [outcome.competition_id for outcome in self.outcomes if not outcome.ok]


def fan_out_data_point(db: Session, user_id: int, data_point_id: int) -> FanoutReport:
    """Input a data point into every competition the user is a member of."""
    report = FanoutReport(data_point_id=data_point_id)
    competition_ids = [m.competition_id for m in joining.get_user_memberships(db, user_id)]

    for competition_id in competition_ids:
        try:
            competing.input_data(db, competition_id, data_point_id)
        except AppError as e:
            logger.warning(
                "Could not add data %s to competition %s: %s",
                data_point_id,
                competition_id,
                e,
                extra={"user_id": user_id, "error_type": e.error_type},
            )
            report.outcomes.append(FanoutOutcome(competition_id=competition_id, ok=False, error=str(e)))
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("Database error adding data %s to competition %s", data_point_id, competition_id)
            report.outcomes.append(FanoutOutcome(competition_id=competition_id, ok=False, error=str(e)))
        else:
            report.outcomes.append(FanoutOutcome(competition_id=competition_id, ok=True))

    logger.info(
        "Data %s added to %d of %d competitions",
        data_point_id,
        len(report.delivered),
        len(report.outcomes),
    )
    return report


def run_fan_out(
    session_factory: Callable[[], ContextManager[Session]],
    user_id: int,
    data_point_id: int,
    sink: Optional[Callable[[FanoutReport], None]] = None
) -> FanoutReport:
    """Background task entry point: fan out in a session of its own.

    ``sink`` receives the finished report, which lets callers observe when the
    task has completed.
    """
    with session_factory() as db:
        report = fan_out_data_point(db, user_id, data_point_id)
    if sink is not None:
        sink(report)
    return report
