"""
Manual schedule edits: fetch, validate, persist, commit as one transaction.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import List, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from tennis_scheduler.services.schedule_mutator import (
    MatchPositionUpdate,
    PersistenceFailureError,
    ScheduleUpdateError,
    apply_updates,
)
from tennis_scheduler.services.schedule_repository import (
    fetch_court_limit,
    fetch_current_matches,
    persist_match_updates,
)

logger = logging.getLogger(__name__)


@dataclass
class UpdateResult:
    schedule_id: uuid.UUID
    updated_match_ids: List[uuid.UUID]


def update_schedule_matches(
    session: Session, schedule_id: uuid.UUID, updates: Sequence[MatchPositionUpdate]
) -> UpdateResult:
    """
    Apply a batch of (court, order) moves to one schedule.

    Either every update is committed or none is; the snapshot is re-read
    inside the transaction so checks run against current state.

    Raises:
        ScheduleNotFoundError, DuplicateUpdateTargetError, CourtOutOfRangeError,
        UnknownMatchError, PositionConflictError, PersistenceFailureError
    """
    try:
        max_courts = fetch_court_limit(session, schedule_id)
        current = fetch_current_matches(session, schedule_id, for_update=True)
        applied = apply_updates(current, updates, max_courts)
        persist_match_updates(session, schedule_id, updates)
        session.commit()
    except ScheduleUpdateError:
        session.rollback()
        raise
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception("Commit failed for schedule %s", schedule_id)
        raise PersistenceFailureError("Failed to save schedule changes") from e

    logger.info("Updated %d matches in schedule %s", len(applied.updated_match_ids), schedule_id)
    return UpdateResult(schedule_id=schedule_id, updated_match_ids=list(applied.updated_match_ids))
