"""
Schedule persistence: the narrow read/write seams the scheduler core needs.

None of these commit. The caller owns the transaction so a rejected batch
can be rolled back as a whole.
"""

import logging
import uuid
from typing import Dict, List, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from tennis_scheduler.models.match import Match
from tennis_scheduler.models.match_player import MatchPlayer
from tennis_scheduler.models.schedule import Schedule
from tennis_scheduler.models.tournament import Tournament
from tennis_scheduler.services.schedule_mutator import (
    MatchPosition,
    MatchPositionUpdate,
    PersistenceFailureError,
    ScheduleNotFoundError,
)

logger = logging.getLogger(__name__)


def fetch_current_matches(session: Session, schedule_id: uuid.UUID, for_update: bool = False) -> List[MatchPosition]:
    """
    Snapshot of every match position in a schedule, ordered by court then order.

    for_update=True takes row locks on dialects that support SELECT ... FOR UPDATE.
    """
    stmt = (
        select(Match)
        .where(Match.schedule_id == schedule_id)
        .order_by(Match.court_number, Match.match_order_on_court)
    )
    if for_update:
        stmt = stmt.with_for_update()
    matches = session.exec(stmt).all()
    return [MatchPosition(id=m.id, court_number=m.court_number, match_order_on_court=m.match_order_on_court) for m in matches]


def fetch_court_limit(session: Session, schedule_id: uuid.UUID) -> int:
    """Number of courts of the tournament that owns the schedule."""
    schedule = session.get(Schedule, schedule_id)
    if not schedule:
        raise ScheduleNotFoundError(schedule_id)
    tournament = session.get(Tournament, schedule.tournament_id)
    if not tournament:
        raise ScheduleNotFoundError(schedule_id)
    return tournament.courts


def persist_match_updates(
    session: Session, schedule_id: uuid.UUID, updates: Sequence[MatchPositionUpdate]
) -> None:
    """
    Write accepted positions.

    Moved rows are first parked on negative orders and flushed, then written
    to their targets, so a swap never hits uq_match_schedule_position halfway.
    """
    if not updates:
        return

    match_ids = [u.match_id for u in updates]
    try:
        rows = session.exec(
            select(Match).where(Match.schedule_id == schedule_id, Match.id.in_(match_ids))
        ).all()
        by_id: Dict[uuid.UUID, Match] = {m.id: m for m in rows}

        # Phase 1: park
        for index, update in enumerate(updates):
            row = by_id[update.match_id]
            row.match_order_on_court = -(index + 1)
            session.add(row)
        session.flush()

        # Phase 2: final positions
        for update in updates:
            row = by_id[update.match_id]
            row.court_number = update.court_number
            row.match_order_on_court = update.match_order_on_court
            session.add(row)
        session.flush()
    except SQLAlchemyError as e:
        logger.exception("Failed to persist %d match updates for schedule %s", len(updates), schedule_id)
        raise PersistenceFailureError("Failed to save schedule changes") from e


def persist_generated_schedule(
    session: Session,
    tournament_id: uuid.UUID,
    matches: Sequence,
    player_ids: Dict[str, uuid.UUID],
) -> Schedule:
    """
    Create Schedule, Match and MatchPlayer rows for a tournament.

    `matches` items need court_number, match_order_on_court and players
    (each with placeholder_name and team); `player_ids` maps placeholder
    names to Player ids.
    """
    try:
        schedule = Schedule(tournament_id=tournament_id)
        session.add(schedule)
        session.flush()

        for item in matches:
            match = Match(
                schedule_id=schedule.id,
                court_number=item.court_number,
                match_order_on_court=item.match_order_on_court,
            )
            session.add(match)
            session.flush()
            for slot in item.players:
                session.add(
                    MatchPlayer(match_id=match.id, player_id=player_ids[slot.placeholder_name], team=slot.team)
                )
        session.flush()
    except SQLAlchemyError as e:
        logger.exception("Failed to persist schedule for tournament %s", tournament_id)
        raise PersistenceFailureError("Failed to save schedule") from e

    return schedule
