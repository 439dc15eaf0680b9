"""
Tournament Service: create, list, read and delete tournaments with their
players and saved schedule.
"""

import logging
import math
import uuid
from collections import Counter
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, func, select

from tennis_scheduler.models.match import Match
from tennis_scheduler.models.player import Player
from tennis_scheduler.models.schedule import Schedule
from tennis_scheduler.models.tournament import Tournament, TournamentType
from tennis_scheduler.services.schedule_mutator import PersistenceFailureError
from tennis_scheduler.services.schedule_repository import persist_generated_schedule

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    "name": Tournament.name,
    "created_at": Tournament.created_at,
    "players_count": Tournament.players_count,
    "courts": Tournament.courts,
}


def validate_tournament_business_rules(data) -> List[str]:
    """
    Cross-field rules for a tournament creation payload.

    `data` needs type, courts, players (placeholder_name) and
    schedule.matches (court_number, match_order_on_court, players with
    placeholder_name and team). Returns every violation, empty when valid.
    """
    errors: List[str] = []
    tournament_type = TournamentType(data.type)
    player_count = len(data.players)

    if tournament_type == TournamentType.singles:
        if player_count < 2:
            errors.append("Singles tournaments must have at least 2 players")
        if player_count % 2 != 0:
            errors.append("Singles tournaments must have an even number of players")
    else:
        if player_count < 4:
            errors.append("Doubles tournaments must have at least 4 players")
        if player_count % 4 != 0:
            errors.append("Doubles tournaments must have a player count divisible by 4")

    player_names = [p.placeholder_name for p in data.players]
    if len(set(player_names)) != len(player_names):
        errors.append("Duplicate placeholder names found in players list")
    known = set(player_names)

    slot_counts = Counter((m.court_number, m.match_order_on_court) for m in data.schedule.matches)
    for (court, order), count in slot_counts.items():
        if count > 1:
            errors.append(f"Duplicate match slot: court {court}, order {order}")

    expected_players = 2 if tournament_type == TournamentType.singles else 4
    referenced = set()
    for match in data.schedule.matches:
        if match.court_number < 1 or match.court_number > data.courts:
            errors.append(f"Invalid court number {match.court_number}. Must be between 1 and {data.courts}")

        if len(match.players) != expected_players:
            errors.append(
                f"Match on court {match.court_number}, order {match.match_order_on_court} "
                f"has {len(match.players)} players, expected {expected_players}"
            )

        for mp in match.players:
            referenced.add(mp.placeholder_name)
            if mp.placeholder_name not in known:
                errors.append(f"Player '{mp.placeholder_name}' in match not found in players list")

        teams = [mp.team for mp in match.players]
        if tournament_type == TournamentType.singles:
            if any(t is not None for t in teams):
                errors.append(f"Singles match on court {match.court_number} has team assignments (should be null)")
        else:
            if any(t not in (1, 2) for t in teams):
                errors.append(f"Doubles match on court {match.court_number} has invalid team values (must be 1 or 2)")
            if teams.count(1) != 2 or teams.count(2) != 2:
                errors.append(f"Doubles match on court {match.court_number} must have exactly 2 players per team")

    for name in player_names:
        if name not in referenced:
            errors.append(f"Player '{name}' is not referenced in any match")

    return errors


def _summary(tournament: Tournament) -> Dict[str, Any]:
    return {
        "id": tournament.id,
        "name": tournament.name,
        "type": TournamentType(tournament.type).value,
        "players_count": tournament.players_count,
        "courts": tournament.courts,
        "created_at": tournament.created_at,
    }


def create_tournament_with_schedule(session: Session, data) -> Dict[str, Any]:
    """
    Save tournament, players and schedule in one transaction.

    Assumes validate_tournament_business_rules(data) returned no errors.
    Raises PersistenceFailureError (after rollback) if any write fails.
    """
    try:
        tournament = Tournament(
            name=data.name,
            type=TournamentType(data.type).value,
            courts=data.courts,
            players_count=len(data.players),
        )
        session.add(tournament)
        session.flush()

        player_ids: Dict[str, uuid.UUID] = {}
        for p in data.players:
            player = Player(tournament_id=tournament.id, name=p.name, placeholder_name=p.placeholder_name)
            session.add(player)
            session.flush()
            player_ids[player.placeholder_name] = player.id

        persist_generated_schedule(session, tournament.id, data.schedule.matches, player_ids)
        session.commit()
        session.refresh(tournament)
    except PersistenceFailureError:
        session.rollback()
        raise
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception("Failed to create tournament %r", data.name)
        raise PersistenceFailureError("Failed to create tournament") from e

    logger.info(
        "Created %s tournament %s: players=%d matches=%d",
        TournamentType(tournament.type).value,
        tournament.id,
        tournament.players_count,
        len(data.schedule.matches),
    )
    return _summary(tournament)


def list_tournaments(
    session: Session,
    page: int = 1,
    page_size: int = 10,
    sort_by: str = "created_at",
    order: str = "desc",
) -> Dict[str, Any]:
    """Paginated tournament summaries: {data, pagination}."""
    column = SORT_COLUMNS[sort_by]
    ordering = column.desc() if order == "desc" else column.asc()

    total_items = session.exec(select(func.count()).select_from(Tournament)).one()
    tournaments = session.exec(
        select(Tournament).order_by(ordering, Tournament.id).offset((page - 1) * page_size).limit(page_size)
    ).all()

    return {
        "data": [_summary(t) for t in tournaments],
        "pagination": {
            "page": page,
            "page_size": page_size,
            "total_items": total_items,
            "total_pages": math.ceil(total_items / page_size) if total_items else 0,
        },
    }


def get_tournament_detail(session: Session, tournament_id: uuid.UUID) -> Optional[Dict[str, Any]]:
    """Tournament with players and schedule, or None if it does not exist."""
    tournament = session.get(Tournament, tournament_id)
    if not tournament:
        return None

    players = session.exec(
        select(Player).where(Player.tournament_id == tournament_id).order_by(Player.placeholder_name)
    ).all()
    players_by_id = {p.id: p for p in players}

    schedule_data = None
    schedule = session.exec(select(Schedule).where(Schedule.tournament_id == tournament_id)).first()
    if schedule:
        matches = session.exec(
            select(Match)
            .where(Match.schedule_id == schedule.id)
            .order_by(Match.court_number, Match.match_order_on_court)
        ).all()
        match_list = []
        for match in matches:
            entries = sorted(match.players, key=lambda mp: (mp.team or 0, players_by_id[mp.player_id].placeholder_name))
            match_list.append(
                {
                    "id": match.id,
                    "court_number": match.court_number,
                    "match_order_on_court": match.match_order_on_court,
                    "players": [
                        {
                            "player_id": mp.player_id,
                            "name": players_by_id[mp.player_id].name,
                            "placeholder_name": players_by_id[mp.player_id].placeholder_name,
                            "team": mp.team,
                        }
                        for mp in entries
                    ],
                }
            )
        schedule_data = {"id": schedule.id, "matches": match_list}

    return {
        "id": tournament.id,
        "name": tournament.name,
        "type": TournamentType(tournament.type).value,
        "courts": tournament.courts,
        "created_at": tournament.created_at,
        "players": [{"id": p.id, "name": p.name, "placeholder_name": p.placeholder_name} for p in players],
        "schedule": schedule_data,
    }


def delete_tournament(session: Session, tournament_id: uuid.UUID) -> bool:
    """Delete a tournament and everything under it. False if it did not exist."""
    tournament = session.get(Tournament, tournament_id)
    if not tournament:
        return False
    session.delete(tournament)
    session.commit()
    logger.info("Deleted tournament %s", tournament_id)
    return True
