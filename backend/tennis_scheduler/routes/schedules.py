import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, model_validator
from sqlmodel import Session

from tennis_scheduler.database import get_session
from tennis_scheduler.models.tournament import TournamentType
from tennis_scheduler.services.schedule_generator import PlayerEntry, generate_schedule
from tennis_scheduler.services.schedule_mutator import (
    CourtOutOfRangeError,
    DuplicateUpdateTargetError,
    MatchPositionUpdate,
    PersistenceFailureError,
    PositionConflictError,
    ScheduleNotFoundError,
    ScheduleUpdateError,
    UnknownMatchError,
)
from tennis_scheduler.services.schedule_updates import update_schedule_matches


router = APIRouter()

MAX_COURTS = 6
MIN_PLAYERS = 2
MAX_PLAYERS = 24
MAX_UPDATES_PER_REQUEST = 100


# ============================================================================
# Schedule Generation
# ============================================================================


class GenerateSchedulePlayer(BaseModel):
    name: Optional[str] = Field(default=None, max_length=100)
    placeholder_name: str = Field(min_length=1, max_length=50)


class GenerateScheduleRequest(BaseModel):
    type: TournamentType
    courts: int = Field(ge=1, le=MAX_COURTS)
    players: List[GenerateSchedulePlayer] = Field(min_length=MIN_PLAYERS, max_length=MAX_PLAYERS)

    @model_validator(mode="after")
    def validate_roster(self):
        count = len(self.players)
        if self.type == TournamentType.doubles and (count < 4 or count % 2 != 0):
            raise ValueError(
                "Singles requires at least 2 players. Doubles requires at least 4 players and an even number."
            )
        names = [p.placeholder_name for p in self.players]
        if len(set(names)) != len(names):
            raise ValueError("Each player must have a unique placeholder_name")
        return self


class GeneratedMatchPlayerResponse(BaseModel):
    placeholder_name: str
    team: Optional[int] = None


class GeneratedMatchResponse(BaseModel):
    court_number: int
    match_order_on_court: int
    players: List[GeneratedMatchPlayerResponse]


class GenerateScheduleResponse(BaseModel):
    matches: List[GeneratedMatchResponse]


@router.post("/schedules/generate", response_model=GenerateScheduleResponse)
def generate_schedule_preview(data: GenerateScheduleRequest):
    """Generate a schedule preview; nothing is saved"""
    players = [PlayerEntry(placeholder_name=p.placeholder_name, name=p.name) for p in data.players]
    schedule = generate_schedule(data.type, data.courts, players)
    return schedule.to_dict()


# ============================================================================
# Manual Match Updates
# ============================================================================


class MatchUpdate(BaseModel):
    match_id: uuid.UUID
    court_number: int = Field(ge=1)
    match_order_on_court: int = Field(ge=1)


class UpdateScheduleMatchesRequest(BaseModel):
    updates: List[MatchUpdate] = Field(min_length=1, max_length=MAX_UPDATES_PER_REQUEST)


class UpdateScheduleMatchesResponse(BaseModel):
    schedule_id: uuid.UUID
    updated_matches: List[uuid.UUID]


def _status_for(error: ScheduleUpdateError) -> int:
    if isinstance(error, ScheduleNotFoundError):
        return 404
    if isinstance(error, PositionConflictError):
        return 409
    if isinstance(error, (DuplicateUpdateTargetError, CourtOutOfRangeError, UnknownMatchError)):
        return 400
    return 500


@router.patch("/schedules/{schedule_id}/matches", response_model=UpdateScheduleMatchesResponse)
def update_matches(
    schedule_id: uuid.UUID,
    data: UpdateScheduleMatchesRequest,
    session: Session = Depends(get_session),
):
    """Move matches to new (court, order) positions; all-or-nothing"""
    updates = [
        MatchPositionUpdate(
            match_id=u.match_id,
            court_number=u.court_number,
            match_order_on_court=u.match_order_on_court,
        )
        for u in data.updates
    ]
    try:
        result = update_schedule_matches(session, schedule_id, updates)
    except PersistenceFailureError:
        raise HTTPException(
            status_code=500,
            detail={"error": "Internal Server Error", "message": "Failed to update schedule"},
        )
    except ScheduleUpdateError as e:
        raise HTTPException(status_code=_status_for(e), detail=e.to_detail())

    return {"schedule_id": result.schedule_id, "updated_matches": result.updated_match_ids}
