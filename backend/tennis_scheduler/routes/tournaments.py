import uuid
from datetime import datetime
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel, Field, field_validator
from sqlmodel import Session

from tennis_scheduler.database import get_session
from tennis_scheduler.models.tournament import TournamentType
from tennis_scheduler.services.schedule_mutator import PersistenceFailureError
from tennis_scheduler.services.tournament_service import (
    create_tournament_with_schedule,
    delete_tournament,
    get_tournament_detail,
    list_tournaments,
    validate_tournament_business_rules,
)

router = APIRouter()


class TournamentPlayerCreate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=100)
    placeholder_name: str = Field(min_length=1, max_length=50)


class TournamentMatchPlayerCreate(BaseModel):
    placeholder_name: str = Field(min_length=1, max_length=50)
    team: Optional[int] = None


class TournamentMatchCreate(BaseModel):
    court_number: int
    match_order_on_court: int = Field(ge=1)
    players: List[TournamentMatchPlayerCreate]


class TournamentScheduleCreate(BaseModel):
    matches: List[TournamentMatchCreate] = Field(min_length=1)


class TournamentCreate(BaseModel):
    name: str = Field(max_length=100)
    type: TournamentType
    courts: int = Field(ge=1, le=6)
    players: List[TournamentPlayerCreate] = Field(min_length=2, max_length=24)
    schedule: TournamentScheduleCreate

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("name is required")
        return v.strip()


class TournamentSummaryResponse(BaseModel):
    id: uuid.UUID
    name: str
    type: TournamentType
    players_count: int
    courts: int
    created_at: datetime


class PaginationResponse(BaseModel):
    page: int
    page_size: int
    total_items: int
    total_pages: int


class TournamentListResponse(BaseModel):
    data: List[TournamentSummaryResponse]
    pagination: PaginationResponse


class PlayerResponse(BaseModel):
    id: uuid.UUID
    name: Optional[str]
    placeholder_name: str


class MatchPlayerResponse(BaseModel):
    player_id: uuid.UUID
    name: Optional[str]
    placeholder_name: str
    team: Optional[int]


class MatchResponse(BaseModel):
    id: uuid.UUID
    court_number: int
    match_order_on_court: int
    players: List[MatchPlayerResponse]


class ScheduleResponse(BaseModel):
    id: uuid.UUID
    matches: List[MatchResponse]


class TournamentDetailResponse(BaseModel):
    id: uuid.UUID
    name: str
    type: TournamentType
    courts: int
    created_at: datetime
    players: List[PlayerResponse]
    schedule: Optional[ScheduleResponse]


@router.get("/tournaments", response_model=TournamentListResponse)
def get_tournaments(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    sort_by: Literal["name", "created_at", "players_count", "courts"] = "created_at",
    order: Literal["asc", "desc"] = "desc",
    session: Session = Depends(get_session),
):
    """List tournaments (paginated, sortable)"""
    return list_tournaments(session, page=page, page_size=page_size, sort_by=sort_by, order=order)


@router.post("/tournaments", response_model=TournamentSummaryResponse, status_code=201)
def create_tournament(tournament_data: TournamentCreate, session: Session = Depends(get_session)):
    """Create a tournament with its players and a previously generated schedule"""
    errors = validate_tournament_business_rules(tournament_data)
    if errors:
        raise HTTPException(status_code=422, detail={"error": "Validation failed", "details": errors})

    try:
        return create_tournament_with_schedule(session, tournament_data)
    except PersistenceFailureError:
        raise HTTPException(status_code=500, detail={"error": "Failed to create tournament"})


@router.get("/tournaments/{tournament_id}", response_model=TournamentDetailResponse)
def get_tournament(tournament_id: uuid.UUID, session: Session = Depends(get_session)):
    """Get a tournament with players and schedule"""
    detail = get_tournament_detail(session, tournament_id)
    if detail is None:
        raise HTTPException(status_code=404, detail="Tournament not found")
    return detail


@router.delete("/tournaments/{tournament_id}", status_code=204)
def remove_tournament(tournament_id: uuid.UUID, session: Session = Depends(get_session)):
    """Delete a tournament and its schedule"""
    if not delete_tournament(session, tournament_id):
        raise HTTPException(status_code=404, detail="Tournament not found")
    return Response(status_code=204)
