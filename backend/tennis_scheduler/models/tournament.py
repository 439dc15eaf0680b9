import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import String
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from tennis_scheduler.models.player import Player
    from tennis_scheduler.models.schedule import Schedule


class TournamentType(str, Enum):
    singles = "singles"
    doubles = "doubles"


class Tournament(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str
    type: TournamentType = Field(sa_column=Column(String, nullable=False))
    courts: int
    players_count: int = Field(default=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Relationships
    players: List["Player"] = Relationship(
        back_populates="tournament", sa_relationship_kwargs={"cascade": "all, delete-orphan"}
    )
    schedule: Optional["Schedule"] = Relationship(
        back_populates="tournament",
        sa_relationship_kwargs={"uselist": False, "cascade": "all, delete-orphan"},
    )
