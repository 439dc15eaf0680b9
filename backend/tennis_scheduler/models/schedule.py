import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, List

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from tennis_scheduler.models.match import Match
    from tennis_scheduler.models.tournament import Tournament


class Schedule(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    tournament_id: uuid.UUID = Field(foreign_key="tournament.id", unique=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Relationships
    tournament: "Tournament" = Relationship(back_populates="schedule")
    matches: List["Match"] = Relationship(
        back_populates="schedule", sa_relationship_kwargs={"cascade": "all, delete-orphan"}
    )
