import uuid
from typing import TYPE_CHECKING, List

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from tennis_scheduler.models.match_player import MatchPlayer
    from tennis_scheduler.models.schedule import Schedule


class Match(SQLModel, table=True):
    __table_args__ = (
        SAUniqueConstraint("schedule_id", "court_number", "match_order_on_court", name="uq_match_schedule_position"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    schedule_id: uuid.UUID = Field(foreign_key="schedule.id", index=True)
    court_number: int  # 1..tournament.courts
    match_order_on_court: int  # 1..k, sequential per court

    # Relationships
    schedule: "Schedule" = Relationship(back_populates="matches")
    players: List["MatchPlayer"] = Relationship(
        back_populates="match", sa_relationship_kwargs={"cascade": "all, delete-orphan"}
    )
