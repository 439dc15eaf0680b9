import uuid
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from tennis_scheduler.models.match_player import MatchPlayer
    from tennis_scheduler.models.tournament import Tournament


class Player(SQLModel, table=True):
    __table_args__ = (
        # placeholder_name is the identity key used while the schedule is generated
        SAUniqueConstraint("tournament_id", "placeholder_name", name="uq_tournament_placeholder"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    tournament_id: uuid.UUID = Field(foreign_key="tournament.id", index=True)
    name: Optional[str] = Field(default=None, max_length=100)
    placeholder_name: str = Field(max_length=50)

    # Relationships
    tournament: "Tournament" = Relationship(back_populates="players")
    match_entries: List["MatchPlayer"] = Relationship(
        back_populates="player", sa_relationship_kwargs={"cascade": "all, delete-orphan"}
    )
