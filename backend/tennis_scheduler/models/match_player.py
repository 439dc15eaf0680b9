import uuid
from typing import TYPE_CHECKING, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from tennis_scheduler.models.match import Match
    from tennis_scheduler.models.player import Player


class MatchPlayer(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("match_id", "player_id", name="uq_match_player"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    match_id: uuid.UUID = Field(foreign_key="match.id", index=True)
    player_id: uuid.UUID = Field(foreign_key="player.id", index=True)
    team: Optional[int] = Field(default=None)  # None for singles, 1 | 2 for doubles

    # Relationships
    match: "Match" = Relationship(back_populates="players")
    player: "Player" = Relationship(back_populates="match_entries")
