from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from ranking_engine.models.tournament import Tournament


class TournamentTeam(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("tournament_id", "name", name="uq_tournament_team_name"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    name: str  # Usually the clan name
    tag: Optional[str] = Field(default=None)  # Short clan tag e.g. "[GGE]"
    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    tournament: "Tournament" = Relationship(back_populates="teams")
    players: List["TournamentTeamPlayer"] = Relationship(back_populates="team")


class TournamentTeamPlayer(SQLModel, table=True):
    """Roster membership. player_name is the in-game name seen in round telemetry."""

    __table_args__ = (SAUniqueConstraint("tournament_team_id", "player_name", name="uq_team_player_name"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_team_id: int = Field(foreign_key="tournamentteam.id", index=True)
    player_name: str
    joined_at: datetime = Field(default_factory=datetime.utcnow)

    team: "TournamentTeam" = Relationship(back_populates="players")
