from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from ranking_engine.models.tournament import Tournament


class TournamentMatch(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    team1_id: int = Field(foreign_key="tournamentteam.id")
    team2_id: int = Field(foreign_key="tournamentteam.id")

    # Optional week/campaign label used to scope rankings
    week: Optional[str] = Field(default=None, index=True)

    scheduled_at: Optional[datetime] = Field(default=None)
    server_name: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    tournament: "Tournament" = Relationship(back_populates="matches")
    maps: List["TournamentMatchMap"] = Relationship(back_populates="match")


class TournamentMatchMap(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    match_id: int = Field(foreign_key="tournamentmatch.id", index=True)
    map_name: str  # Not unique: the same map can be played twice at different map_order
    map_order: int = Field(default=0)  # 0-based sequence within the match

    match: "TournamentMatch" = Relationship(back_populates="maps")
