from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from ranking_engine.models.match import TournamentMatch
    from ranking_engine.models.team import TournamentTeam

GAME_MODE_CONQUEST = "Conquest"
GAME_MODE_CTF = "CTF"


class Tournament(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    game: str = Field(default="bf1942")  # bf1942 | fh2 | bfvietnam
    game_mode: Optional[str] = Field(default=None)  # Conquest, CTF, TDM, ... (null = Conquest scoring)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    teams: List["TournamentTeam"] = Relationship(back_populates="tournament")
    matches: List["TournamentMatch"] = Relationship(back_populates="tournament")
