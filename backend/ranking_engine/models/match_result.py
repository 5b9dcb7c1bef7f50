from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel


class TournamentMatchResult(SQLModel, table=True):
    """Outcome of one played map within one scheduled match.

    team1_id/team2_id are None when identity resolution failed ("unmapped").
    winning_team_id is None for a tie, and is always None while either side is unmapped.
    Tickets stay attached to side 1 / side 2 of this row; they are never re-read by label.
    """

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    match_id: int = Field(foreign_key="tournamentmatch.id", index=True)
    map_id: int = Field(index=True)  # no FK: see cleanup_orphaned_results
    round_id: Optional[str] = Field(default=None, foreign_key="round.round_id")  # null for manual entries
    week: Optional[str] = Field(default=None, index=True)  # denormalized from TournamentMatch.week

    team1_id: Optional[int] = Field(default=None, foreign_key="tournamentteam.id")
    team2_id: Optional[int] = Field(default=None, foreign_key="tournamentteam.id")
    winning_team_id: Optional[int] = Field(default=None, foreign_key="tournamentteam.id")

    team1_tickets: int = Field(default=0)
    team2_tickets: int = Field(default=0)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def is_mapped(self) -> bool:
        return self.team1_id is not None and self.team2_id is not None
