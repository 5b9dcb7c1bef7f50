from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, SQLModel


class TournamentTeamRanking(SQLModel, table=True):
    """Derived standings row. Rebuilt wholesale per (tournament, week) scope, never patched."""

    __table_args__ = (
        # week NULL (cumulative) rows are not covered on most backends; the rebuild keeps them unique
        SAUniqueConstraint("tournament_id", "team_id", "week", name="uq_ranking_team_week"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    team_id: int = Field(foreign_key="tournamentteam.id")
    week: Optional[str] = Field(default=None, index=True)  # NULL = cumulative across all weeks

    # Round-level statistics
    rounds_won: int = Field(default=0)
    rounds_tied: int = Field(default=0)
    rounds_lost: int = Field(default=0)
    ticket_differential: int = Field(default=0)

    # Match-level statistics (tickets summed over a match's rounds)
    matches_played: int = Field(default=0)
    victories: int = Field(default=0)
    ties: int = Field(default=0)
    losses: int = Field(default=0)

    tickets_for: int = Field(default=0)
    tickets_against: int = Field(default=0)

    points: int = Field(default=0)  # rounds_won, or 3*victories + ties for CTF
    rank: int

    updated_at: datetime = Field(default_factory=datetime.utcnow)
