from datetime import datetime
from typing import List, Optional

from sqlmodel import Field, Relationship, SQLModel


class Round(SQLModel, table=True):
    """One played map instance, written by round ingestion. Read-only here."""

    round_id: str = Field(primary_key=True)  # hash prefix assigned by ingestion
    server_name: str = Field(default="")
    map_name: str = Field(default="")
    start_time: datetime = Field(default_factory=datetime.utcnow)
    end_time: Optional[datetime] = Field(default=None)

    # Team labels are whatever the game calls the sides ("Axis", "Allies", ...)
    team1_label: Optional[str] = Field(default=None)
    team2_label: Optional[str] = Field(default=None)
    tickets1: Optional[int] = Field(default=None)
    tickets2: Optional[int] = Field(default=None)

    players: List["RoundPlayer"] = Relationship(back_populates="round")


class RoundPlayer(SQLModel, table=True):
    """A player's participation in a round, with the team label they were observed on."""

    id: Optional[int] = Field(default=None, primary_key=True)
    round_id: str = Field(foreign_key="round.round_id", index=True)
    player_name: str
    team_label: str = Field(default="")

    round: Round = Relationship(back_populates="players")
