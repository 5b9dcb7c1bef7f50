import os
from pathlib import Path

from dotenv import load_dotenv
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./rankings.db")

_is_sqlite = DATABASE_URL.startswith("sqlite")
_connect_args = {"check_same_thread": False} if _is_sqlite else {}
_echo = os.getenv("SQL_ECHO", "false").lower() in ("true", "1", "yes")

if _is_sqlite and ":memory:" not in DATABASE_URL:
    db_path = DATABASE_URL.replace("sqlite:///", "", 1)
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)

engine: Engine = create_engine(
    DATABASE_URL,
    echo=_echo,
    connect_args=_connect_args,
)


def init_db(bind: Engine = engine) -> None:
    """Initialize database - create all tables"""
    # Import all models to ensure they're registered with SQLModel metadata
    from ranking_engine.models.match import TournamentMatch, TournamentMatchMap  # noqa: F401
    from ranking_engine.models.match_result import TournamentMatchResult  # noqa: F401
    from ranking_engine.models.round import Round, RoundPlayer  # noqa: F401
    from ranking_engine.models.team import TournamentTeam, TournamentTeamPlayer  # noqa: F401
    from ranking_engine.models.team_ranking import TournamentTeamRanking  # noqa: F401
    from ranking_engine.models.tournament import Tournament  # noqa: F401

    SQLModel.metadata.create_all(bind)
