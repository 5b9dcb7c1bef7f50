from typing import Dict, List, Optional, Tuple

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from ranking_engine.database import init_db
from ranking_engine.models.match import TournamentMatch, TournamentMatchMap
from ranking_engine.models.round import Round, RoundPlayer
from ranking_engine.models.team import TournamentTeam, TournamentTeamPlayer
from ranking_engine.models.tournament import Tournament

TEST_DATABASE_URL = "sqlite:///:memory:"

# ============================================================================
# Test Database Setup with StaticPool
# ============================================================================
# 1. Use sqlite:///:memory: with StaticPool so ALL sessions share same DB
# 2. Tables are created through init_db() so every model is registered
# 3. Tables are dropped after each test, so tests never see each other's rows
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@pytest.fixture(name="session", scope="function")
def session_fixture():
    """Provide a test database session on a freshly created schema"""
    init_db(test_engine)

    with Session(test_engine) as session:
        yield session

    SQLModel.metadata.drop_all(test_engine)


# ============================================================================
# Builders
# ============================================================================


def add_team(session: Session, tournament_id: int, name: str, players: List[str]) -> TournamentTeam:
    team = TournamentTeam(tournament_id=tournament_id, name=name)
    session.add(team)
    session.commit()
    session.refresh(team)
    for player_name in players:
        session.add(TournamentTeamPlayer(tournament_team_id=team.id, player_name=player_name))
    session.commit()
    return team


def add_match(
    session: Session,
    tournament_id: int,
    team1_id: int,
    team2_id: int,
    week: Optional[str],
    map_names: Tuple[str, ...] = ("Wake Island", "El Alamein"),
) -> Tuple[TournamentMatch, List[TournamentMatchMap]]:
    match = TournamentMatch(tournament_id=tournament_id, team1_id=team1_id, team2_id=team2_id, week=week)
    session.add(match)
    session.commit()
    session.refresh(match)

    maps = []
    for order, map_name in enumerate(map_names):
        match_map = TournamentMatchMap(match_id=match.id, map_name=map_name, map_order=order)
        session.add(match_map)
        maps.append(match_map)
    session.commit()
    for match_map in maps:
        session.refresh(match_map)
    return match, maps


def add_round(
    session: Session,
    round_id: str,
    sides: Dict[str, List[str]],
    tickets1: Optional[int] = None,
    tickets2: Optional[int] = None,
) -> Round:
    """sides maps label -> player names; the first label is team1_label."""
    labels = list(sides.keys())
    round_row = Round(
        round_id=round_id,
        server_name="Test Server",
        map_name="Wake Island",
        team1_label=labels[0] if labels else None,
        team2_label=labels[1] if len(labels) > 1 else None,
        tickets1=tickets1,
        tickets2=tickets2,
    )
    session.add(round_row)
    for label, players in sides.items():
        for player_name in players:
            session.add(RoundPlayer(round_id=round_id, player_name=player_name, team_label=label))
    session.commit()
    session.refresh(round_row)
    return round_row


@pytest.fixture
def league(session: Session):
    """
    Tournament with three rostered teams and three matches:
      - match_rb: Red vs Blue,  week W1, two maps
      - match_rg: Red vs Green, week W1, two maps
      - match_bg: Blue vs Green, week W2, two maps
    """
    tournament = Tournament(name="Spring Cup", game="bf1942", game_mode="Conquest")
    session.add(tournament)
    session.commit()
    session.refresh(tournament)

    red = add_team(session, tournament.id, "Red", ["p1", "p2", "p5"])
    blue = add_team(session, tournament.id, "Blue", ["p3", "p6"])
    green = add_team(session, tournament.id, "Green", ["g1", "g2", "g3"])

    match_rb, maps_rb = add_match(session, tournament.id, red.id, blue.id, "W1")
    match_rg, maps_rg = add_match(session, tournament.id, red.id, green.id, "W1")
    match_bg, maps_bg = add_match(session, tournament.id, blue.id, green.id, "W2")

    return {
        "tournament_id": tournament.id,
        "red": red.id,
        "blue": blue.id,
        "green": green.id,
        "match_rb": match_rb.id,
        "maps_rb": [m.id for m in maps_rb],
        "match_rg": match_rg.id,
        "maps_rg": [m.id for m in maps_rg],
        "match_bg": match_bg.id,
        "maps_bg": [m.id for m in maps_bg],
    }
