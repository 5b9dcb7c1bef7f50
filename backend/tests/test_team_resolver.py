"""Team identity resolution: roster <-> round label inference. Pure, no database."""
import pytest

from ranking_engine.services.errors import UnresolvableError
from ranking_engine.services.team_resolver import (
    REASON_NO_PARTICIPANTS,
    REASON_NO_ROSTERS,
    REASON_NO_VIABLE,
    REASON_ONE_SIDE_EMPTY,
    REASON_ONE_VIABLE,
    RosterSnapshot,
    RoundParticipant,
    RoundSnapshot,
    resolve_teams,
)


def make_round(sides, round_id="r1"):
    labels = list(sides.keys())
    participants = [RoundParticipant(player_name=p, team_label=label) for label, players in sides.items() for p in players]
    return RoundSnapshot(
        round_id=round_id,
        team1_label=labels[0] if labels else None,
        team2_label=labels[1] if len(labels) > 1 else None,
        participants=participants,
    )


RED = RosterSnapshot(team_id=1, name="Red", player_names=["p1", "p2", "p5"])
BLUE = RosterSnapshot(team_id=2, name="Blue", player_names=["p3"])


def test_axis_allies_example():
    """Axis {p1,p2} / Allies {p3,p4} with Red {p1,p2,p5} and Blue {p3}."""
    round_data = make_round({"Axis": ["p1", "p2"], "Allies": ["p3", "p4"]})

    resolution = resolve_teams(round_data, [RED, BLUE])

    assert resolution.ok
    assert resolution.require() == (1, 2)
    red = resolution.score_for(1)
    blue = resolution.score_for(2)
    assert (red.label1_matches, red.label2_matches) == (2, 0)
    assert (blue.label1_matches, blue.label2_matches) == (0, 1)
    assert red.matched_label1 == ["p1", "p2"]


def test_mapping_follows_labels_not_roster_order():
    round_data = make_round({"Allies": ["p3", "p4"], "Axis": ["p1", "p2"]})

    resolution = resolve_teams(round_data, [RED, BLUE])

    assert resolution.require() == (2, 1)


def test_player_names_match_case_insensitively():
    round_data = make_round({"Axis": ["P1", " p2 "], "Allies": ["P3"]})

    resolution = resolve_teams(round_data, [RED, BLUE])

    assert resolution.require() == (1, 2)


def test_resolution_is_deterministic():
    round_data = make_round({"Axis": ["p1", "p3"], "Allies": ["p2", "x9"]})
    rosters = [RED, BLUE, RosterSnapshot(team_id=3, name="Green", player_names=["x9"])]

    first = resolve_teams(round_data, rosters)
    for _ in range(10):
        again = resolve_teams(round_data, rosters)
        assert (again.team1_id, again.team2_id, again.reason) == (first.team1_id, first.team2_id, first.reason)


def test_side1_tie_broken_by_margin():
    """Both rosters have 2 players on side 1; the one with fewer on side 2 wins side 1."""
    round_data = make_round({"Axis": ["a1", "a2", "b1", "b2"], "Allies": ["a3", "x1"]})
    team_a = RosterSnapshot(team_id=10, name="A", player_names=["a1", "a2", "a3"])
    team_b = RosterSnapshot(team_id=11, name="B", player_names=["b1", "b2"])

    resolution = resolve_teams(round_data, [team_a, team_b])

    # A: (2, 1) margin 1; B: (2, 0) margin 2 -> B takes side 1, A the other side
    assert resolution.require() == (11, 10)


def test_side2_excludes_side1_choice():
    """A roster strong on both sides is only used once."""
    round_data = make_round({"Axis": ["a1", "a2", "a3"], "Allies": ["a4", "a5", "c1"]})
    team_a = RosterSnapshot(team_id=1, name="A", player_names=["a1", "a2", "a3", "a4", "a5"])
    team_c = RosterSnapshot(team_id=3, name="C", player_names=["c1"])

    resolution = resolve_teams(round_data, [team_a, team_c])

    assert resolution.require() == (1, 3)


def test_non_viable_rosters_are_discarded():
    round_data = make_round({"Axis": ["p1"], "Allies": ["p3"]})
    nobody = RosterSnapshot(team_id=9, name="Nobody", player_names=["zz"])

    resolution = resolve_teams(round_data, [nobody, RED, BLUE])

    assert resolution.require() == (1, 2)
    assert not resolution.score_for(9).viable


def test_only_one_viable_roster_is_unresolvable():
    round_data = make_round({"Axis": ["p1", "p2"], "Allies": ["x1", "x2"]})

    resolution = resolve_teams(round_data, [RED, BLUE])

    assert not resolution.ok
    assert resolution.reason == REASON_ONE_VIABLE
    with pytest.raises(UnresolvableError) as exc_info:
        resolution.require()
    assert exc_info.value.resolution is resolution


def test_no_viable_rosters():
    round_data = make_round({"Axis": ["x1"], "Allies": ["x2"]})

    resolution = resolve_teams(round_data, [RED, BLUE])

    assert resolution.reason == REASON_NO_VIABLE
    assert resolution.team1_id is None and resolution.team2_id is None


def test_round_without_participants():
    round_data = RoundSnapshot(round_id="empty", team1_label="Axis", team2_label="Allies")

    resolution = resolve_teams(round_data, [RED, BLUE])

    assert resolution.reason == REASON_NO_PARTICIPANTS


def test_tournament_without_rosters():
    round_data = make_round({"Axis": ["p1"], "Allies": ["p3"]})

    resolution = resolve_teams(round_data, [])

    assert resolution.reason == REASON_NO_ROSTERS


def test_one_label_without_players():
    round_data = RoundSnapshot(
        round_id="r1",
        team1_label="Axis",
        team2_label="Allies",
        participants=[RoundParticipant("p1", "Axis"), RoundParticipant("p3", "Spectator")],
    )

    resolution = resolve_teams(round_data, [RED, BLUE])

    assert resolution.reason == REASON_ONE_SIDE_EMPTY


def test_confidence_ratio():
    round_data = make_round({"Axis": ["p1", "p2"], "Allies": ["p5", "p3"]})

    resolution = resolve_teams(round_data, [RED, BLUE])

    red = resolution.score_for(1)
    assert red.confidence(1) == pytest.approx(2 / 3)
    assert red.confidence(2) == pytest.approx(1 / 3)
