"""
Team identity resolution: which tournament roster played as which in-game team.

Rounds only know free-text side labels ("Axis", "Allies", ...). This module maps
the two labels of a round onto two tournament rosters by counting how many
roster members were observed on each side. Pure function over plain data; the
result carries the per-roster counts so callers can log or display the audit
trail and compute a confidence ratio if they need one.

The mapping is advisory: it is the pairing with the strongest signal, and an
admin may override it afterwards.
"""
import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from ranking_engine.services.errors import UnresolvableError

logger = logging.getLogger(__name__)

REASON_NO_PARTICIPANTS = "no data to resolve"
REASON_NO_ROSTERS = "tournament has no teams configured"
REASON_NO_LABELS = "round has no team labels"
REASON_ONE_SIDE_EMPTY = "could not identify both teams in round data"
REASON_NO_VIABLE = "no tournament teams matched players in round"
REASON_ONE_VIABLE = "only one tournament team matched players - need at least two teams"
REASON_NO_SECOND = "could not find a second tournament team for team2 mapping"


@dataclass(frozen=True)
class RoundParticipant:
    player_name: str
    team_label: str


@dataclass
class RoundSnapshot:
    round_id: str
    team1_label: Optional[str]
    team2_label: Optional[str]
    participants: List[RoundParticipant] = field(default_factory=list)
    tickets1: Optional[int] = None
    tickets2: Optional[int] = None


@dataclass
class RosterSnapshot:
    team_id: int
    name: str
    player_names: List[str] = field(default_factory=list)


@dataclass
class RosterScore:
    team_id: int
    name: str
    label1_matches: int
    label2_matches: int
    matched_label1: List[str] = field(default_factory=list)
    matched_label2: List[str] = field(default_factory=list)

    @property
    def viable(self) -> bool:
        return self.label1_matches > 0 or self.label2_matches > 0

    def confidence(self, side: int) -> float:
        """Share of this roster's matched players that were on the given side (1 or 2)."""
        total = self.label1_matches + self.label2_matches
        if total == 0:
            return 0.0
        hits = self.label1_matches if side == 1 else self.label2_matches
        return hits / total


@dataclass
class TeamResolution:
    team1_id: Optional[int] = None
    team2_id: Optional[int] = None
    reason: Optional[str] = None
    scores: List[RosterScore] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.reason is None and self.team1_id is not None and self.team2_id is not None

    def require(self) -> Tuple[int, int]:
        """Return (team1_id, team2_id) or raise UnresolvableError."""
        if not self.ok:
            raise UnresolvableError(self.reason or REASON_NO_SECOND, resolution=self)
        return self.team1_id, self.team2_id

    def score_for(self, team_id: int) -> Optional[RosterScore]:
        for score in self.scores:
            if score.team_id == team_id:
                return score
        return None


def _name_key(name: str) -> str:
    return name.strip().casefold()


def _players_on(participants: Iterable[RoundParticipant], label: str) -> Set[str]:
    return {_name_key(p.player_name) for p in participants if p.team_label == label and p.player_name}


def score_rosters(
    side1_players: Set[str], side2_players: Set[str], rosters: Sequence[RosterSnapshot]
) -> List[RosterScore]:
    """Count each roster's members on side 1 and side 2. Order follows `rosters`."""
    scores: List[RosterScore] = []
    for roster in rosters:
        matched1: List[str] = []
        matched2: List[str] = []
        for player_name in roster.player_names:
            key = _name_key(player_name)
            if key in side1_players:
                matched1.append(player_name)
            if key in side2_players:
                matched2.append(player_name)
        scores.append(
            RosterScore(
                team_id=roster.team_id,
                name=roster.name,
                label1_matches=len(matched1),
                label2_matches=len(matched2),
                matched_label1=matched1,
                matched_label2=matched2,
            )
        )
    return scores


def _best_for_side(candidates: List[RosterScore], side: int) -> Optional[RosterScore]:
    """Highest match count on `side`, then largest margin over the other side.

    max() keeps the first of equal candidates, so ties fall back to roster order.
    """
    if not candidates:
        return None
    if side == 1:
        return max(candidates, key=lambda s: (s.label1_matches, s.label1_matches - s.label2_matches))
    return max(candidates, key=lambda s: (s.label2_matches, s.label2_matches - s.label1_matches))


def resolve_teams(round_data: RoundSnapshot, rosters: Sequence[RosterSnapshot]) -> TeamResolution:
    """
    Infer (team1_id, team2_id) for a round.

    team1_id is the roster mapped to round_data.team1_label, team2_id the one mapped to
    team2_label. Never raises for an unresolvable round; the returned resolution carries
    the reason instead. Call .require() to turn that into UnresolvableError.
    """
    if not round_data.participants:
        return TeamResolution(reason=REASON_NO_PARTICIPANTS)
    if not rosters:
        return TeamResolution(reason=REASON_NO_ROSTERS)
    if not round_data.team1_label or not round_data.team2_label:
        return TeamResolution(reason=REASON_NO_LABELS)

    side1 = _players_on(round_data.participants, round_data.team1_label)
    side2 = _players_on(round_data.participants, round_data.team2_label)
    logger.debug(
        "Round %s parsed: %s=%d players, %s=%d players",
        round_data.round_id,
        round_data.team1_label,
        len(side1),
        round_data.team2_label,
        len(side2),
    )
    if not side1 or not side2:
        return TeamResolution(reason=REASON_ONE_SIDE_EMPTY)

    scores = score_rosters(side1, side2, rosters)
    viable = [s for s in scores if s.viable]
    for s in scores:
        logger.debug(
            "Roster %s (%s): side1=%d side2=%d%s",
            s.team_id,
            s.name,
            s.label1_matches,
            s.label2_matches,
            "" if s.viable else " (skipped)",
        )

    if len(viable) < 2:
        reason = REASON_NO_VIABLE if not viable else REASON_ONE_VIABLE
        return TeamResolution(reason=reason, scores=scores)

    best1 = _best_for_side(viable, 1)
    best2 = _best_for_side([s for s in viable if s.team_id != best1.team_id], 2)
    if best2 is None:
        return TeamResolution(reason=REASON_NO_SECOND, scores=scores)

    logger.debug(
        "Round %s resolved: %s -> team %s (%.0f%%), %s -> team %s (%.0f%%)",
        round_data.round_id,
        round_data.team1_label,
        best1.team_id,
        best1.confidence(1) * 100,
        round_data.team2_label,
        best2.team_id,
        best2.confidence(2) * 100,
    )
    return TeamResolution(team1_id=best1.team_id, team2_id=best2.team_id, scores=scores)
