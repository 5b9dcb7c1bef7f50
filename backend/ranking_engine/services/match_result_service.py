"""
Match Result Recorder: the only writer of TournamentMatchResult rows.

Paths:
  - auto:     record_auto_result()   - tickets from a Round, teams from the resolver
  - manual:   record_manual_result() - teams, tickets and optional winner from the caller
  - override: override_teams()       - reassign teams, re-derive the winner from stored tickets
  - delete:   delete_result()
  - relink_round() / unlink_round()  - change or drop the originating round of a result

Results are keyed on (match_id, map_id, round_id): a map may carry one result per
played round, plus at most one manual result (round_id NULL).

Nothing here recomputes rankings. Callers run ranking_calculator.rebuild_all_rankings()
after a successful write.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

from sqlmodel import Session, select

from ranking_engine.models.match import TournamentMatch, TournamentMatchMap
from ranking_engine.models.match_result import TournamentMatchResult
from ranking_engine.models.round import Round, RoundPlayer
from ranking_engine.models.team import TournamentTeam, TournamentTeamPlayer
from ranking_engine.services.errors import NotFoundError, ValidationError
from ranking_engine.services.team_resolver import (
    RosterSnapshot,
    RoundParticipant,
    RoundSnapshot,
    TeamResolution,
    resolve_teams,
)

logger = logging.getLogger(__name__)


@dataclass
class RecordOutcome:
    result_id: int
    warning: Optional[str] = None
    resolution: Optional[TeamResolution] = None


# ============================================================================
# Loading
# ============================================================================


def load_round_snapshot(session: Session, round_id: str) -> RoundSnapshot:
    """Read a Round and its participation records. Raises NotFoundError."""
    round_row = session.get(Round, round_id)
    if not round_row:
        raise NotFoundError(f"Round {round_id} not found")

    players = session.exec(
        select(RoundPlayer).where(RoundPlayer.round_id == round_id).order_by(RoundPlayer.id)
    ).all()
    return RoundSnapshot(
        round_id=round_row.round_id,
        team1_label=round_row.team1_label,
        team2_label=round_row.team2_label,
        participants=[RoundParticipant(player_name=p.player_name, team_label=p.team_label) for p in players],
        tickets1=round_row.tickets1,
        tickets2=round_row.tickets2,
    )


def load_rosters(session: Session, tournament_id: int) -> List[RosterSnapshot]:
    """Rosters of a tournament, ordered by team id so resolution is deterministic."""
    teams = session.exec(
        select(TournamentTeam).where(TournamentTeam.tournament_id == tournament_id).order_by(TournamentTeam.id)
    ).all()
    rosters: List[RosterSnapshot] = []
    for team in teams:
        names = session.exec(
            select(TournamentTeamPlayer.player_name)
            .where(TournamentTeamPlayer.tournament_team_id == team.id)
            .order_by(TournamentTeamPlayer.id)
        ).all()
        rosters.append(RosterSnapshot(team_id=team.id, name=team.name, player_names=list(names)))
    return rosters


def _require_match(session: Session, tournament_id: int, match_id: int) -> TournamentMatch:
    match = session.get(TournamentMatch, match_id)
    if not match or match.tournament_id != tournament_id:
        raise NotFoundError(f"Match {match_id} not found in tournament {tournament_id}")
    return match


def _require_map(session: Session, match_id: int, map_id: int) -> TournamentMatchMap:
    match_map = session.get(TournamentMatchMap, map_id)
    if not match_map or match_map.match_id != match_id:
        raise NotFoundError(f"Map {map_id} not found in match {match_id}")
    return match_map


def _require_result(session: Session, result_id: int) -> TournamentMatchResult:
    result = session.get(TournamentMatchResult, result_id)
    if not result:
        raise NotFoundError(f"Match result {result_id} not found")
    return result


def _validate_teams_in_tournament(session: Session, tournament_id: int, team_ids: Tuple[int, ...]) -> None:
    found = set(
        session.exec(
            select(TournamentTeam.id).where(
                TournamentTeam.tournament_id == tournament_id,
                TournamentTeam.id.in_(team_ids),
            )
        ).all()
    )
    missing = [tid for tid in team_ids if tid not in found]
    if missing:
        raise ValidationError(
            f"Teams with IDs {', '.join(str(t) for t in missing)} not found in tournament {tournament_id}"
        )


# ============================================================================
# Winner rule
# ============================================================================


def determine_winner(
    team1_id: Optional[int], team2_id: Optional[int], team1_tickets: int, team2_tickets: int
) -> Optional[int]:
    """Side with more tickets wins. None (tie) on equal tickets or when either side is unmapped."""
    if team1_id is None or team2_id is None:
        return None
    if team1_tickets > team2_tickets:
        return team1_id
    if team2_tickets > team1_tickets:
        return team2_id
    return None


def _apply_outcome(
    result: TournamentMatchResult,
    *,
    round_id: Optional[str],
    week: Optional[str],
    team1_id: Optional[int],
    team2_id: Optional[int],
    team1_tickets: int,
    team2_tickets: int,
) -> None:
    result.round_id = round_id
    result.week = week
    result.team1_id = team1_id
    result.team2_id = team2_id
    result.team1_tickets = team1_tickets
    result.team2_tickets = team2_tickets
    result.winning_team_id = determine_winner(team1_id, team2_id, team1_tickets, team2_tickets)
    result.updated_at = datetime.utcnow()


def _find_existing(
    session: Session, match_id: int, map_id: int, round_id: Optional[str]
) -> Optional[TournamentMatchResult]:
    query = select(TournamentMatchResult).where(
        TournamentMatchResult.match_id == match_id,
        TournamentMatchResult.map_id == map_id,
    )
    if round_id is None:
        query = query.where(TournamentMatchResult.round_id.is_(None))
    else:
        query = query.where(TournamentMatchResult.round_id == round_id)
    return session.exec(query.order_by(TournamentMatchResult.id)).first()


def _resolve_for_round(session: Session, tournament_id: int, snapshot: RoundSnapshot) -> TeamResolution:
    resolution = resolve_teams(snapshot, load_rosters(session, tournament_id))
    if resolution.ok:
        logger.info(
            "Detected team mapping for round %s: team1=%s team2=%s",
            snapshot.round_id,
            resolution.team1_id,
            resolution.team2_id,
        )
    else:
        logger.warning("Team mapping detection failed for round %s: %s", snapshot.round_id, resolution.reason)
    return resolution


# ============================================================================
# Write paths
# ============================================================================


def record_auto_result(
    session: Session, tournament_id: int, match_id: int, map_id: int, round_id: str
) -> RecordOutcome:
    """
    Create or update the result for (match, map, round) from round telemetry.

    Resolution failure is not an error: the result is stored with both teams unmapped
    and the reason comes back as RecordOutcome.warning.

    Raises:
        NotFoundError if the round, match or map does not exist
    """
    snapshot = load_round_snapshot(session, round_id)
    match = _require_match(session, tournament_id, match_id)
    _require_map(session, match_id, map_id)

    resolution = _resolve_for_round(session, tournament_id, snapshot)
    team1_id = resolution.team1_id if resolution.ok else None
    team2_id = resolution.team2_id if resolution.ok else None

    result = _find_existing(session, match_id, map_id, round_id)
    if result is None:
        result = TournamentMatchResult(tournament_id=tournament_id, match_id=match_id, map_id=map_id)
    _apply_outcome(
        result,
        round_id=round_id,
        week=match.week,
        team1_id=team1_id,
        team2_id=team2_id,
        team1_tickets=snapshot.tickets1 or 0,
        team2_tickets=snapshot.tickets2 or 0,
    )
    session.add(result)
    session.commit()
    session.refresh(result)

    logger.info(
        "Recorded result %s for tournament %s, match %s, map %s (round %s)",
        result.id,
        tournament_id,
        match_id,
        map_id,
        round_id,
    )
    return RecordOutcome(result_id=result.id, warning=resolution.reason, resolution=resolution)


def record_manual_result(
    session: Session,
    tournament_id: int,
    match_id: int,
    map_id: int,
    team1_id: int,
    team2_id: int,
    team1_tickets: int,
    team2_tickets: int,
    winning_team_id: Optional[int] = None,
) -> int:
    """
    Create or update the manual (round-less) result for a map.

    The winner always follows the tickets. An explicit winning_team_id is checked
    against them; on equal tickets the result is a tie and the explicit winner is dropped.

    Raises:
        ValidationError for bad teams, tickets or winner
        NotFoundError if the match or map does not exist
    """
    if team1_id == team2_id:
        raise ValidationError("Team 1 and Team 2 cannot be the same")
    if team1_tickets < 0 or team2_tickets < 0:
        raise ValidationError("Ticket counts cannot be negative")
    _validate_teams_in_tournament(session, tournament_id, (team1_id, team2_id))
    match = _require_match(session, tournament_id, match_id)
    _require_map(session, match_id, map_id)

    derived = determine_winner(team1_id, team2_id, team1_tickets, team2_tickets)
    if winning_team_id is not None:
        if winning_team_id not in (team1_id, team2_id):
            raise ValidationError("Winning team must be one of the two teams in the match")
        if derived is None:
            logger.warning(
                "Ignoring winner %s for match %s map %s: tickets are level (%d-%d)",
                winning_team_id,
                match_id,
                map_id,
                team1_tickets,
                team2_tickets,
            )
        elif derived != winning_team_id:
            raise ValidationError(
                f"Winning team {winning_team_id} does not match ticket counts "
                f"({team1_tickets}-{team2_tickets})"
            )

    result = _find_existing(session, match_id, map_id, None)
    if result is None:
        result = TournamentMatchResult(tournament_id=tournament_id, match_id=match_id, map_id=map_id)
    _apply_outcome(
        result,
        round_id=None,
        week=match.week,
        team1_id=team1_id,
        team2_id=team2_id,
        team1_tickets=team1_tickets,
        team2_tickets=team2_tickets,
    )
    session.add(result)
    session.commit()
    session.refresh(result)

    logger.info(
        "Recorded manual result %s for tournament %s, match %s, map %s",
        result.id,
        tournament_id,
        match_id,
        map_id,
    )
    return result.id


def override_teams(session: Session, result_id: int, team1_id: int, team2_id: int) -> TournamentMatchResult:
    """
    Reassign the teams of an existing result.

    Stored tickets stay on side 1 / side 2; the winner is re-derived under the new teams.
    """
    result = _require_result(session, result_id)
    if team1_id == team2_id:
        raise ValidationError("Team 1 and Team 2 cannot be the same")
    _validate_teams_in_tournament(session, result.tournament_id, (team1_id, team2_id))

    result.team1_id = team1_id
    result.team2_id = team2_id
    result.winning_team_id = determine_winner(team1_id, team2_id, result.team1_tickets, result.team2_tickets)
    result.updated_at = datetime.utcnow()
    session.add(result)
    session.commit()
    session.refresh(result)

    logger.info(
        "Overrode team mapping for result %s: team1=%s team2=%s winner=%s",
        result_id,
        team1_id,
        team2_id,
        result.winning_team_id,
    )
    return result


def delete_result(session: Session, result_id: int) -> None:
    result = _require_result(session, result_id)
    session.delete(result)
    session.commit()
    logger.info("Deleted match result %s", result_id)


def relink_round(session: Session, result_id: int, round_id: str) -> RecordOutcome:
    """Point an existing result at another round and re-derive teams and tickets from it."""
    result = _require_result(session, result_id)
    snapshot = load_round_snapshot(session, round_id)
    match = _require_match(session, result.tournament_id, result.match_id)

    duplicate = _find_existing(session, result.match_id, result.map_id, round_id)
    if duplicate is not None and duplicate.id != result.id:
        raise ValidationError(
            f"Round {round_id} is already recorded for match {result.match_id} map {result.map_id} "
            f"(result {duplicate.id})"
        )

    resolution = _resolve_for_round(session, result.tournament_id, snapshot)
    _apply_outcome(
        result,
        round_id=round_id,
        week=match.week,
        team1_id=resolution.team1_id if resolution.ok else None,
        team2_id=resolution.team2_id if resolution.ok else None,
        team1_tickets=snapshot.tickets1 or 0,
        team2_tickets=snapshot.tickets2 or 0,
    )
    session.add(result)
    session.commit()
    session.refresh(result)
    logger.info("Relinked result %s to round %s", result_id, round_id)
    return RecordOutcome(result_id=result.id, warning=resolution.reason, resolution=resolution)


def unlink_round(session: Session, result_id: int) -> TournamentMatchResult:
    """Drop the round link. Teams and tickets are kept, so the row becomes a manual result."""
    result = _require_result(session, result_id)
    if result.round_id is None:
        return result

    existing_manual = _find_existing(session, result.match_id, result.map_id, None)
    if existing_manual is not None:
        raise ValidationError(
            f"Map {result.map_id} of match {result.match_id} already has a manual result "
            f"({existing_manual.id})"
        )

    previous = result.round_id
    result.round_id = None
    result.updated_at = datetime.utcnow()
    session.add(result)
    session.commit()
    session.refresh(result)
    logger.info("Unlinked round %s from result %s", previous, result_id)
    return result


# ============================================================================
# Reads and maintenance
# ============================================================================


def get_result(session: Session, result_id: int) -> TournamentMatchResult:
    return _require_result(session, result_id)


def list_results(
    session: Session,
    tournament_id: int,
    week: Optional[str] = None,
    page: int = 1,
    page_size: int = 50,
) -> List[TournamentMatchResult]:
    """Results of a tournament, optionally one week, in (match, map, id) order."""
    if page < 1 or page_size < 1:
        raise ValidationError("page and page_size must be positive")

    query = select(TournamentMatchResult).where(TournamentMatchResult.tournament_id == tournament_id)
    if week is not None:
        query = query.where(TournamentMatchResult.week == week)
    query = (
        query.order_by(TournamentMatchResult.match_id, TournamentMatchResult.map_id, TournamentMatchResult.id)
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return list(session.exec(query).all())


def cleanup_orphaned_results(session: Session, tournament_id: int) -> int:
    """Delete results whose map was removed or moved to another match. Returns the count removed."""
    results = session.exec(
        select(TournamentMatchResult).where(TournamentMatchResult.tournament_id == tournament_id)
    ).all()

    removed = 0
    for result in results:
        match_map = session.get(TournamentMatchMap, result.map_id)
        if match_map is None or match_map.match_id != result.match_id:
            session.delete(result)
            removed += 1

    if removed:
        session.commit()
        logger.info("Removed %d orphaned match results from tournament %s", removed, tournament_id)
    return removed
