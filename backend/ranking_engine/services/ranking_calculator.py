"""
Ranking Aggregator: the only writer of TournamentTeamRanking rows.

Rankings are a projection of TournamentMatchResult rows. Every rebuild deletes the
rows of a (tournament, week) scope and inserts a freshly computed set, so edits,
deletions and team overrides can never leave a stale aggregate behind. The
cumulative scope is stored with week = NULL and covers every result.

Ordering (default / Conquest):
  1. rounds_won desc
  2. rounds_tied desc   (a tied round beats a lost one at equal wins)
  3. ticket_differential desc
CTF tournaments rank on points (3 per match victory, 1 per match tie), then
ticket_differential.

Teams equal on every measure keep ascending team id order. Ranks are strictly
ordinal (1, 2, 3, ...), never shared.

Guarantees:
  - Idempotent (same results in, same ranking rows out)
  - One commit per scope; a failure leaves earlier scopes committed
"""
import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from ranking_engine.models.match_result import TournamentMatchResult
from ranking_engine.models.team import TournamentTeam
from ranking_engine.models.team_ranking import TournamentTeamRanking
from ranking_engine.models.tournament import GAME_MODE_CTF, Tournament
from ranking_engine.services.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

CTF_VICTORY_POINTS = 3
CTF_TIE_POINTS = 1


# ============================================================================
# Pydantic Response Models
# ============================================================================


class LeaderboardEntry(BaseModel):
    rank: int
    team_id: int
    team_name: str
    week: Optional[str] = None
    points: int
    rounds_won: int
    rounds_tied: int
    rounds_lost: int
    ticket_differential: int
    matches_played: int
    victories: int
    ties: int
    losses: int
    tickets_for: int
    tickets_against: int


class RebuildSummary(BaseModel):
    tournament_id: int
    weeks_rebuilt: List[str]
    cumulative_rows: int
    weekly_rows: int
    stale_rows_removed: int = 0

    @property
    def total_rows(self) -> int:
        return self.cumulative_rows + self.weekly_rows


# ============================================================================
# Pure aggregation
# ============================================================================


@dataclass
class TeamStats:
    team_id: int
    rounds_won: int = 0
    rounds_tied: int = 0
    rounds_lost: int = 0
    ticket_differential: int = 0
    tickets_for: int = 0
    tickets_against: int = 0
    matches_played: int = 0
    victories: int = 0
    ties: int = 0
    losses: int = 0
    points: int = 0


def _is_ctf(game_mode: Optional[str]) -> bool:
    return (game_mode or "").strip().upper() == GAME_MODE_CTF


def team_ids_in(results: Iterable[TournamentMatchResult]) -> List[int]:
    """Distinct mapped team ids on either side, ascending."""
    ids = set()
    for r in results:
        if r.team1_id is not None:
            ids.add(r.team1_id)
        if r.team2_id is not None:
            ids.add(r.team2_id)
    return sorted(ids)


def calculate_team_stats(
    results: Sequence[TournamentMatchResult], team_id: int, game_mode: Optional[str] = None
) -> TeamStats:
    stats = TeamStats(team_id=team_id)
    # match_id -> [own tickets, opponent tickets] summed over the match's rounds
    match_totals: Dict[int, List[int]] = defaultdict(lambda: [0, 0])

    for r in results:
        if r.team1_id == team_id:
            own, opp = r.team1_tickets, r.team2_tickets
        elif r.team2_id == team_id:
            own, opp = r.team2_tickets, r.team1_tickets
        else:
            continue

        stats.ticket_differential += own - opp
        stats.tickets_for += own
        stats.tickets_against += opp
        if r.winning_team_id == team_id:
            stats.rounds_won += 1
        elif r.winning_team_id is None:
            stats.rounds_tied += 1
        else:
            stats.rounds_lost += 1

        totals = match_totals[r.match_id]
        totals[0] += own
        totals[1] += opp

    for match_id in sorted(match_totals):
        own, opp = match_totals[match_id]
        stats.matches_played += 1
        if own > opp:
            stats.victories += 1
        elif own == opp:
            stats.ties += 1
        else:
            stats.losses += 1

    if _is_ctf(game_mode):
        stats.points = stats.victories * CTF_VICTORY_POINTS + stats.ties * CTF_TIE_POINTS
    else:
        stats.points = stats.rounds_won

    logger.debug(
        "Team %s: points=%d rounds W-T-L=%d-%d-%d matches V-T-L=%d-%d-%d tickets %d-%d (%+d)",
        team_id,
        stats.points,
        stats.rounds_won,
        stats.rounds_tied,
        stats.rounds_lost,
        stats.victories,
        stats.ties,
        stats.losses,
        stats.tickets_for,
        stats.tickets_against,
        stats.ticket_differential,
    )
    return stats


def order_stats(stats: Sequence[TeamStats], game_mode: Optional[str] = None) -> List[TeamStats]:
    """Apply the tie-break hierarchy. Input order (team id) survives full ties."""
    by_team = sorted(stats, key=lambda s: s.team_id)
    if _is_ctf(game_mode):
        return sorted(by_team, key=lambda s: (-s.points, -s.ticket_differential))
    return sorted(by_team, key=lambda s: (-s.rounds_won, -s.rounds_tied, -s.ticket_differential))


def rank_results(
    results: Sequence[TournamentMatchResult],
    tournament_id: int,
    week: Optional[str] = None,
    game_mode: Optional[str] = None,
) -> List[TournamentTeamRanking]:
    """Build unsaved ranking rows for an already-scoped list of results."""
    if not results:
        return []

    stats = [calculate_team_stats(results, team_id, game_mode) for team_id in team_ids_in(results)]
    now = datetime.utcnow()
    rankings: List[TournamentTeamRanking] = []
    for position, s in enumerate(order_stats(stats, game_mode)):
        rankings.append(
            TournamentTeamRanking(
                tournament_id=tournament_id,
                team_id=s.team_id,
                week=week,
                rounds_won=s.rounds_won,
                rounds_tied=s.rounds_tied,
                rounds_lost=s.rounds_lost,
                ticket_differential=s.ticket_differential,
                matches_played=s.matches_played,
                victories=s.victories,
                ties=s.ties,
                losses=s.losses,
                tickets_for=s.tickets_for,
                tickets_against=s.tickets_against,
                points=s.points,
                rank=position + 1,
                updated_at=now,
            )
        )
    return rankings


# ============================================================================
# Database-backed operations
# ============================================================================


def _scope_label(week: Optional[str]) -> str:
    return week if week is not None else "cumulative"


def _require_tournament(session: Session, tournament_id: int) -> Tournament:
    tournament = session.get(Tournament, tournament_id)
    if not tournament:
        raise NotFoundError(f"Tournament {tournament_id} not found")
    return tournament


def _results_in_scope(session: Session, tournament_id: int, week: Optional[str]) -> List[TournamentMatchResult]:
    query = select(TournamentMatchResult).where(TournamentMatchResult.tournament_id == tournament_id)
    if week is not None:
        query = query.where(TournamentMatchResult.week == week)
    return list(session.exec(query.order_by(TournamentMatchResult.id)).all())


def _weeks_with_results(session: Session, tournament_id: int) -> List[str]:
    weeks = session.exec(
        select(TournamentMatchResult.week)
        .where(TournamentMatchResult.tournament_id == tournament_id, TournamentMatchResult.week.is_not(None))
        .distinct()
    ).all()
    return sorted(weeks)


def compute_rankings(
    session: Session,
    tournament_id: int,
    week: Optional[str] = None,
    game_mode: Optional[str] = None,
) -> List[TournamentTeamRanking]:
    """
    Rank the teams of one scope. Pure read: the returned rows are not added to the session.

    week=None is the cumulative scope (every result regardless of week). game_mode
    defaults to the tournament's own.
    """
    tournament = _require_tournament(session, tournament_id)
    mode = game_mode if game_mode is not None else tournament.game_mode

    results = _results_in_scope(session, tournament_id, week)
    if not results:
        logger.info("No match results for tournament %s, week %s", tournament_id, _scope_label(week))
        return []

    rankings = rank_results(results, tournament_id, week, mode)
    logger.info(
        "Computed %d rankings for tournament %s, week %s from %d results",
        len(rankings),
        tournament_id,
        _scope_label(week),
        len(results),
    )
    return rankings


def _replace_scope(
    session: Session, tournament_id: int, week: Optional[str], game_mode: Optional[str]
) -> int:
    """Delete then re-insert the ranking rows of one scope in a single commit."""
    try:
        rankings = compute_rankings(session, tournament_id, week, game_mode)

        query = select(TournamentTeamRanking).where(TournamentTeamRanking.tournament_id == tournament_id)
        if week is None:
            query = query.where(TournamentTeamRanking.week.is_(None))
        else:
            query = query.where(TournamentTeamRanking.week == week)
        old_rows = session.exec(query).all()
        for row in old_rows:
            session.delete(row)
        # Flush deletes before inserts so the (tournament, team, week) constraint holds
        session.flush()

        session.add_all(rankings)
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Error rebuilding rankings for tournament %s, week %s", tournament_id, _scope_label(week))
        raise

    logger.info(
        "Rebuilt rankings for tournament %s, week %s: removed %d, wrote %d",
        tournament_id,
        _scope_label(week),
        len(old_rows),
        len(rankings),
    )
    return len(rankings)


def _remove_stale_scopes(session: Session, tournament_id: int, live_weeks: Sequence[str]) -> int:
    """Delete ranking rows of week scopes that no longer have any results."""
    stale = session.exec(
        select(TournamentTeamRanking).where(
            TournamentTeamRanking.tournament_id == tournament_id,
            TournamentTeamRanking.week.is_not(None),
            TournamentTeamRanking.week.not_in(list(live_weeks)),
        )
    ).all()
    if not stale:
        return 0
    try:
        for row in stale:
            session.delete(row)
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Error removing stale rankings for tournament %s", tournament_id)
        raise
    logger.info("Removed %d stale ranking rows for tournament %s", len(stale), tournament_id)
    return len(stale)


def rebuild_all_rankings(session: Session, tournament_id: int, game_mode: Optional[str] = None) -> int:
    """
    Rebuild every week scope that has results, plus the cumulative scope.

    Returns the number of ranking rows written. On a storage error the scope being
    rebuilt is rolled back and the error propagates; retry the whole tournament.
    """
    _require_tournament(session, tournament_id)
    weeks = _weeks_with_results(session, tournament_id)
    logger.info(
        "Starting full ranking rebuild for tournament %s: weeks=%s + cumulative",
        tournament_id,
        ", ".join(weeks) or "-",
    )

    _remove_stale_scopes(session, tournament_id, weeks)
    total = 0
    for week in [*weeks, None]:
        total += _replace_scope(session, tournament_id, week, game_mode)

    logger.info("Full ranking rebuild for tournament %s wrote %d rows", tournament_id, total)
    return total


def rebuild_rankings(
    session: Session,
    tournament_id: int,
    week: Optional[str] = None,
    from_week: Optional[str] = None,
    game_mode: Optional[str] = None,
) -> RebuildSummary:
    """
    Rebuild the cumulative scope plus a selection of week scopes.

    - week:      only that week
    - from_week: that week and every later one (weeks ordered by label)
    - neither:   every week, and stale week scopes are removed
    """
    if week is not None and from_week is not None:
        raise ValidationError("Pass either week or from_week, not both")

    _require_tournament(session, tournament_id)
    all_weeks = _weeks_with_results(session, tournament_id)

    stale_removed = 0
    if week is not None:
        selected = [week]
    elif from_week is not None:
        if from_week not in all_weeks:
            raise ValidationError(
                f"Week '{from_week}' not found in tournament {tournament_id}. "
                f"Available weeks: {', '.join(all_weeks) or '-'}"
            )
        selected = all_weeks[all_weeks.index(from_week):]
    else:
        selected = all_weeks
        stale_removed = _remove_stale_scopes(session, tournament_id, all_weeks)

    cumulative_rows = _replace_scope(session, tournament_id, None, game_mode)
    weekly_rows = 0
    for w in selected:
        weekly_rows += _replace_scope(session, tournament_id, w, game_mode)

    return RebuildSummary(
        tournament_id=tournament_id,
        weeks_rebuilt=selected,
        cumulative_rows=cumulative_rows,
        weekly_rows=weekly_rows,
        stale_rows_removed=stale_removed,
    )


def get_leaderboard(session: Session, tournament_id: int, week: Optional[str] = None) -> List[LeaderboardEntry]:
    """Stored rankings of one scope in rank order. Reflects the last rebuild, not live results."""
    _require_tournament(session, tournament_id)

    query = select(TournamentTeamRanking).where(TournamentTeamRanking.tournament_id == tournament_id)
    if week is None:
        query = query.where(TournamentTeamRanking.week.is_(None))
    else:
        query = query.where(TournamentTeamRanking.week == week)
    rows = session.exec(query.order_by(TournamentTeamRanking.rank)).all()

    names = {
        team.id: team.name
        for team in session.exec(select(TournamentTeam).where(TournamentTeam.tournament_id == tournament_id)).all()
    }
    return [
        LeaderboardEntry(
            rank=row.rank,
            team_id=row.team_id,
            team_name=names.get(row.team_id, f"Team {row.team_id}"),
            week=row.week,
            points=row.points,
            rounds_won=row.rounds_won,
            rounds_tied=row.rounds_tied,
            rounds_lost=row.rounds_lost,
            ticket_differential=row.ticket_differential,
            matches_played=row.matches_played,
            victories=row.victories,
            ties=row.ties,
            losses=row.losses,
            tickets_for=row.tickets_for,
            tickets_against=row.tickets_against,
        )
        for row in rows
    ]
