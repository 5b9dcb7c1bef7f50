from ranking_engine.models.match import TournamentMatch, TournamentMatchMap
from ranking_engine.models.match_result import TournamentMatchResult
from ranking_engine.models.round import Round, RoundPlayer
from ranking_engine.models.team import TournamentTeam, TournamentTeamPlayer
from ranking_engine.models.team_ranking import TournamentTeamRanking
from ranking_engine.models.tournament import Tournament

__all__ = [
    "Tournament",
    "TournamentTeam",
    "TournamentTeamPlayer",
    "TournamentMatch",
    "TournamentMatchMap",
    "Round",
    "RoundPlayer",
    "TournamentMatchResult",
    "TournamentTeamRanking",
]
