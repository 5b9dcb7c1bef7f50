# Force SQLModel table registration at test discovery time
# This ensures all models are registered before any test database creation
from ranking_engine.models.match import TournamentMatch, TournamentMatchMap  # noqa: F401
from ranking_engine.models.match_result import TournamentMatchResult  # noqa: F401
from ranking_engine.models.round import Round, RoundPlayer  # noqa: F401
from ranking_engine.models.team import TournamentTeam, TournamentTeamPlayer  # noqa: F401
from ranking_engine.models.team_ranking import TournamentTeamRanking  # noqa: F401
from ranking_engine.models.tournament import Tournament  # noqa: F401
