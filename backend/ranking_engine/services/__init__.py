"""
Services Layer

Business logic for the match-result and ranking engine:
- team_resolver: pure roster <-> round-label inference (no database access)
- match_result_service: the only writer of TournamentMatchResult rows
- ranking_calculator: the only writer of TournamentTeamRanking rows

Services accept a Session and domain ids, and never schedule their own follow-up work.
Recomputing rankings after a result write is the caller's job.
"""
