from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ranking_engine.services.team_resolver import TeamResolution


class MatchResultError(Exception):
    """Base exception for match-result and ranking errors"""
    pass


class NotFoundError(MatchResultError):
    """Referenced round, match, map, tournament, team or result does not exist"""
    pass


class ValidationError(MatchResultError):
    """Caller-supplied teams, tickets or winner are not acceptable"""
    pass


class UnresolvableError(MatchResultError):
    """Team identity could not be inferred from the round"""

    def __init__(self, reason: str, resolution: Optional["TeamResolution"] = None):
        super().__init__(reason)
        self.reason = reason
        self.resolution = resolution
