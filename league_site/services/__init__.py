"""
Service layer: read-model assembly over the record source.
season_service builds season cards and detail pages; elo_service builds Elo leaderboards.
"""
from .elo_service import EloLeaderboards, EloService
from .season_service import CompetitionNotFoundError, SeasonNotFoundError, SeasonService

__all__ = [
    "EloLeaderboards",
    "EloService",
    "SeasonService",
    "SeasonNotFoundError",
    "CompetitionNotFoundError",
]
