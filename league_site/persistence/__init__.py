"""
Record source for the league collections.
Read interfaces only (plus seeding); no business logic.
"""
from .db import get_connection, get_db_path, init_db, set_db_path
from .repositories import (
    CompetitionRepository,
    EloPlayerRepository,
    EloPlayerSeasonRepository,
    EloSeasonRepository,
    MatchRepository,
    PlayerCompetitionRepository,
    PlayerRepository,
    RecordSourceError,
    TeamCompetitionRepository,
    TeamRepository,
)
from .seed import load_seed, load_seed_file

__all__ = [
    "get_connection",
    "get_db_path",
    "init_db",
    "set_db_path",
    "load_seed",
    "load_seed_file",
    "RecordSourceError",
    "CompetitionRepository",
    "TeamRepository",
    "PlayerRepository",
    "TeamCompetitionRepository",
    "MatchRepository",
    "PlayerCompetitionRepository",
    "EloPlayerRepository",
    "EloSeasonRepository",
    "EloPlayerSeasonRepository",
]
