"""
Load a JSON export of the league's document collections into the store.

The export is one object: collection name -> list of documents. Field names
from the document database export are accepted alongside the store's own
(e.g. competition_id/_id for id, season_id for season, teamName for name).
"""
from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Any, Callable

from league_site.models import (
    Competition,
    EloPlayer,
    EloPlayerSeason,
    EloSeason,
    Match,
    Player,
    PlayerCompetition,
    Team,
    TeamCompetition,
)

from .repositories import (
    CompetitionRepository,
    EloPlayerRepository,
    EloPlayerSeasonRepository,
    EloSeasonRepository,
    MatchRepository,
    PlayerCompetitionRepository,
    PlayerRepository,
    TeamCompetitionRepository,
    TeamRepository,
    _int,
    _opt_int,
    _opt_str,
    parse_datetime,
)


def _first(doc: dict[str, Any], *names: str, default: Any = None) -> Any:
    """First present, non-null field among names."""
    for n in names:
        if doc.get(n) is not None:
            return doc[n]
    return default


def _ref(value: Any) -> str | None:
    """Reference field: plain id, or an embedded document carrying one."""
    if isinstance(value, dict):
        value = _first(value, "_id", "id", "$oid")
    return _opt_str(value)


def competition_from_doc(doc: dict[str, Any]) -> Competition:
    return Competition(
        id=str(_first(doc, "id", "competition_id", "_id")),
        type=str(doc["type"]),
        name=_first(doc, "name", default=""),
        season=_opt_str(_first(doc, "season", "season_id")),
        division=_opt_int(doc.get("division")),
        year=_opt_int(doc.get("year")),
        start_date=parse_datetime(doc.get("start_date")),
        end_date=parse_datetime(doc.get("end_date")),
        champion_team_id=_ref(doc.get("champion_team_id")),
        champion_name=doc.get("champion_name"),
        team_count=_int(doc.get("team_count")),
        match_count=_int(doc.get("match_count")),
        image=_first(doc, "image", default=""),
    )


def team_from_doc(doc: dict[str, Any]) -> Team:
    return Team(
        id=str(_first(doc, "id", "team_id", "_id")),
        name=_first(doc, "name", "teamName", "team_name", default=""),
        country=_first(doc, "country", default=""),
        image=_first(doc, "image", "logo", default=""),
    )


def player_from_doc(doc: dict[str, Any]) -> Player:
    return Player(
        id=str(_first(doc, "id", "player_id", "_id")),
        name=_first(doc, "name", "playerName", default=""),
        country=_first(doc, "country", default=""),
        avatar=_first(doc, "avatar", default=""),
    )


def team_competition_from_doc(doc: dict[str, Any]) -> TeamCompetition:
    return TeamCompetition(
        id=str(_first(doc, "id", "team_competition_id", "_id")),
        team_id=_ref(doc.get("team_id")) or "",
        competition_id=_ref(doc.get("competition_id")) or "",
        matches_played=_int(_first(doc, "matches_played", "matchesPlayed")),
        matches_won=_int(_first(doc, "matches_won", "matchesWon")),
        matches_draw=_int(_first(doc, "matches_draw", "matchesDraw")),
        matches_lost=_int(_first(doc, "matches_lost", "matchesLost")),
        goals_scored=_int(_first(doc, "goals_scored", "goalsScored")),
        goals_conceded=_int(_first(doc, "goals_conceded", "goalsConceded")),
        cs=_int(doc.get("cs")),
        points=_int(doc.get("points")),
    )


def match_from_doc(doc: dict[str, Any]) -> Match:
    return Match(
        id=str(_first(doc, "id", "match_id", "_id")),
        competition_id=_ref(doc.get("competition_id")) or "",
        team1_competition_id=_ref(doc.get("team1_competition_id")) or "",
        team2_competition_id=_ref(doc.get("team2_competition_id")) or "",
        date=parse_datetime(doc.get("date")),
        score_team1=_int(_first(doc, "score_team1", "scoreTeam1")),
        score_team2=_int(_first(doc, "score_team2", "scoreTeam2")),
        week=_opt_str(doc.get("week")),
    )


def player_competition_from_doc(doc: dict[str, Any]) -> PlayerCompetition:
    return PlayerCompetition(
        id=str(_first(doc, "id", "player_competition_id", "_id")),
        player_id=_ref(doc.get("player_id")) or "",
        team_competition_id=_ref(doc.get("team_competition_id")) or "",
        position=str(_first(doc, "position", default="")).upper(),
        matches_played=_int(_first(doc, "matches_played", "matchesPlayed")),
        goals=_int(doc.get("goals")),
        assists=_int(doc.get("assists")),
        cs=_int(doc.get("cs")),
    )


def elo_player_from_doc(doc: dict[str, Any]) -> EloPlayer:
    return EloPlayer(
        player_id=str(_first(doc, "player_id", "playerId")),
        nickname=doc.get("nickname"),
        discord_id=_opt_str(_first(doc, "discord_id", "discordId")),
        elo=doc.get("elo", 0),
        wins=doc.get("wins", 0),
        losses=doc.get("losses", 0),
        streaks=doc.get("streaks", 0),
    )


def elo_season_from_doc(doc: dict[str, Any]) -> EloSeason:
    return EloSeason(
        season_id=str(_first(doc, "season_id", "seasonId")),
        name=doc.get("name"),
        status=doc.get("status"),
    )


def elo_player_season_from_doc(doc: dict[str, Any]) -> EloPlayerSeason:
    return EloPlayerSeason(
        season_id=str(_first(doc, "season_id", "seasonId")),
        player_id=str(_first(doc, "player_id", "playerId")),
        discord_id=_opt_str(_first(doc, "discord_id", "discordId")),
        elo=doc.get("elo", 0),
        wins=doc.get("wins", 0),
        losses=doc.get("losses", 0),
        streaks=doc.get("streaks", 0),
    )


# collection names (store name first, then document-database export aliases)
_COLLECTIONS: list[tuple[tuple[str, ...], Callable[[dict[str, Any]], Any], Any]] = [
    (("competitions",), competition_from_doc, CompetitionRepository()),
    (("teams",), team_from_doc, TeamRepository()),
    (("players",), player_from_doc, PlayerRepository()),
    (("team_competitions", "teamcompetitions"), team_competition_from_doc, TeamCompetitionRepository()),
    (("matches",), match_from_doc, MatchRepository()),
    (("player_competitions", "playercompetitions"), player_competition_from_doc, PlayerCompetitionRepository()),
    (("elo_players", "eloplayers"), elo_player_from_doc, EloPlayerRepository()),
    (("elo_seasons", "eloseasons"), elo_season_from_doc, EloSeasonRepository()),
    (("elo_player_seasons", "eloplayerseasons"), elo_player_season_from_doc, EloPlayerSeasonRepository()),
]


def load_seed(conn: sqlite3.Connection, data: dict[str, list[dict[str, Any]]]) -> dict[str, int]:
    """Insert every known collection in data. Returns documents loaded per collection."""
    counts: dict[str, int] = {}
    for names, from_doc, repo in _COLLECTIONS:
        docs: list[dict[str, Any]] = []
        for n in names:
            docs.extend(data.get(n, []))
        for doc in docs:
            repo.create(conn, from_doc(doc), commit=False)
        counts[names[0]] = len(docs)
    conn.commit()
    return counts


def load_seed_file(conn: sqlite3.Connection, seed_path: Path) -> dict[str, int]:
    """Load a JSON export file into the store."""
    return load_seed(conn, json.loads(seed_path.read_text()))
