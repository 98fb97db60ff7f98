"""
SQLite schema for the league's document collections.
One table per collection; each created with IF NOT EXISTS.
Dates are ISO-8601 TEXT. Elo numerics are stored as given (may hold malformed values).
"""
from __future__ import annotations


def competitions_schema() -> str:
    """type: league | cup | supercup | summer_cup | nations_cup. division only for leagues."""
    return """
    CREATE TABLE IF NOT EXISTS competitions (
        id TEXT PRIMARY KEY,
        type TEXT NOT NULL,
        name TEXT NOT NULL DEFAULT '',
        season TEXT,
        division INTEGER,
        year INTEGER,
        start_date TEXT,
        end_date TEXT,
        champion_team_id TEXT,
        champion_name TEXT,
        team_count INTEGER NOT NULL DEFAULT 0,
        match_count INTEGER NOT NULL DEFAULT 0,
        image TEXT NOT NULL DEFAULT ''
    );
    CREATE INDEX IF NOT EXISTS ix_competitions_type ON competitions(type);
    CREATE INDEX IF NOT EXISTS ix_competitions_season ON competitions(season);
    """


def teams_schema() -> str:
    return """
    CREATE TABLE IF NOT EXISTS teams (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        country TEXT NOT NULL DEFAULT '',
        image TEXT NOT NULL DEFAULT ''
    );
    """


def players_schema() -> str:
    return """
    CREATE TABLE IF NOT EXISTS players (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        country TEXT NOT NULL DEFAULT '',
        avatar TEXT NOT NULL DEFAULT ''
    );
    """


def team_competitions_schema() -> str:
    """A team entered in one competition, with standings scoped to it."""
    return """
    CREATE TABLE IF NOT EXISTS team_competitions (
        id TEXT PRIMARY KEY,
        team_id TEXT NOT NULL,
        competition_id TEXT NOT NULL,
        matches_played INTEGER NOT NULL DEFAULT 0,
        matches_won INTEGER NOT NULL DEFAULT 0,
        matches_draw INTEGER NOT NULL DEFAULT 0,
        matches_lost INTEGER NOT NULL DEFAULT 0,
        goals_scored INTEGER NOT NULL DEFAULT 0,
        goals_conceded INTEGER NOT NULL DEFAULT 0,
        cs INTEGER NOT NULL DEFAULT 0,
        points INTEGER NOT NULL DEFAULT 0
    );
    CREATE INDEX IF NOT EXISTS ix_team_competitions_competition ON team_competitions(competition_id);
    CREATE INDEX IF NOT EXISTS ix_team_competitions_team ON team_competitions(team_id);
    """


def matches_schema() -> str:
    return """
    CREATE TABLE IF NOT EXISTS matches (
        id TEXT PRIMARY KEY,
        competition_id TEXT NOT NULL,
        team1_competition_id TEXT NOT NULL,
        team2_competition_id TEXT NOT NULL,
        date TEXT,
        score_team1 INTEGER NOT NULL DEFAULT 0,
        score_team2 INTEGER NOT NULL DEFAULT 0,
        week TEXT
    );
    CREATE INDEX IF NOT EXISTS ix_matches_competition ON matches(competition_id);
    """


def player_competitions_schema() -> str:
    """position: GK, CB, LB, RB, DM, CM, AM, LW, RW, ST. cs = clean sheets."""
    return """
    CREATE TABLE IF NOT EXISTS player_competitions (
        id TEXT PRIMARY KEY,
        player_id TEXT NOT NULL,
        team_competition_id TEXT NOT NULL,
        position TEXT NOT NULL DEFAULT '',
        matches_played INTEGER NOT NULL DEFAULT 0,
        goals INTEGER NOT NULL DEFAULT 0,
        assists INTEGER NOT NULL DEFAULT 0,
        cs INTEGER NOT NULL DEFAULT 0
    );
    CREATE INDEX IF NOT EXISTS ix_player_competitions_tc ON player_competitions(team_competition_id);
    CREATE INDEX IF NOT EXISTS ix_player_competitions_player ON player_competitions(player_id);
    """


def elo_schema() -> str:
    """Overall Elo (elo_players), Elo seasons, and per-season Elo rows."""
    return """
    CREATE TABLE IF NOT EXISTS elo_players (
        player_id TEXT PRIMARY KEY,
        nickname TEXT,
        discord_id TEXT,
        elo NUMERIC,
        wins NUMERIC,
        losses NUMERIC,
        streaks NUMERIC
    );
    CREATE INDEX IF NOT EXISTS ix_elo_players_discord ON elo_players(discord_id);
    CREATE TABLE IF NOT EXISTS elo_seasons (
        season_id TEXT PRIMARY KEY,
        name TEXT,
        status TEXT
    );
    CREATE TABLE IF NOT EXISTS elo_player_seasons (
        season_id TEXT NOT NULL,
        player_id TEXT NOT NULL,
        discord_id TEXT,
        elo NUMERIC,
        wins NUMERIC,
        losses NUMERIC,
        streaks NUMERIC,
        PRIMARY KEY (season_id, player_id)
    );
    """


def all_schema_sql() -> str:
    """Combine all schema DDL for a single execution."""
    return "\n".join([
        competitions_schema(),
        teams_schema(),
        players_schema(),
        team_competitions_schema(),
        matches_schema(),
        player_competitions_schema(),
        elo_schema(),
    ])
