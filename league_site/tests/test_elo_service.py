"""
Tests for Elo leaderboards: active-season selection, overall fallback, display names.
"""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from league_site.persistence.db import get_connection, init_db, set_db_path
from league_site.persistence.seed import load_seed
from league_site.services.elo_service import OVERALL_LABEL, EloService

PLAYERS = [
    {"player_id": "ep-a", "nickname": "  Ace  ", "discord_id": "1", "elo": 1500, "wins": 10, "losses": 5},
    {"player_id": "ep-b", "nickname": "", "discord_id": "2", "elo": 1600, "wins": 3, "losses": 1},
    {"player_id": "ep-c", "nickname": "Cee", "discord_id": "3", "elo": 1500, "wins": 0, "losses": 0},
]


@pytest.fixture
def make_conn(tmp_path):
    conns = []

    def _make(data):
        db_path = tmp_path / f"elo_{len(conns)}.db"
        set_db_path(db_path)
        init_db(db_path=db_path)
        conn = get_connection()
        load_seed(conn, data)
        conns.append(conn)
        return conn

    yield _make
    for c in conns:
        c.close()


def _names(rows):
    return [r.entry.name for r in rows]


def test_overall_fallback_when_no_active_season(make_conn):
    conn = make_conn({
        "elo_players": PLAYERS,
        "elo_seasons": [{"season_id": "old", "name": "Spring", "status": "finished"}],
    })
    result = EloService().leaderboards(conn)
    assert result.label == OVERALL_LABEL
    assert result.label == "Season data unavailable - showing overall Elo."
    assert not result.using_season
    assert _names(result.boards["elo"]) == ["ep-b", "Ace", "Cee"]
    assert _names(result.boards["matches"]) == ["Ace", "ep-b", "Cee"]
    assert _names(result.boards["win-rate"]) == ["ep-b", "Ace", "Cee"]


def test_active_season_rows_with_overall_nicknames(make_conn):
    conn = make_conn({
        "elo_players": PLAYERS,
        "elo_seasons": [
            {"season_id": "old", "name": "Spring", "status": "finished"},
            {"season_id": "s2", "name": "Autumn", "status": "active"},
        ],
        "elo_player_seasons": [
            {"season_id": "s2", "player_id": "sp-a", "discord_id": "1", "elo": 1100, "wins": 2, "losses": 0},
            {"season_id": "s2", "player_id": "sp-b", "discord_id": "2", "elo": 1300, "wins": 1, "losses": 1},
            {"season_id": "s2", "player_id": "sp-x", "discord_id": "999", "elo": 1200},
            {"season_id": "old", "player_id": "sp-old", "discord_id": "3", "elo": 2000},
        ],
    })
    result = EloService().leaderboards(conn)
    assert result.using_season
    assert result.label == "Season: Autumn"
    # blank nickname falls back to the overall player id; no overall record keeps the row's id
    assert _names(result.boards["elo"]) == ["ep-b", "sp-x", "Ace"]
    assert _names(result.boards["win-rate"]) == ["Ace", "ep-b", "sp-x"]
    d = result.to_dict()
    assert d["season_id"] == "s2"
    assert d["leaderboards"]["elo"][0]["rank"] == 1


def test_unnamed_season_label(make_conn):
    conn = make_conn({
        "elo_seasons": [{"season_id": "s9", "status": "active"}],
        "elo_player_seasons": [{"season_id": "s9", "player_id": "sp-1", "elo": 1000}],
    })
    result = EloService().leaderboards(conn)
    assert result.label == "Season ID: s9"
    assert _names(result.boards["elo"]) == ["sp-1"]


def test_active_season_without_rows_falls_back(make_conn):
    conn = make_conn({
        "elo_players": PLAYERS,
        "elo_seasons": [{"season_id": "s9", "name": "Fresh", "status": "active"}],
    })
    result = EloService().leaderboards(conn)
    assert result.label == OVERALL_LABEL
    assert result.season is None
    assert len(result.boards["elo"]) == 3


def test_leaderboards_cut_to_fifty(make_conn):
    conn = make_conn({
        "elo_players": [{"player_id": f"p{i:02d}", "elo": 1000 + i, "wins": i, "losses": 1} for i in range(60)],
    })
    result = EloService().leaderboards(conn)
    assert all(len(rows) == 50 for rows in result.boards.values())
    assert result.boards["elo"][0].entry.id == "p59"
    assert result.boards["elo"][-1].entry.id == "p10"
    assert len(EloService().leaderboards(conn, limit=5).boards["matches"]) == 5


def test_malformed_numbers_rank_as_zero(make_conn):
    conn = make_conn({
        "elo_players": [
            {"player_id": "bad", "elo": "corrupt", "wins": "x", "losses": None},
            {"player_id": "good", "elo": 900, "wins": 1, "losses": 1},
        ],
    })
    result = EloService().leaderboards(conn)
    assert [r.entry.id for r in result.boards["elo"]] == ["good", "bad"]
    assert result.boards["elo"][1].entry.elo == 0
