"""
Tests for season/competition read-model assembly over a seeded store.
"""
from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import patch

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from league_site.models import TallyState
from league_site.persistence.db import get_connection, init_db, set_db_path
from league_site.persistence.repositories import (
    CompetitionRepository,
    MatchRepository,
    RecordSourceError,
    TeamCompetitionRepository,
)
from league_site.persistence.seed import load_seed
from league_site.services.season_service import (
    CompetitionNotFoundError,
    SeasonNotFoundError,
    SeasonService,
)

NOW = datetime(2024, 10, 15, tzinfo=timezone.utc)

SEED = {
    "competitions": [
        {"_id": "s3d1", "type": "league", "season": "3", "division": 1, "start_date": "2024-09-02T00:00:00Z",
         "end_date": "2024-12-15T00:00:00Z", "champion_team_id": "t-wolves"},
        {"_id": "s3d2", "type": "league", "season": "3", "division": 2, "start_date": "2024-09-02T00:00:00Z",
         "end_date": "2024-12-15T00:00:00Z"},
        {"_id": "s3cup", "type": "cup", "season": "3", "start_date": "2024-10-01T00:00:00Z"},
        {"_id": "sc24", "type": "summer_cup", "start_date": "2024-06-10T00:00:00Z",
         "end_date": "2024-07-14T00:00:00Z", "champion_name": "Harbour FC"},
        {"_id": "s2d1", "type": "league", "season": "2", "division": 1, "start_date": "2024-01-08T00:00:00Z",
         "end_date": "2024-04-28T00:00:00Z"},
        {"_id": "odd", "type": "friendly"},
    ],
    "teams": [
        {"_id": "t-lions", "name": "Lions"},
        {"_id": "t-wolves", "name": "Wolves", "image": "/w.png"},
        {"_id": "t-rovers", "name": "Rovers"},
    ],
    "players": [
        {"_id": "p1", "name": "Ana"},
        {"_id": "p2", "name": "Ben"},
        {"_id": "p3", "name": "Cal"},
    ],
    "team_competitions": [
        {"_id": "tc1", "team_id": "t-wolves", "competition_id": "s3d1", "points": 3, "goals_scored": 3},
        {"_id": "tc2", "team_id": "t-lions", "competition_id": "s3d1", "points": 0, "goals_conceded": 3},
        {"_id": "tc3", "team_id": "t-rovers", "competition_id": "s3d2"},
        {"_id": "tc4", "team_id": "t-wolves", "competition_id": "s3cup"},
    ],
    "matches": [
        {"_id": "m2", "competition_id": "s3d1", "team1_competition_id": "tc2", "team2_competition_id": "tc1",
         "date": "2024-09-15T18:00:00Z"},
        {"_id": "m1", "competition_id": "s3d1", "team1_competition_id": "tc1", "team2_competition_id": "tc2",
         "date": "2024-09-08T18:00:00Z", "score_team1": 3, "score_team2": 0},
        {"_id": "m3", "competition_id": "s3d1", "team1_competition_id": "tc1", "team2_competition_id": "tc-gone"},
    ],
    "player_competitions": [
        {"_id": "pc1", "player_id": "p1", "team_competition_id": "tc1", "position": "ST", "goals": 2},
        {"_id": "pc2", "player_id": "p2", "team_competition_id": "tc1", "position": "GK", "cs": 1},
        {"_id": "pc3", "player_id": "p3", "team_competition_id": "tc2", "position": "CB", "cs": 4, "assists": 1},
    ],
}


@pytest.fixture
def db_conn(tmp_path):
    db_path = tmp_path / "season_test.db"
    set_db_path(db_path)
    init_db(db_path=db_path)
    conn = get_connection()
    load_seed(conn, SEED)
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture
def service():
    return SeasonService()


def test_list_seasons(db_conn, service):
    summaries = service.list_seasons(db_conn, NOW)
    assert [s.group.key for s in summaries] == ["season-3", "summer_cup-sc24", "season-2"]
    season3 = summaries[0]
    assert season3.team_count.value == 3
    assert season3.match_count.value == 3
    assert season3.status.value == "active"
    assert [c.champion for c in season3.champions] == ["Wolves"]
    summer = summaries[1]
    assert summer.team_count.state == TallyState.EMPTY
    assert summer.status.value == "finished"
    assert [c.champion for c in summer.champions] == ["Harbour FC"]


def test_list_seasons_count_fetch_failure_marks_unavailable(db_conn, service):
    with patch.object(MatchRepository, "list_by_competitions", side_effect=RecordSourceError("down")):
        summaries = service.list_seasons(db_conn, NOW)
    assert all(s.match_count.state == TallyState.UNAVAILABLE for s in summaries)
    assert summaries[0].match_count.render() == "N/A"
    assert summaries[0].team_count.value == 3


def test_list_seasons_competition_fetch_failure_is_fatal(db_conn, service):
    with patch.object(CompetitionRepository, "list_by_types", side_effect=RecordSourceError("down")):
        with pytest.raises(RecordSourceError):
            service.list_seasons(db_conn, NOW)


def test_get_season(db_conn, service):
    out = service.get_season(db_conn, "season-3", NOW)
    assert out["title"] == "Season 3"
    assert [m["id"] for m in out["members"]] == ["s3d1", "s3d2", "s3cup"]
    div1 = out["members"][0]
    assert div1["label"] == "Season 3, div 1"
    assert [r["team_name"] for r in div1["standings"]] == ["Wolves", "Lions"]
    assert out["team_count"]["display"] == "3"


def test_get_standalone_season(db_conn, service):
    out = service.get_season(db_conn, "summer_cup-sc24", NOW)
    assert out["title"] == "Summer Cup 2024"
    assert out["kind"] == "standalone"


def test_get_season_not_found(db_conn, service):
    for key in ("season-99", "summer_cup-s3d1", "nations_cup-nope", "garbage"):
        with pytest.raises(SeasonNotFoundError):
            service.get_season(db_conn, key, NOW)


def test_get_season_with_padded_season_id(db_conn, service):
    load_seed(db_conn, {"competitions": [
        {"_id": "s4d1", "type": "league", "season": " 4 ", "division": 1, "start_date": "2025-01-06T00:00:00Z"},
        {"_id": "s4cup", "type": "cup", "season": "4"},
    ]})
    keys = [s.group.key for s in service.list_seasons(db_conn, NOW)]
    assert "season-4" in keys
    out = service.get_season(db_conn, "season-4", NOW)
    assert out["title"] == "Season 4"
    assert [m["id"] for m in out["members"]] == ["s4d1", "s4cup"]


def test_get_season_with_team_fetch_failure(db_conn, service):
    with patch.object(TeamCompetitionRepository, "list_by_competitions", side_effect=RecordSourceError("down")):
        out = service.get_season(db_conn, "season-3", NOW)
    assert out["team_count"]["state"] == "unavailable"
    assert out["members"][0]["standings"] == []


def test_get_competition(db_conn, service):
    out = service.get_competition(db_conn, "s3d1", NOW)
    assert out["competition"]["label"] == "Season 3, div 1"
    assert out["competition"]["champion"] == "Wolves"
    assert out["competition"]["status"] == "active"
    assert [s["team_name"] for s in out["standings"]] == ["Wolves", "Lions"]
    # dated fixtures oldest first, undated last
    assert [m["id"] for m in out["matches"]] == ["m1", "m2", "m3"]
    assert out["matches"][0]["team1"]["name"] == "Wolves"
    assert out["matches"][0]["team2"]["name"] == "Lions"
    assert out["matches"][2]["team2"]["name"] is None
    stats = out["statistics"]
    assert [r["name"] for r in stats["top-scorers"]][0] == "Ana"
    assert stats["top-scorers"][0]["team_name"] == "Wolves"
    assert [r["name"] for r in stats["top-assists"]][0] == "Cal"
    assert [r["name"] for r in stats["top-clean-sheets"]] == ["Ben"]


def test_get_competition_not_found(db_conn, service):
    with pytest.raises(CompetitionNotFoundError):
        service.get_competition(db_conn, "nope", NOW)
