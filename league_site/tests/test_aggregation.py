"""
Tests for per-group aggregation: distinct teams, match counts, champions, status.
"""
from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from league_site.models import (
    Competition,
    CompetitionStatus,
    Match,
    Team,
    TeamCompetition,
    TallyState,
)
from league_site.services.aggregation import (
    NO_CHAMPION,
    aggregate_group,
    aggregate_groups,
    champion_lines,
    count_distinct_teams,
    count_matches,
)
from league_site.services.grouping import group_competitions, group_competitions_by_key

NOW = datetime(2024, 10, 1, tzinfo=timezone.utc)
DAY = timedelta(days=1)


@pytest.fixture
def season3():
    comps = [
        Competition(id="d1", type="league", season="3", division=1, start_date=NOW - 30 * DAY,
                    end_date=NOW + 30 * DAY, champion_team_id="t-a"),
        Competition(id="d2", type="league", season="3", division=2, start_date=NOW - 30 * DAY,
                    end_date=NOW + 20 * DAY, champion_name="Rovers"),
        Competition(id="cup", type="cup", season="3", start_date=NOW - 10 * DAY, end_date=NOW + 60 * DAY),
    ]
    return group_competitions_by_key(comps)["season-3"]


@pytest.fixture
def team_competitions():
    return [
        TeamCompetition(id="tc1", team_id="t-a", competition_id="d1"),
        TeamCompetition(id="tc2", team_id="t-b", competition_id="d1"),
        TeamCompetition(id="tc3", team_id="t-c", competition_id="d2"),
        # t-a also plays the cup; counts once
        TeamCompetition(id="tc4", team_id="t-a", competition_id="cup"),
        TeamCompetition(id="tc5", team_id="t-z", competition_id="elsewhere"),
    ]


@pytest.fixture
def matches():
    return [
        Match(id="m1", competition_id="d1", team1_competition_id="tc1", team2_competition_id="tc2"),
        Match(id="m2", competition_id="cup", team1_competition_id="tc4", team2_competition_id="tc1"),
        Match(id="m3", competition_id="elsewhere", team1_competition_id="tc5", team2_competition_id="tc5"),
    ]


def test_distinct_teams_across_divisions(season3, team_competitions):
    tally = count_distinct_teams(season3.competition_ids, team_competitions)
    assert tally.state == TallyState.OK
    assert tally.value == 3


def test_match_count_only_group_members(season3, matches):
    tally = count_matches(season3.competition_ids, matches)
    assert tally.value == 2
    assert tally.render() == "2"


def test_not_fetched_is_unavailable(season3):
    assert count_distinct_teams(season3.competition_ids, None).state == TallyState.UNAVAILABLE
    assert count_matches(season3.competition_ids, None).render() == "N/A"


def test_fetched_but_absent_is_empty(season3):
    tally = count_matches(season3.competition_ids, [])
    assert tally.state == TallyState.EMPTY
    assert tally.value == 0


def test_champion_lines_in_link_order():
    comps = [
        Competition(id="cup", type="cup", season="3", champion_name="Cup Winners"),
        Competition(id="d2", type="league", season="3", division=2, champion_name="Rovers"),
        Competition(id="d1", type="league", season="3", division=1, champion_team_id="t-a",
                    champion_name="Old Name"),
        Competition(id="sc", type="supercup", season="3"),
    ]
    lines = champion_lines(comps, {"t-a": Team(id="t-a", name="Lions")})
    assert [(l.tier, l.champion) for l in lines] == [
        ("1st tier", "Lions"),
        ("2nd tier", "Rovers"),
        ("cup", "Cup Winners"),
    ]


def test_champion_reference_without_team_or_name():
    lines = champion_lines([Competition(id="d1", type="league", season="3", division=1, champion_team_id="gone")])
    assert lines[0].champion == NO_CHAMPION


def test_aggregate_group(season3, team_competitions, matches):
    summary = aggregate_group(season3, team_competitions, matches, {"t-a": Team(id="t-a", name="Lions")}, NOW)
    assert summary.team_count.value == 3
    assert summary.match_count.value == 2
    assert summary.status == CompetitionStatus.ACTIVE
    assert [c.champion for c in summary.champions] == ["Lions", "Rovers"]
    d = summary.to_dict(NOW)
    assert d["key"] == "season-3"
    assert d["team_count"] == {"value": 3, "state": "ok", "display": "3"}
    assert [c["highlight"] for c in d["competitions"]] == ["div1", "div2", "cup"]
    assert d["competitions"][0]["href"] == "/seasons/season-3?highlight=div1"
    assert d["competitions"][0]["status"] == "active"


def test_group_status_uses_span():
    comps = [
        Competition(id="d1", type="league", season="1", division=1, start_date=NOW - 90 * DAY, end_date=NOW - 60 * DAY),
        Competition(id="cup", type="cup", season="1", start_date=NOW - 50 * DAY, end_date=NOW + DAY),
    ]
    [summary] = aggregate_groups(group_competitions(comps), [], [], now=NOW)
    assert summary.status == CompetitionStatus.ACTIVE


def test_aggregate_groups_keeps_order(team_competitions, matches):
    comps = [
        Competition(id="old", type="summer_cup", start_date=NOW - 400 * DAY),
        Competition(id="new", type="nations_cup", start_date=NOW - 10 * DAY),
    ]
    groups = group_competitions(comps)
    summaries = aggregate_groups(groups, team_competitions, None, now=NOW)
    assert [s.group.key for s in summaries] == ["nations_cup-new", "summer_cup-old"]
    assert all(s.match_count.state == TallyState.UNAVAILABLE for s in summaries)
    assert all(s.team_count.state == TallyState.EMPTY for s in summaries)
