"""
Season and competition read models: fetch flat records, join them in memory,
then group, aggregate and rank.

Competitions are the primary read: if they cannot be fetched the request fails.
Team entries and matches only feed the season card counts; if those reads fail
the counts are marked unavailable instead.
"""
from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import Any, Iterable

from league_site.logging import get_logger
from league_site.models import (
    KNOWN_TYPES,
    SEASON_TYPES,
    Competition,
    GroupKind,
    Match,
    SeasonGroup,
    Team,
    TeamCompetition,
    utcnow,
)
from league_site.persistence.repositories import (
    CompetitionRepository,
    MatchRepository,
    PlayerCompetitionRepository,
    PlayerRepository,
    RecordSourceError,
    TeamCompetitionRepository,
    TeamRepository,
)
from league_site.services.aggregation import GroupSummary, aggregate_group, aggregate_groups
from league_site.services.formatting import competition_label, highlight_key, order_competitions, type_name
from league_site.services.grouping import (
    group_competitions,
    group_competitions_by_key,
    parse_group_key,
    season_identifier,
)
from league_site.services.ranking import STAT_VIEWS, leaderboards, player_stat_entries, rank_standings

log = get_logger("season_service")

# ---------- Exceptions ----------


class SeasonNotFoundError(LookupError):
    """No season card with that key."""


class CompetitionNotFoundError(LookupError):
    """No competition with that id."""


def _by_id(records: Iterable[Any]) -> dict[str, Any]:
    return {r.id: r for r in records}


def _match_sort_key(m: Match) -> tuple[bool, float]:
    # dated matches first, oldest first
    return (m.date is None, m.date.timestamp() if m.date is not None else 0.0)


# ---------- SeasonService ----------


class SeasonService:
    """
    Builds season cards, season detail and competition detail.
    Persistence is delegated to repositories; every call works on a fresh read.
    """

    def __init__(self) -> None:
        self._competition_repo = CompetitionRepository()
        self._team_repo = TeamRepository()
        self._player_repo = PlayerRepository()
        self._team_competition_repo = TeamCompetitionRepository()
        self._match_repo = MatchRepository()
        self._player_competition_repo = PlayerCompetitionRepository()

    # ---------- Fetch helpers ----------

    def _fetch_counts_sources(
        self, conn: sqlite3.Connection, competition_ids: list[str]
    ) -> tuple[list[TeamCompetition] | None, list[Match] | None]:
        """Team entries and matches for the competitions; None for a read that failed."""
        try:
            team_competitions: list[TeamCompetition] | None = (
                self._team_competition_repo.list_by_competitions(conn, competition_ids)
            )
        except RecordSourceError as exc:
            log.warning("record_fetch_failed", collection="team_competitions", error=str(exc))
            team_competitions = None
        try:
            matches: list[Match] | None = self._match_repo.list_by_competitions(conn, competition_ids)
        except RecordSourceError as exc:
            log.warning("record_fetch_failed", collection="matches", error=str(exc))
            matches = None
        return team_competitions, matches

    def _fetch_teams(self, conn: sqlite3.Connection, team_ids: Iterable[str | None]) -> dict[str, Team]:
        ids = [t for t in team_ids if t]
        return _by_id(self._team_repo.find_in(conn, "id", ids)) if ids else {}

    def _champion_teams(self, conn: sqlite3.Connection, competitions: Iterable[Competition]) -> dict[str, Team]:
        try:
            return self._fetch_teams(conn, (c.champion_team_id for c in competitions))
        except RecordSourceError as exc:
            log.warning("record_fetch_failed", collection="teams", error=str(exc))
            return {}

    # ---------- Season cards ----------

    def list_seasons(self, conn: sqlite3.Connection, now: datetime | None = None) -> list[GroupSummary]:
        """Season cards with team/match tallies, status and champions, newest first."""
        now = now or utcnow()
        competitions = self._competition_repo.list_by_types(conn, KNOWN_TYPES)
        groups = group_competitions(competitions)
        ids = [c.id for c in competitions]
        team_competitions, matches = self._fetch_counts_sources(conn, ids)
        teams = self._champion_teams(conn, competitions)
        summaries = aggregate_groups(groups, team_competitions, matches, teams, now)
        log.info("seasons_listed", groups=len(summaries), competitions=len(competitions))
        return summaries

    # ---------- Season detail ----------

    def _competitions_for_key(self, conn: sqlite3.Connection, key: str) -> list[Competition]:
        try:
            kind, identifier = parse_group_key(key)
        except ValueError:
            raise SeasonNotFoundError(f"Season not found: {key}") from None
        if kind == GroupKind.STANDALONE:
            competition = self._competition_repo.get(conn, identifier)
            return [competition] if competition is not None else []
        # stored ids may carry whitespace; match on the same identifier grouping uses
        return [
            c for c in self._competition_repo.list_by_types(conn, SEASON_TYPES)
            if season_identifier(c) == identifier
        ]

    def get_group(self, conn: sqlite3.Connection, key: str) -> SeasonGroup:
        group = group_competitions_by_key(self._competitions_for_key(conn, key)).get(key)
        if group is None:
            raise SeasonNotFoundError(f"Season not found: {key}")
        return group

    def get_season(self, conn: sqlite3.Connection, key: str, now: datetime | None = None) -> dict[str, Any]:
        """
        One season card plus, per member competition (in link order), its standings.
        Raises SeasonNotFoundError for unknown keys.
        """
        now = now or utcnow()
        group = self.get_group(conn, key)
        ids = [c.id for c in group.competitions]
        team_competitions, matches = self._fetch_counts_sources(conn, ids)
        rows = team_competitions or []
        teams = self._fetch_teams(
            conn,
            [tc.team_id for tc in rows] + [c.champion_team_id for c in group.competitions],
        )
        summary = aggregate_group(group, team_competitions, matches, teams, now)
        members = []
        for c in order_competitions(group.competitions):
            members.append({
                **c.to_dict(now),
                "label": competition_label(c),
                "type_name": type_name(c.type),
                "highlight": highlight_key(c),
                "standings": [
                    s.to_dict() for s in rank_standings((tc for tc in rows if tc.competition_id == c.id), teams)
                ],
            })
        out = summary.to_dict(now)
        out["members"] = members
        return out

    # ---------- Competition detail ----------

    def get_competition(
        self, conn: sqlite3.Connection, competition_id: str, now: datetime | None = None
    ) -> dict[str, Any]:
        """
        Competition with standings, fixtures (team names joined) and stat leaders.
        Raises CompetitionNotFoundError for unknown ids.
        """
        now = now or utcnow()
        competition = self._competition_repo.get(conn, competition_id)
        if competition is None:
            raise CompetitionNotFoundError(f"Competition not found: {competition_id}")

        entries = self._team_competition_repo.list_by_competition(conn, competition.id)
        matches = self._match_repo.list_by_competition(conn, competition.id)
        teams = self._fetch_teams(conn, [tc.team_id for tc in entries] + [competition.champion_team_id])
        entry_by_id: dict[str, TeamCompetition] = _by_id(entries)
        team_name_by_entry = {
            tc.id: teams[tc.team_id].name for tc in entries if tc.team_id in teams
        }

        player_rows = self._player_competition_repo.list_by_team_competitions(conn, entry_by_id.keys())
        player_ids = [pc.player_id for pc in player_rows]
        players = _by_id(self._player_repo.find_in(conn, "id", player_ids)) if player_ids else {}
        stat_entries = player_stat_entries(player_rows, players, team_name_by_entry)

        def side(team_competition_id: str) -> dict[str, Any]:
            tc = entry_by_id.get(team_competition_id)
            team = teams.get(tc.team_id) if tc is not None else None
            return {
                "team_competition_id": team_competition_id,
                "team_id": tc.team_id if tc is not None else None,
                "name": team.name if team is not None else None,
                "image": team.image if team is not None else None,
            }

        fixtures = [
            {
                "id": m.id,
                "date": m.date.isoformat() if m.date else None,
                "week": m.week,
                "team1": side(m.team1_competition_id),
                "team2": side(m.team2_competition_id),
                "score_team1": m.score_team1,
                "score_team2": m.score_team2,
            }
            for m in sorted(matches, key=_match_sort_key)
        ]
        champion = teams.get(competition.champion_team_id) if competition.champion_team_id else None
        boards = leaderboards(stat_entries, STAT_VIEWS)
        log.info(
            "competition_loaded",
            competition_id=competition.id,
            teams=len(entries),
            matches=len(matches),
            players=len(player_rows),
        )
        return {
            "competition": {
                **competition.to_dict(now),
                "label": competition_label(competition),
                "type_name": type_name(competition.type),
                "champion": (champion.name if champion is not None else None) or competition.champion_name,
            },
            "standings": [s.to_dict() for s in rank_standings(entries, teams)],
            "matches": fixtures,
            "statistics": {view: [r.to_dict() for r in rows] for view, rows in boards.items()},
        }
