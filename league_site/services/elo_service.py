"""
Elo leaderboards: season ratings when an Elo season is active, overall ratings otherwise.
"""
from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field
from typing import Any

from league_site.logging import get_logger
from league_site.models import EloPlayer, EloPlayerSeason, EloSeason, RankingEntry
from league_site.persistence.repositories import (
    EloPlayerRepository,
    EloPlayerSeasonRepository,
    EloSeasonRepository,
)
from league_site.services.ranking import ELO_VIEWS, RankedEntry, elo_entry, leaderboards

log = get_logger("elo_service")

OVERALL_LABEL = "Season data unavailable - showing overall Elo."


def season_label(season: EloSeason) -> str:
    name = (season.name or "").strip()
    return f"Season: {name}" if name else f"Season ID: {season.season_id}"


def display_name(row: EloPlayerSeason, players_by_discord: dict[str, EloPlayer]) -> str:
    """Nickname of the overall record sharing the discord id, else its player id, else the row's."""
    player = players_by_discord.get(row.discord_id) if row.discord_id else None
    if player is not None:
        nickname = (player.nickname or "").strip()
        return nickname or player.player_id or row.player_id
    return row.player_id


@dataclass(frozen=True)
class EloLeaderboards:
    label: str
    season: EloSeason | None
    boards: dict[str, list[RankedEntry]] = field(default_factory=dict)

    @property
    def using_season(self) -> bool:
        return self.season is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "using_season": self.using_season,
            "season_id": self.season.season_id if self.season is not None else None,
            "season_name": self.season.name if self.season is not None else None,
            "leaderboards": {view: [r.to_dict() for r in rows] for view, rows in self.boards.items()},
        }


class EloService:
    def __init__(self) -> None:
        self._player_repo = EloPlayerRepository()
        self._season_repo = EloSeasonRepository()
        self._player_season_repo = EloPlayerSeasonRepository()

    def _season_entries(self, conn: sqlite3.Connection, season: EloSeason) -> list[RankingEntry]:
        rows = self._player_season_repo.list_by_season(conn, season.season_id)
        discord_ids = [r.discord_id for r in rows if r.discord_id]
        players = self._player_repo.list_by_discord_ids(conn, discord_ids) if discord_ids else []
        by_discord: dict[str, EloPlayer] = {}
        for p in players:
            if p.discord_id:
                by_discord.setdefault(p.discord_id, p)
        return [elo_entry(r, display_name(r, by_discord)) for r in rows]

    def _overall_entries(self, conn: sqlite3.Connection) -> list[RankingEntry]:
        return [elo_entry(p, (p.nickname or "").strip() or None) for p in self._player_repo.list_all(conn)]

    def leaderboards(self, conn: sqlite3.Connection, limit: int | None = None) -> EloLeaderboards:
        """
        elo / matches / win-rate views, each sorted over the full set and then cut
        (default 50). Uses the active Elo season's rows; when there is no active
        season or it has no rows, overall Elo.
        """
        season = self._season_repo.get_active(conn)
        entries = self._season_entries(conn, season) if season is not None else []
        if entries:
            label = season_label(season)
        else:
            # no active season, or one without rows yet
            season = None
            entries = self._overall_entries(conn)
            label = OVERALL_LABEL
        log.info(
            "elo_leaderboards_built",
            season_id=season.season_id if season is not None else None,
            players=len(entries),
        )
        return EloLeaderboards(label=label, season=season, boards=leaderboards(entries, ELO_VIEWS, limit))
