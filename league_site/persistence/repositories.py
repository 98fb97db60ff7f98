"""
Repository interfaces for the league collections.
Read operations by identifier, by field equality and by set membership;
create() exists only for seeding a store. No business logic.
"""
from __future__ import annotations

import math
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Generic, Iterable, Iterator, TypeVar

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

T = TypeVar("T")

# Keeps IN (...) lists under sqlite's bound-parameter limit
_IN_CHUNK = 500


class RecordSourceError(RuntimeError):
    """The record source could not be read."""


@contextmanager
def _source_errors(collection: str) -> Iterator[None]:
    try:
        yield
    except sqlite3.Error as exc:
        raise RecordSourceError(f"Failed to read {collection}: {exc}") from exc


def parse_datetime(value: Any) -> datetime | None:
    """ISO string (or datetime) to an aware UTC datetime; None when absent or unparseable."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        d = value
    else:
        try:
            d = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return None
    if d.tzinfo is None:
        d = d.replace(tzinfo=timezone.utc)
    return d


def format_datetime(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _int(value: Any, default: int = 0) -> int:
    """Integer column read; malformed values fall back to default."""
    if value is None or isinstance(value, bool):
        return default
    try:
        f = float(value)
    except (TypeError, ValueError):
        return default
    return int(f) if math.isfinite(f) else default


def _opt_int(value: Any) -> int | None:
    return None if value is None or value == "" else _int(value)


def _opt_str(value: Any) -> str | None:
    return None if value is None else str(value)


# ---------- Base ----------


class _Repository(Generic[T]):
    """Shared read paths. Subclasses set table/columns/key and map rows to models."""

    table: str = ""
    columns: tuple[str, ...] = ()
    key: str = "id"

    def _from_row(self, row: sqlite3.Row) -> T:
        raise NotImplementedError

    def _to_values(self, record: T) -> tuple[Any, ...]:
        raise NotImplementedError

    def _select(self, conn: sqlite3.Connection, where: str = "", args: tuple = ()) -> list[T]:
        sql = f"SELECT {', '.join(self.columns)} FROM {self.table}"
        if where:
            sql += f" WHERE {where}"
        # Insertion order, so stable sorts downstream are deterministic
        sql += " ORDER BY rowid"
        with _source_errors(self.table):
            rows = conn.execute(sql, args).fetchall()
        return [self._from_row(r) for r in rows]

    def _check_field(self, field: str) -> None:
        if field not in self.columns:
            raise ValueError(f"Unknown field for {self.table}: {field}")

    def list_all(self, conn: sqlite3.Connection) -> list[T]:
        return self._select(conn)

    def get(self, conn: sqlite3.Connection, record_id: str) -> T | None:
        found = self._select(conn, f"{self.key} = ?", (record_id,))
        return found[0] if found else None

    def find_by(self, conn: sqlite3.Connection, field: str, value: Any) -> list[T]:
        """Records whose field equals value (NULL-safe for value=None)."""
        self._check_field(field)
        if value is None:
            return self._select(conn, f"{field} IS NULL")
        return self._select(conn, f"{field} = ?", (value,))

    def find_in(self, conn: sqlite3.Connection, field: str, values: Iterable[Any]) -> list[T]:
        """Records whose field is one of values. Input order of values is not preserved."""
        self._check_field(field)
        unique = list(dict.fromkeys(values))
        out: list[T] = []
        for start in range(0, len(unique), _IN_CHUNK):
            chunk = tuple(unique[start:start + _IN_CHUNK])
            placeholders = ", ".join("?" * len(chunk))
            out.extend(self._select(conn, f"{field} IN ({placeholders})", chunk))
        return out

    def create(self, conn: sqlite3.Connection, record: T, commit: bool = True) -> T:
        placeholders = ", ".join("?" * len(self.columns))
        conn.execute(
            f"INSERT OR REPLACE INTO {self.table} ({', '.join(self.columns)}) VALUES ({placeholders})",
            self._to_values(record),
        )
        if commit:
            conn.commit()
        return record


# ---------- CompetitionRepository ----------


class CompetitionRepository(_Repository[Competition]):
    table = "competitions"
    columns = (
        "id", "type", "name", "season", "division", "year", "start_date", "end_date",
        "champion_team_id", "champion_name", "team_count", "match_count", "image",
    )

    def _from_row(self, row: sqlite3.Row) -> Competition:
        r = dict(row)
        return Competition(
            id=r["id"],
            type=r["type"],
            name=r["name"] or "",
            season=_opt_str(r["season"]),
            division=_opt_int(r["division"]),
            year=_opt_int(r["year"]),
            start_date=parse_datetime(r["start_date"]),
            end_date=parse_datetime(r["end_date"]),
            champion_team_id=_opt_str(r["champion_team_id"]),
            champion_name=r["champion_name"],
            team_count=_int(r["team_count"]),
            match_count=_int(r["match_count"]),
            image=r["image"] or "",
        )

    def _to_values(self, c: Competition) -> tuple[Any, ...]:
        return (
            c.id, c.type, c.name, c.season, c.division, c.year,
            format_datetime(c.start_date), format_datetime(c.end_date),
            c.champion_team_id, c.champion_name, c.team_count, c.match_count, c.image,
        )

    def list_by_types(self, conn: sqlite3.Connection, types: Iterable[str]) -> list[Competition]:
        return self.find_in(conn, "type", types)


# ---------- TeamRepository / PlayerRepository ----------


class TeamRepository(_Repository[Team]):
    table = "teams"
    columns = ("id", "name", "country", "image")

    def _from_row(self, row: sqlite3.Row) -> Team:
        return Team(id=row["id"], name=row["name"], country=row["country"] or "", image=row["image"] or "")

    def _to_values(self, t: Team) -> tuple[Any, ...]:
        return (t.id, t.name, t.country, t.image)


class PlayerRepository(_Repository[Player]):
    table = "players"
    columns = ("id", "name", "country", "avatar")

    def _from_row(self, row: sqlite3.Row) -> Player:
        return Player(id=row["id"], name=row["name"], country=row["country"] or "", avatar=row["avatar"] or "")

    def _to_values(self, p: Player) -> tuple[Any, ...]:
        return (p.id, p.name, p.country, p.avatar)


# ---------- TeamCompetitionRepository ----------


class TeamCompetitionRepository(_Repository[TeamCompetition]):
    table = "team_competitions"
    columns = (
        "id", "team_id", "competition_id", "matches_played", "matches_won", "matches_draw",
        "matches_lost", "goals_scored", "goals_conceded", "cs", "points",
    )

    def _from_row(self, row: sqlite3.Row) -> TeamCompetition:
        r = dict(row)
        return TeamCompetition(
            id=r["id"],
            team_id=r["team_id"],
            competition_id=r["competition_id"],
            matches_played=_int(r["matches_played"]),
            matches_won=_int(r["matches_won"]),
            matches_draw=_int(r["matches_draw"]),
            matches_lost=_int(r["matches_lost"]),
            goals_scored=_int(r["goals_scored"]),
            goals_conceded=_int(r["goals_conceded"]),
            cs=_int(r["cs"]),
            points=_int(r["points"]),
        )

    def _to_values(self, tc: TeamCompetition) -> tuple[Any, ...]:
        return (
            tc.id, tc.team_id, tc.competition_id, tc.matches_played, tc.matches_won,
            tc.matches_draw, tc.matches_lost, tc.goals_scored, tc.goals_conceded, tc.cs, tc.points,
        )

    def list_by_competition(self, conn: sqlite3.Connection, competition_id: str) -> list[TeamCompetition]:
        return self.find_by(conn, "competition_id", competition_id)

    def list_by_competitions(
        self, conn: sqlite3.Connection, competition_ids: Iterable[str]
    ) -> list[TeamCompetition]:
        return self.find_in(conn, "competition_id", competition_ids)


# ---------- MatchRepository ----------


class MatchRepository(_Repository[Match]):
    table = "matches"
    columns = (
        "id", "competition_id", "team1_competition_id", "team2_competition_id",
        "date", "score_team1", "score_team2", "week",
    )

    def _from_row(self, row: sqlite3.Row) -> Match:
        r = dict(row)
        return Match(
            id=r["id"],
            competition_id=r["competition_id"],
            team1_competition_id=r["team1_competition_id"],
            team2_competition_id=r["team2_competition_id"],
            date=parse_datetime(r["date"]),
            score_team1=_int(r["score_team1"]),
            score_team2=_int(r["score_team2"]),
            week=_opt_str(r["week"]),
        )

    def _to_values(self, m: Match) -> tuple[Any, ...]:
        return (
            m.id, m.competition_id, m.team1_competition_id, m.team2_competition_id,
            format_datetime(m.date), m.score_team1, m.score_team2, m.week,
        )

    def list_by_competition(self, conn: sqlite3.Connection, competition_id: str) -> list[Match]:
        return self.find_by(conn, "competition_id", competition_id)

    def list_by_competitions(self, conn: sqlite3.Connection, competition_ids: Iterable[str]) -> list[Match]:
        return self.find_in(conn, "competition_id", competition_ids)


# ---------- PlayerCompetitionRepository ----------


class PlayerCompetitionRepository(_Repository[PlayerCompetition]):
    table = "player_competitions"
    columns = (
        "id", "player_id", "team_competition_id", "position", "matches_played",
        "goals", "assists", "cs",
    )

    def _from_row(self, row: sqlite3.Row) -> PlayerCompetition:
        r = dict(row)
        return PlayerCompetition(
            id=r["id"],
            player_id=r["player_id"],
            team_competition_id=r["team_competition_id"],
            position=(r["position"] or "").upper(),
            matches_played=_int(r["matches_played"]),
            goals=_int(r["goals"]),
            assists=_int(r["assists"]),
            cs=_int(r["cs"]),
        )

    def _to_values(self, pc: PlayerCompetition) -> tuple[Any, ...]:
        return (
            pc.id, pc.player_id, pc.team_competition_id, pc.position,
            pc.matches_played, pc.goals, pc.assists, pc.cs,
        )

    def list_by_team_competitions(
        self, conn: sqlite3.Connection, team_competition_ids: Iterable[str]
    ) -> list[PlayerCompetition]:
        return self.find_in(conn, "team_competition_id", team_competition_ids)


# ---------- Elo repositories ----------


class EloPlayerRepository(_Repository[EloPlayer]):
    table = "elo_players"
    columns = ("player_id", "nickname", "discord_id", "elo", "wins", "losses", "streaks")
    key = "player_id"

    def _from_row(self, row: sqlite3.Row) -> EloPlayer:
        r = dict(row)
        return EloPlayer(
            player_id=r["player_id"],
            nickname=r["nickname"],
            discord_id=_opt_str(r["discord_id"]),
            elo=r["elo"],
            wins=r["wins"],
            losses=r["losses"],
            streaks=r["streaks"],
        )

    def _to_values(self, p: EloPlayer) -> tuple[Any, ...]:
        return (p.player_id, p.nickname, p.discord_id, p.elo, p.wins, p.losses, p.streaks)

    def list_by_discord_ids(self, conn: sqlite3.Connection, discord_ids: Iterable[str]) -> list[EloPlayer]:
        return self.find_in(conn, "discord_id", discord_ids)


class EloSeasonRepository(_Repository[EloSeason]):
    table = "elo_seasons"
    columns = ("season_id", "name", "status")
    key = "season_id"

    def _from_row(self, row: sqlite3.Row) -> EloSeason:
        return EloSeason(season_id=row["season_id"], name=row["name"], status=row["status"])

    def _to_values(self, s: EloSeason) -> tuple[Any, ...]:
        return (s.season_id, s.name, s.status)

    def get_active(self, conn: sqlite3.Connection) -> EloSeason | None:
        found = self.find_by(conn, "status", "active")
        return found[0] if found else None


class EloPlayerSeasonRepository(_Repository[EloPlayerSeason]):
    table = "elo_player_seasons"
    columns = ("season_id", "player_id", "discord_id", "elo", "wins", "losses", "streaks")

    def _from_row(self, row: sqlite3.Row) -> EloPlayerSeason:
        r = dict(row)
        return EloPlayerSeason(
            season_id=r["season_id"],
            player_id=r["player_id"],
            discord_id=_opt_str(r["discord_id"]),
            elo=r["elo"],
            wins=r["wins"],
            losses=r["losses"],
            streaks=r["streaks"],
        )

    def _to_values(self, s: EloPlayerSeason) -> tuple[Any, ...]:
        return (s.season_id, s.player_id, s.discord_id, s.elo, s.wins, s.losses, s.streaks)

    def get(self, conn: sqlite3.Connection, season_id: str, player_id: str) -> EloPlayerSeason | None:
        """A player's row in one season; rows are keyed by (season_id, player_id)."""
        found = self._select(conn, "season_id = ? AND player_id = ?", (season_id, player_id))
        return found[0] if found else None

    def list_by_season(self, conn: sqlite3.Connection, season_id: str) -> list[EloPlayerSeason]:
        return self.find_by(conn, "season_id", season_id)
