"""
Data models for the league site.
Domain objects only; no persistence or API logic.

Records mirror the league's document collections (competitions, teams, players,
team/player competition links, matches, Elo tables). Derived read models
(SeasonGroup, RankingEntry, Tally) are frozen and rebuilt on every read.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


# ---------- Competition type ----------
class CompetitionType(str, Enum):
    LEAGUE = "league"
    CUP = "cup"
    SUPERCUP = "supercup"
    SUMMER_CUP = "summer_cup"
    NATIONS_CUP = "nations_cup"


KNOWN_TYPES: tuple[str, ...] = tuple(t.value for t in CompetitionType)
# Types that belong to a numbered season; the rest are standalone cups
SEASON_TYPES: frozenset[str] = frozenset({
    CompetitionType.LEAGUE.value, CompetitionType.CUP.value, CompetitionType.SUPERCUP.value,
})
STANDALONE_TYPES: frozenset[str] = frozenset({
    CompetitionType.SUMMER_CUP.value, CompetitionType.NATIONS_CUP.value,
})


# ---------- Competition status (derived at read time) ----------
class CompetitionStatus(str, Enum):
    """Lifecycle derived from dates: upcoming → active → finished."""
    UPCOMING = "upcoming"
    ACTIVE = "active"
    FINISHED = "finished"


def competition_status(
    now: datetime,
    start: datetime | None,
    end: datetime | None,
) -> CompetitionStatus:
    """
    Status of a competition relative to now.
    No start date counts as not started; no end date with a past start counts as active.
    """
    if start is None or start > now:
        return CompetitionStatus.UPCOMING
    if end is not None and end < now:
        return CompetitionStatus.FINISHED
    return CompetitionStatus.ACTIVE


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(d: datetime | None) -> str | None:
    return d.isoformat() if d is not None else None


# ---------- Competition ----------
@dataclass(frozen=True)
class Competition:
    """
    One scored instance of a tournament format (a league division, a cup, ...).
    division is set iff type is league; season is set iff type is league/cup/supercup.
    champion_team_id references a Team; champion_name is a plain display name.
    """
    id: str
    type: str  # CompetitionType value
    name: str = ""
    season: str | None = None
    division: int | None = None
    year: int | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    champion_team_id: str | None = None
    champion_name: str | None = None
    team_count: int = 0
    match_count: int = 0
    image: str = ""

    @property
    def is_season_type(self) -> bool:
        return self.type in SEASON_TYPES

    def status(self, now: datetime) -> CompetitionStatus:
        return competition_status(now, self.start_date, self.end_date)

    def violations(self) -> list[str]:
        """Broken record invariants (empty list when the record is well-formed)."""
        problems: list[str] = []
        if self.type == CompetitionType.LEAGUE:
            if self.division not in (1, 2):
                problems.append("league without division 1 or 2")
        elif self.division is not None:
            problems.append(f"division set on {self.type}")
        if self.is_season_type and not (self.season or "").strip():
            problems.append(f"{self.type} without season")
        if self.type in STANDALONE_TYPES and self.season:
            problems.append(f"season set on {self.type}")
        return problems

    def to_dict(self, now: datetime | None = None) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "name": self.name,
            "season": self.season,
            "division": self.division,
            "year": self.year,
            "start_date": _iso(self.start_date),
            "end_date": _iso(self.end_date),
            "champion_team_id": self.champion_team_id,
            "champion_name": self.champion_name,
            "team_count": self.team_count,
            "match_count": self.match_count,
            "image": self.image,
        }
        if now is not None:
            d["status"] = self.status(now).value
        return d


# ---------- Team / Player ----------
@dataclass(frozen=True)
class Team:
    id: str
    name: str
    country: str = ""
    image: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "country": self.country, "image": self.image}


@dataclass(frozen=True)
class Player:
    id: str
    name: str
    country: str = ""
    avatar: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "country": self.country, "avatar": self.avatar}


# ---------- TeamCompetition (team entered in one competition) ----------
@dataclass(frozen=True)
class TeamCompetition:
    """Links a team to a competition; standings fields are scoped to that competition."""
    id: str
    team_id: str
    competition_id: str
    matches_played: int = 0
    matches_won: int = 0
    matches_draw: int = 0
    matches_lost: int = 0
    goals_scored: int = 0
    goals_conceded: int = 0
    cs: int = 0
    points: int = 0

    @property
    def goal_difference(self) -> int:
        return self.goals_scored - self.goals_conceded


# ---------- Match ----------
@dataclass(frozen=True)
class Match:
    """
    A fixture within one competition between two TeamCompetition participants.
    Scores are final once played.
    """
    id: str
    competition_id: str
    team1_competition_id: str
    team2_competition_id: str
    date: datetime | None = None
    score_team1: int = 0
    score_team2: int = 0
    week: str | None = None


# ---------- PlayerCompetition ----------
@dataclass(frozen=True)
class PlayerCompetition:
    """A player's statistics for one team in one competition. cs = clean sheets."""
    id: str
    player_id: str
    team_competition_id: str
    position: str = ""
    matches_played: int = 0
    goals: int = 0
    assists: int = 0
    cs: int = 0


# ---------- Elo ----------
@dataclass(frozen=True)
class EloPlayer:
    """Overall Elo record. Numeric fields are stored as given; coercion happens at ranking time."""
    player_id: str
    nickname: str | None = None
    discord_id: str | None = None
    elo: Any = 0
    wins: Any = 0
    losses: Any = 0
    streaks: Any = 0


@dataclass(frozen=True)
class EloSeason:
    season_id: str
    name: str | None = None
    status: str | None = None


@dataclass(frozen=True)
class EloPlayerSeason:
    season_id: str
    player_id: str
    discord_id: str | None = None
    elo: Any = 0
    wins: Any = 0
    losses: Any = 0
    streaks: Any = 0


# ---------- SeasonGroup (derived) ----------
class GroupKind(str, Enum):
    SEASON = "season"
    STANDALONE = "standalone"


@dataclass(frozen=True)
class SeasonGroup:
    """
    A season card: either all league/cup/supercup competitions sharing a season id,
    or one standalone cup. Rebuilt from competitions on every read.
    """
    key: str
    title: str
    kind: GroupKind
    competitions: tuple[Competition, ...]
    season: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    image: str = ""

    @property
    def competition_ids(self) -> frozenset[str]:
        return frozenset(c.id for c in self.competitions)


# ---------- Tally (aggregated count with availability) ----------
class TallyState(str, Enum):
    OK = "ok"
    EMPTY = "empty"              # fetched, no related records
    UNAVAILABLE = "unavailable"  # related records were not fetched


UNAVAILABLE_MARKER = "N/A"


@dataclass(frozen=True)
class Tally:
    value: int
    state: TallyState

    @classmethod
    def unavailable(cls) -> Tally:
        return cls(0, TallyState.UNAVAILABLE)

    @property
    def is_available(self) -> bool:
        return self.state == TallyState.OK

    def render(self) -> str:
        return str(self.value) if self.is_available else UNAVAILABLE_MARKER

    def to_dict(self) -> dict[str, Any]:
        return {
            "value": self.value if self.is_available else None,
            "state": self.state.value,
            "display": self.render(),
        }


# ---------- RankingEntry (derived) ----------
@dataclass(frozen=True)
class RankingEntry:
    """
    One participant's metrics for a leaderboard view.
    matches_played counts wins and losses only; draws are not modelled in Elo.
    """
    id: str
    name: str
    elo: float = 0
    wins: float = 0
    losses: float = 0
    goals: float = 0
    assists: float = 0
    clean_sheets: float = 0
    streaks: float = 0
    position: str | None = None
    team_name: str | None = None
    extra: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def matches_played(self) -> float:
        return self.wins + self.losses

    @property
    def win_rate(self) -> float:
        played = self.matches_played
        return self.wins / played if played else 0.0

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "elo": self.elo,
            "wins": self.wins,
            "losses": self.losses,
            "matches_played": self.matches_played,
            "win_rate": round(self.win_rate, 4),
            "goals": self.goals,
            "assists": self.assists,
            "clean_sheets": self.clean_sheets,
            "streaks": self.streaks,
        }
        if self.position is not None:
            d["position"] = self.position
        if self.team_name is not None:
            d["team_name"] = self.team_name
        d.update(self.extra)
        return d
