"""
Ranking engine: named leaderboard orderings with fixed tie-break chains.

Every ordering is a stable sort over coerced numbers, so ties that survive the
whole chain keep their input order and re-sorting an ordered list is a no-op.
Lists are cut to their top-N only after sorting.

Views
-----
elo              elo desc
matches          matches played (wins + losses) desc, then elo desc
win-rate         wins / matches played desc (0 when unplayed), then matches played desc
top-scorers      goals desc
top-assists      assists desc
top-clean-sheets clean sheets desc, goalkeepers only
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Sequence

from league_site import config
from league_site.models import (
    EloPlayer,
    EloPlayerSeason,
    Player,
    PlayerCompetition,
    RankingEntry,
    Team,
    TeamCompetition,
)

GOALKEEPER = "GK"

ELO = "elo"
MATCHES = "matches"
WIN_RATE = "win-rate"
TOP_SCORERS = "top-scorers"
TOP_ASSISTS = "top-assists"
TOP_CLEAN_SHEETS = "top-clean-sheets"

ELO_VIEWS: tuple[str, ...] = (ELO, MATCHES, WIN_RATE)
STAT_VIEWS: tuple[str, ...] = (TOP_SCORERS, TOP_ASSISTS, TOP_CLEAN_SHEETS)

_METRICS = ("elo", "wins", "losses", "goals", "assists", "clean_sheets", "streaks")


def coerce_number(value: Any) -> float | int:
    """
    Numeric field read for sorting: ints and finite floats pass through, numeric
    strings are parsed, anything else (None, garbage, NaN, ±inf, bools) is 0.
    """
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else 0
    try:
        text = str(value).strip()
        try:
            return int(text)
        except ValueError:
            f = float(text)
    except (TypeError, ValueError):
        return 0
    return f if math.isfinite(f) else 0


def make_entry(entry_id: str, name: str, **metrics: Any) -> RankingEntry:
    """RankingEntry with every metric coerced; unknown keyword args go to extra."""
    values = {k: coerce_number(metrics.pop(k)) for k in _METRICS if k in metrics}
    position = metrics.pop("position", None)
    team_name = metrics.pop("team_name", None)
    return RankingEntry(
        id=str(entry_id),
        name=name,
        position=position,
        team_name=team_name,
        extra=metrics,
        **values,
    )


def _metric(entry: RankingEntry, metric: str) -> float:
    # entries built by hand may still carry raw values
    return coerce_number(getattr(entry, metric))


def _matches(entry: RankingEntry) -> float:
    return _metric(entry, "wins") + _metric(entry, "losses")


def _rate(entry: RankingEntry) -> float:
    played = _matches(entry)
    return _metric(entry, "wins") / played if played else 0.0


# ---------- Orderings ----------


def rank_by_metric(entries: Iterable[RankingEntry], metric: str = "elo") -> list[RankingEntry]:
    """Metric descending; ties keep input order."""
    return sorted(entries, key=lambda e: -_metric(e, metric))


def rank_by_matches(entries: Iterable[RankingEntry], metric: str = "elo") -> list[RankingEntry]:
    """Matches played descending, then metric descending."""
    return sorted(entries, key=lambda e: (-_matches(e), -_metric(e, metric)))


def rank_by_win_rate(entries: Iterable[RankingEntry]) -> list[RankingEntry]:
    """Win rate descending (0 when unplayed), then matches played descending."""
    return sorted(entries, key=lambda e: (-_rate(e), -_matches(e)))


def goalkeepers_only(entries: Iterable[RankingEntry]) -> list[RankingEntry]:
    return [e for e in entries if (e.position or "").upper() == GOALKEEPER]


_ORDERINGS: dict[str, Callable[[Iterable[RankingEntry]], list[RankingEntry]]] = {
    ELO: lambda es: rank_by_metric(es, "elo"),
    MATCHES: lambda es: rank_by_matches(es, "elo"),
    WIN_RATE: rank_by_win_rate,
    TOP_SCORERS: lambda es: rank_by_metric(es, "goals"),
    TOP_ASSISTS: lambda es: rank_by_metric(es, "assists"),
    TOP_CLEAN_SHEETS: lambda es: rank_by_metric(goalkeepers_only(es), "clean_sheets"),
}


def default_limit(view: str) -> int:
    return config.ELO_LEADERBOARD_SIZE if view in ELO_VIEWS else config.STAT_LEADERBOARD_SIZE


# ---------- Leaderboards ----------


@dataclass(frozen=True)
class RankedEntry:
    rank: int  # 1-based
    entry: RankingEntry

    def to_dict(self) -> dict[str, Any]:
        return {"rank": self.rank, **self.entry.to_dict()}


def order(entries: Iterable[RankingEntry], view: str) -> list[RankingEntry]:
    """Full ordering for a named view (clean sheets drop non-goalkeepers)."""
    try:
        ordering = _ORDERINGS[view]
    except KeyError:
        raise ValueError(f"Unknown ranking view: {view}") from None
    return ordering(entries)


def leaderboard(
    entries: Iterable[RankingEntry],
    view: str,
    limit: int | None = None,
) -> list[RankedEntry]:
    """Sort the whole set by view, then keep the top limit (default per view)."""
    ordered = order(entries, view)
    cut = default_limit(view) if limit is None else limit
    return [RankedEntry(rank=i + 1, entry=e) for i, e in enumerate(ordered[:max(cut, 0)])]


def leaderboards(
    entries: Sequence[RankingEntry],
    views: Iterable[str],
    limit: int | None = None,
) -> dict[str, list[RankedEntry]]:
    """Several views over the same entry set, each sorted independently."""
    return {view: leaderboard(entries, view, limit) for view in views}


# ---------- Entry builders ----------


def elo_entry(
    row: EloPlayer | EloPlayerSeason,
    display_name: str | None = None,
) -> RankingEntry:
    return make_entry(
        row.player_id,
        display_name or row.player_id,
        elo=row.elo,
        wins=row.wins,
        losses=row.losses,
        streaks=row.streaks,
    )


_STAT_FIELDS = ("matches_played", "goals", "assists", "cs")


def _sum_rows(rows: Iterable[PlayerCompetition]) -> dict[str, int]:
    rows = list(rows)
    return {f: sum(coerce_number(getattr(pc, f)) for pc in rows) for f in _STAT_FIELDS}


def player_stat_entries(
    rows: Iterable[PlayerCompetition],
    players: Mapping[str, Player],
    team_names: Mapping[str, str] | None = None,
) -> list[RankingEntry]:
    """
    One entry per player, summed over all of the player's rows.
    team_names maps team_competition_id -> team name; the team shown is the one the
    player made most appearances for. Any GK row makes the player a goalkeeper.
    Rows for unknown players keep the player id as name. Output follows first appearance.
    """
    team_names = team_names or {}
    by_player: dict[str, dict[str, list[PlayerCompetition]]] = {}
    for pc in rows:
        by_player.setdefault(pc.player_id, {}).setdefault(pc.team_competition_id, []).append(pc)

    out: list[RankingEntry] = []
    for player_id, by_team in by_player.items():
        per_team = [(tc_id, team_rows, _sum_rows(team_rows)) for tc_id, team_rows in by_team.items()]
        # stable: equal appearances keep the first team seen
        main_tc_id, main_rows, _ = max(per_team, key=lambda t: t[2]["matches_played"])
        player_rows = [pc for team_rows in by_team.values() for pc in team_rows]
        totals = _sum_rows(player_rows)
        is_goalkeeper = any(pc.position.upper() == GOALKEEPER for pc in player_rows)
        position = GOALKEEPER if is_goalkeeper else next((pc.position for pc in main_rows if pc.position), None)
        player = players.get(player_id)
        out.append(make_entry(
            player_id,
            player.name if player is not None else player_id,
            goals=totals["goals"],
            assists=totals["assists"],
            clean_sheets=totals["cs"],
            position=position,
            team_name=team_names.get(main_tc_id),
            appearances=totals["matches_played"],
        ))
    return out


# ---------- Division standings ----------


@dataclass(frozen=True)
class StandingRow:
    rank: int
    team_competition: TeamCompetition
    team: Team | None

    def to_dict(self) -> dict[str, Any]:
        tc = self.team_competition
        return {
            "rank": self.rank,
            "team_competition_id": tc.id,
            "team_id": tc.team_id,
            "team_name": self.team.name if self.team is not None else None,
            "team_image": self.team.image if self.team is not None else None,
            "played": tc.matches_played,
            "won": tc.matches_won,
            "drawn": tc.matches_draw,
            "lost": tc.matches_lost,
            "goals_for": tc.goals_scored,
            "goals_against": tc.goals_conceded,
            "goal_difference": tc.goal_difference,
            "points": tc.points,
        }


def rank_standings(
    rows: Iterable[TeamCompetition],
    teams: Mapping[str, Team] | None = None,
) -> list[StandingRow]:
    """
    Points desc, then goal difference desc, then goals scored desc, then team name
    ascending (unnamed teams last); remaining ties keep input order.
    """
    teams = teams or {}

    def team_name(tc: TeamCompetition) -> str | None:
        team = teams.get(tc.team_id)
        return team.name if team is not None and team.name else None

    ordered = sorted(
        rows,
        key=lambda tc: (
            -coerce_number(tc.points),
            -(coerce_number(tc.goals_scored) - coerce_number(tc.goals_conceded)),
            -coerce_number(tc.goals_scored),
            team_name(tc) is None,
            (team_name(tc) or "").casefold(),
        ),
    )
    return [StandingRow(rank=i + 1, team_competition=tc, team=teams.get(tc.team_id)) for i, tc in enumerate(ordered)]

