"""
Per-group aggregation: distinct team count, match count, champion lines, status.

Counts are Tallies, never bare zeros: related records passed as None were not
fetched (unavailable); fetched but absent for the group is empty.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Mapping, Sequence

from league_site.models import (
    Competition,
    CompetitionStatus,
    Match,
    SeasonGroup,
    Tally,
    TallyState,
    Team,
    TeamCompetition,
    competition_status,
    utcnow,
)
from league_site.services.formatting import (
    competition_label,
    highlight_key,
    order_competitions,
    tier_label,
    type_name,
)

NO_CHAMPION = "No champion"


@dataclass(frozen=True)
class ChampionLine:
    competition_id: str
    tier: str | None
    champion: str

    def to_dict(self) -> dict[str, Any]:
        return {"competition_id": self.competition_id, "tier": self.tier, "champion": self.champion}


@dataclass(frozen=True)
class GroupSummary:
    """A SeasonGroup with its derived totals, ready for display."""
    group: SeasonGroup
    team_count: Tally
    match_count: Tally
    status: CompetitionStatus
    champions: tuple[ChampionLine, ...]

    def to_dict(self, now: datetime | None = None) -> dict[str, Any]:
        g = self.group
        return {
            "key": g.key,
            "title": g.title,
            "kind": g.kind.value,
            "season": g.season,
            "start_date": g.start_date.isoformat() if g.start_date else None,
            "end_date": g.end_date.isoformat() if g.end_date else None,
            "image": g.image,
            "status": self.status.value,
            "team_count": self.team_count.to_dict(),
            "match_count": self.match_count.to_dict(),
            "champions": [c.to_dict() for c in self.champions],
            "competitions": [competition_link(g, c, now) for c in order_competitions(g.competitions)],
        }


def competition_link(group: SeasonGroup, competition: Competition, now: datetime | None = None) -> dict[str, Any]:
    """Link to one member competition from its season card."""
    d: dict[str, Any] = {
        "id": competition.id,
        "type": competition.type,
        "type_name": type_name(competition.type),
        "division": competition.division,
        "label": competition_label(competition),
        "highlight": highlight_key(competition),
        "href": f"/seasons/{group.key}?highlight={highlight_key(competition)}",
    }
    if now is not None:
        d["status"] = competition.status(now).value
    return d


def _tally(count: int) -> Tally:
    return Tally(count, TallyState.OK if count > 0 else TallyState.EMPTY)


def count_distinct_teams(
    competition_ids: Iterable[str],
    team_competitions: Sequence[TeamCompetition] | None,
) -> Tally:
    """Distinct team ids entered in any of the competitions (a team in two divisions counts once)."""
    if team_competitions is None:
        return Tally.unavailable()
    members = set(competition_ids)
    teams = {tc.team_id for tc in team_competitions if tc.competition_id in members and tc.team_id}
    return _tally(len(teams))


def count_matches(
    competition_ids: Iterable[str],
    matches: Sequence[Match] | None,
) -> Tally:
    """Matches played in any of the competitions."""
    if matches is None:
        return Tally.unavailable()
    members = set(competition_ids)
    return _tally(sum(1 for m in matches if m.competition_id in members))


def champion_lines(
    competitions: Iterable[Competition],
    teams: Mapping[str, Team] | None = None,
) -> tuple[ChampionLine, ...]:
    """
    One line per competition that has a champion reference or name, in link order.
    The referenced team's name wins over the stored champion name.
    """
    teams = teams or {}
    lines: list[ChampionLine] = []
    for c in order_competitions(competitions):
        if not c.champion_team_id and not c.champion_name:
            continue
        team = teams.get(c.champion_team_id) if c.champion_team_id else None
        name = (team.name if team is not None else None) or c.champion_name or NO_CHAMPION
        lines.append(ChampionLine(competition_id=c.id, tier=tier_label(c), champion=name))
    return tuple(lines)


def aggregate_group(
    group: SeasonGroup,
    team_competitions: Sequence[TeamCompetition] | None,
    matches: Sequence[Match] | None,
    teams: Mapping[str, Team] | None = None,
    now: datetime | None = None,
) -> GroupSummary:
    """Totals for one group. team_competitions/matches may hold rows for other groups too."""
    now = now or utcnow()
    ids = group.competition_ids
    return GroupSummary(
        group=group,
        team_count=count_distinct_teams(ids, team_competitions),
        match_count=count_matches(ids, matches),
        status=competition_status(now, group.start_date, group.end_date),
        champions=champion_lines(group.competitions, teams),
    )


def aggregate_groups(
    groups: Iterable[SeasonGroup],
    team_competitions: Sequence[TeamCompetition] | None,
    matches: Sequence[Match] | None,
    teams: Mapping[str, Team] | None = None,
    now: datetime | None = None,
) -> list[GroupSummary]:
    """aggregate_group over an ordered list; order is kept."""
    now = now or utcnow()
    return [aggregate_group(g, team_competitions, matches, teams, now) for g in groups]
