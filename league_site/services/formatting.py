"""
Display labels for competitions: names, tier tags, link order and highlight keys.
"""
from __future__ import annotations

from typing import Iterable

from league_site.models import Competition, CompetitionType

_TYPE_NAMES: dict[str, str] = {
    CompetitionType.LEAGUE.value: "League",
    CompetitionType.CUP.value: "Cup",
    CompetitionType.SUPERCUP.value: "Supercup",
    CompetitionType.SUMMER_CUP.value: "Summer Cup",
    CompetitionType.NATIONS_CUP.value: "Nations Cup",
}

# Champion tag per competition kind (league split by division)
_TIER_LABELS: dict[str, str] = {
    "div1": "1st tier",
    "div2": "2nd tier",
    CompetitionType.CUP.value: "cup",
    CompetitionType.SUPERCUP.value: "supercup",
    CompetitionType.SUMMER_CUP.value: "summer",
    CompetitionType.NATIONS_CUP.value: "nations",
}

# Order of competition links on a season card
_LINK_ORDER: dict[str, int] = {
    "div1": 1,
    "div2": 2,
    CompetitionType.CUP.value: 3,
    CompetitionType.SUPERCUP.value: 4,
    CompetitionType.SUMMER_CUP.value: 5,
    CompetitionType.NATIONS_CUP.value: 6,
}
_UNKNOWN_ORDER = 99


def type_name(competition_type: str) -> str:
    return _TYPE_NAMES.get(competition_type, competition_type)


def highlight_key(competition: Competition) -> str:
    """div1/div2 for league divisions, the type otherwise."""
    if competition.type == CompetitionType.LEAGUE:
        return f"div{competition.division}" if competition.division is not None else "league"
    return competition.type


def tier_label(competition: Competition) -> str | None:
    return _TIER_LABELS.get(highlight_key(competition))


def start_year(competition: Competition) -> int | None:
    return competition.start_date.year if competition.start_date is not None else None


def competition_label(competition: Competition) -> str:
    """
    Short name shown next to matches and stats:
    "Season 3, div 1", "Season 3, Cup", "Summer Cup 2024", ...
    """
    season = (competition.season or "").strip()
    year = start_year(competition)
    ctype = competition.type
    if ctype == CompetitionType.LEAGUE:
        if season and competition.division:
            return f"Season {season}, div {competition.division}"
        if season:
            return f"Season {season}"
    elif ctype in (CompetitionType.CUP, CompetitionType.SUPERCUP):
        name = type_name(ctype)
        return f"Season {season}, {name}" if season else name
    elif ctype in (CompetitionType.SUMMER_CUP, CompetitionType.NATIONS_CUP):
        name = type_name(ctype)
        return f"{name} {year}" if year else name
    return competition.name or "Competition"


def order_competitions(competitions: Iterable[Competition]) -> list[Competition]:
    """div1, div2, cup, supercup, summer cup, nations cup; unknown kinds last. Stable."""
    return sorted(competitions, key=lambda c: _LINK_ORDER.get(highlight_key(c), _UNKNOWN_ORDER))
