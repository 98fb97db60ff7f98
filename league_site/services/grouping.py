"""
Season grouping: partition competitions into season cards.

league/cup/supercup share a card per season identifier (key "season-<id>");
summer_cup and nations_cup are standalone cards (key "<type>-<competition id>").
Cards are ordered by start date, newest first; undated cards go last.

A missing season identifier groups under the placeholder "no-season" rather than
failing. A season card spans min(start) to max(end) over all of its competitions.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable

from league_site.logging import get_logger
from league_site.models import (
    KNOWN_TYPES,
    SEASON_TYPES,
    Competition,
    GroupKind,
    SeasonGroup,
)
from league_site.services.formatting import start_year, type_name

log = get_logger("grouping")

SEASON_KEY_PREFIX = "season-"
NO_SEASON = "no-season"
NO_SEASON_TITLE = "No Season"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def season_identifier(competition: Competition) -> str:
    """Season id of a season-type competition, or the placeholder when absent."""
    raw = (competition.season or "").strip()
    return raw or NO_SEASON


def season_title(identifier: str) -> str:
    """'Season 3' for numeric ids (leading zeros dropped), 'Season <raw>' otherwise."""
    if identifier == NO_SEASON:
        return NO_SEASON_TITLE
    try:
        return f"Season {int(identifier)}"
    except ValueError:
        return f"Season {identifier}"


def group_key(competition: Competition) -> str:
    if competition.type in SEASON_TYPES:
        return f"{SEASON_KEY_PREFIX}{season_identifier(competition)}"
    return f"{competition.type}-{competition.id}"


def parse_group_key(key: str) -> tuple[GroupKind, str]:
    """
    Split a group key into (kind, identifier): season id for season cards,
    competition id for standalone cards. Raises ValueError for unknown shapes.
    """
    if key.startswith(SEASON_KEY_PREFIX) and len(key) > len(SEASON_KEY_PREFIX):
        return GroupKind.SEASON, key[len(SEASON_KEY_PREFIX):]
    for ctype in KNOWN_TYPES:
        prefix = f"{ctype}-"
        if ctype not in SEASON_TYPES and key.startswith(prefix) and len(key) > len(prefix):
            return GroupKind.STANDALONE, key[len(prefix):]
    raise ValueError(f"Not a season group key: {key}")


def _standalone_title(competition: Competition) -> str:
    year = start_year(competition)
    name = type_name(competition.type)
    return f"{name} {year}" if year else name


def _min_date(dates: Iterable[datetime | None]) -> datetime | None:
    present = [d for d in dates if d is not None]
    return min(present) if present else None


def _max_date(dates: Iterable[datetime | None]) -> datetime | None:
    present = [d for d in dates if d is not None]
    return max(present) if present else None


def _first_image(competitions: Iterable[Competition]) -> str:
    for c in competitions:
        if c.image:
            return c.image
    return ""


def _build_season_group(key: str, identifier: str, members: list[Competition]) -> SeasonGroup:
    return SeasonGroup(
        key=key,
        title=season_title(identifier),
        kind=GroupKind.SEASON,
        competitions=tuple(members),
        season=identifier,
        start_date=_min_date(c.start_date for c in members),
        end_date=_max_date(c.end_date for c in members),
        image=_first_image(members),
    )


def _build_standalone_group(key: str, competition: Competition) -> SeasonGroup:
    return SeasonGroup(
        key=key,
        title=_standalone_title(competition),
        kind=GroupKind.STANDALONE,
        competitions=(competition,),
        start_date=competition.start_date,
        end_date=competition.end_date,
        image=competition.image,
    )


def group_competitions_by_key(competitions: Iterable[Competition]) -> dict[str, SeasonGroup]:
    """
    Map group key -> SeasonGroup. Every competition of a known type lands in exactly
    one group; unknown types are skipped. Dict order follows first appearance.
    """
    season_members: dict[str, list[Competition]] = {}
    season_ids: dict[str, str] = {}
    order: list[str] = []
    standalone: dict[str, Competition] = {}

    for comp in competitions:
        if comp.type not in KNOWN_TYPES:
            log.warning("competition_type_skipped", competition_id=comp.id, type=comp.type)
            continue
        problems = comp.violations()
        if problems:
            log.warning("competition_invariant_violated", competition_id=comp.id, problems=problems)
        key = group_key(comp)
        if comp.type in SEASON_TYPES:
            if key not in season_members:
                season_members[key] = []
                season_ids[key] = season_identifier(comp)
                order.append(key)
            season_members[key].append(comp)
        else:
            if key not in standalone:
                order.append(key)
            standalone[key] = comp

    groups: dict[str, SeasonGroup] = {}
    for key in order:
        if key in season_members:
            groups[key] = _build_season_group(key, season_ids[key], season_members[key])
        else:
            groups[key] = _build_standalone_group(key, standalone[key])
    return groups


def _sort_date(group: SeasonGroup) -> datetime:
    d = group.start_date
    if d is None:
        return _EPOCH
    # naive datetimes are read as UTC
    return d if d.tzinfo is not None else d.replace(tzinfo=timezone.utc)


def sort_groups(groups: Iterable[SeasonGroup]) -> list[SeasonGroup]:
    """Newest start first; undated groups count as the epoch. Stable for equal dates."""
    return sorted(groups, key=_sort_date, reverse=True)


def group_competitions(competitions: Iterable[Competition]) -> list[SeasonGroup]:
    """Season cards for the given competitions, newest first."""
    return sort_groups(group_competitions_by_key(competitions).values())
