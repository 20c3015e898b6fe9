"""
Dye exclusion filters.

A filter is a predicate over a PaletteEntry that returns True when the entry
stays eligible. Filters are built once from configuration and combined with
logical AND; none of them look at match history.
"""

from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence

from .palette import PaletteEntry

ExclusionFilter = Callable[[PaletteEntry], bool]

COSMIC_SOURCES = ("Cosmic Exploration", "Cosmic Fortunes")


def exclude_name_containing(fragment: str) -> ExclusionFilter:
    """Drop dyes whose name contains the fragment (case-sensitive)."""
    def keep(entry: PaletteEntry) -> bool:
        return fragment not in entry.name
    return keep


def exclude_name_prefix(prefix: str) -> ExclusionFilter:
    """Drop dyes whose name starts with the prefix, ignoring case."""
    lowered = prefix.lower()

    def keep(entry: PaletteEntry) -> bool:
        return not entry.name.lower().startswith(lowered)
    return keep


def exclude_tags(*tags: str) -> ExclusionFilter:
    """Drop dyes carrying any of the given tags."""
    banned = frozenset(tags)

    def keep(entry: PaletteEntry) -> bool:
        return banned.isdisjoint(entry.tags)
    return keep


def exclude_ids(ids: Iterable[int]) -> ExclusionFilter:
    """Drop dyes whose id or item id is in the set."""
    banned = frozenset(ids)

    def keep(entry: PaletteEntry) -> bool:
        return entry.id not in banned and entry.item_id not in banned
    return keep


def is_eligible(entry: PaletteEntry, filters: Sequence[ExclusionFilter] = ()) -> bool:
    """True when the entry survives every filter."""
    return all(keep(entry) for keep in filters)


def apply_filters(entries: Iterable[PaletteEntry],
                  filters: Sequence[ExclusionFilter] = ()) -> List[PaletteEntry]:
    return [entry for entry in entries if is_eligible(entry, filters)]


@dataclass(frozen=True)
class FilterConfig:
    """Boolean exclusion switches as exposed to users."""
    exclude_metallic: bool = False
    exclude_pastel: bool = False
    exclude_dark: bool = False
    exclude_cosmic: bool = False
    exclude_expensive: bool = False


def build_filters(filter_config: Optional[FilterConfig],
                  expensive_ids: Iterable[int] = ()) -> List[ExclusionFilter]:
    """
    Resolve boolean switches into predicates.

    Args:
        filter_config: Switches; None means no filtering
        expensive_ids: Dye ids dropped by exclude_expensive

    Returns:
        List of predicates to pass to the matcher
    """
    if filter_config is None:
        return []

    filters: List[ExclusionFilter] = []
    if filter_config.exclude_metallic:
        filters.append(exclude_name_containing("Metallic"))
    if filter_config.exclude_pastel:
        filters.append(exclude_name_containing("Pastel"))
    if filter_config.exclude_dark:
        filters.append(exclude_name_prefix("Dark"))
    if filter_config.exclude_cosmic:
        filters.append(exclude_tags(*COSMIC_SOURCES))
    if filter_config.exclude_expensive:
        filters.append(exclude_ids(expensive_ids))
    return filters
