"""
Nearest-dye matching with Euclidean RGB distance.

Palettes are small (tens to low hundreds of dyes) so every query is a plain
linear scan. When two dyes sit at exactly the same distance the one reached
first in palette order wins.
"""

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Union

from .conversions import HSVColor, RGBColor, hex_to_rgb
from .filters import ExclusionFilter, is_eligible
from .palette import PaletteEntry

ColorInput = Union[RGBColor, str]


@dataclass(frozen=True)
class MatchResult:
    """A matched dye and how far it is from the query color."""
    entry: PaletteEntry
    distance: float
    ideal_hsv: Optional[HSVColor] = None
    matched_hsv: Optional[HSVColor] = None


def color_distance(a: RGBColor, b: RGBColor) -> float:
    """Euclidean distance in RGB space, in [0, ~441.67]."""
    dr = a.r - b.r
    dg = a.g - b.g
    db = a.b - b.b
    return math.sqrt(dr * dr + dg * dg + db * db)


def as_rgb(color: ColorInput) -> Optional[RGBColor]:
    """Accept an RGBColor or a hex string; None for malformed hex."""
    if isinstance(color, RGBColor):
        return color
    return hex_to_rgb(color)


def find_closest(target: ColorInput,
                 palette: Iterable[PaletteEntry],
                 filters: Sequence[ExclusionFilter] = ()) -> Optional[PaletteEntry]:
    """
    Find the eligible dye nearest to the target color.

    Args:
        target: Query color (RGBColor or hex string)
        palette: Dyes in iteration order
        filters: Predicates every candidate must pass

    Returns:
        Closest PaletteEntry, or None if the target is malformed or no dye
        survives filtering
    """
    match = match_closest(target, palette, filters)
    return match.entry if match else None


def match_closest(target: ColorInput,
                  palette: Iterable[PaletteEntry],
                  filters: Sequence[ExclusionFilter] = ()) -> Optional[MatchResult]:
    """Same as find_closest but keeps the distance."""
    rgb = as_rgb(target)
    if rgb is None:
        return None

    closest: Optional[PaletteEntry] = None
    min_distance = math.inf
    for entry in palette:
        if not is_eligible(entry, filters):
            continue
        distance = color_distance(rgb, entry.rgb)
        # Strict comparison keeps the first dye reached on ties
        if distance < min_distance:
            min_distance = distance
            closest = entry

    if closest is None:
        return None
    return MatchResult(entry=closest, distance=min_distance)


def find_within_distance(target: ColorInput,
                         palette: Iterable[PaletteEntry],
                         radius: float,
                         limit: Optional[int] = None,
                         filters: Sequence[ExclusionFilter] = ()) -> List[MatchResult]:
    """
    Collect every eligible dye within `radius` of the target.

    Args:
        target: Query color (RGBColor or hex string)
        palette: Dyes in iteration order
        radius: Maximum distance (inclusive)
        limit: Keep at most this many results (None keeps all)
        filters: Predicates every candidate must pass

    Returns:
        MatchResults sorted by ascending distance; equal distances keep
        palette order
    """
    rgb = as_rgb(target)
    if rgb is None:
        return []

    results = []
    for entry in palette:
        if not is_eligible(entry, filters):
            continue
        distance = color_distance(rgb, entry.rgb)
        if distance <= radius:
            results.append(MatchResult(entry=entry, distance=distance))

    results.sort(key=lambda result: result.distance)
    if limit is not None:
        results = results[:max(0, limit)]
    return results
