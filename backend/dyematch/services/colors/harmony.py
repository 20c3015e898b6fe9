"""
Color Harmony Engine

Generates harmony sets from a base color using fixed hue offsets, then snaps
each ideal target onto the closest real dye. Only the hue rotates; saturation
and value are carried over from the base unchanged.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .conversions import HSVColor, hsv_to_rgb
from .filters import ExclusionFilter
from .matching import MatchResult, match_closest
from .palette import PaletteEntry


class HarmonyRule(str, Enum):
    COMPLEMENTARY = "complementary"
    ANALOGOUS = "analogous"
    TRIADIC = "triadic"
    SPLIT_COMPLEMENTARY = "split-complementary"
    TETRADIC = "tetradic"
    SQUARE = "square"


HARMONY_OFFSETS: Dict[HarmonyRule, Tuple[int, ...]] = {
    HarmonyRule.COMPLEMENTARY: (180,),
    HarmonyRule.ANALOGOUS: (30, -30),
    HarmonyRule.TRIADIC: (120, 240),
    HarmonyRule.SPLIT_COMPLEMENTARY: (150, 210),
    HarmonyRule.TETRADIC: (60, 180, 240),
    HarmonyRule.SQUARE: (90, 180, 270),
}


@dataclass
class HarmonyResult:
    """Matched dyes for one harmony rule."""
    rule: Optional[HarmonyRule]
    base: HSVColor
    base_match: Optional[MatchResult] = None
    matches: List[MatchResult] = field(default_factory=list)


def normalize_rule(name: Union[str, HarmonyRule, None]) -> Optional[HarmonyRule]:
    """Resolve a user supplied rule name (case-insensitive); None if unknown."""
    if isinstance(name, HarmonyRule):
        return name
    if not isinstance(name, str):
        return None
    try:
        return HarmonyRule(name.strip().lower())
    except ValueError:
        return None


def rotate_hue(h: float, degrees: float) -> float:
    """Rotate a hue in degrees, wrapping into [0, 360)."""
    return (h + degrees) % 360


def harmony_offsets(rule: Union[str, HarmonyRule, None]) -> Tuple[int, ...]:
    """Offsets for a rule; unknown rules have none."""
    resolved = normalize_rule(rule)
    if resolved is None:
        return ()
    return HARMONY_OFFSETS[resolved]


def generate_harmony(base: HSVColor, rule: Union[str, HarmonyRule, None]) -> List[HSVColor]:
    """
    Build the ideal harmony colors for a base color.

    Args:
        base: Base color in HSV
        rule: Harmony rule name

    Returns:
        [base, *targets]; an unrecognized rule yields just [base]
    """
    colors = [base]
    for offset in harmony_offsets(rule):
        colors.append(HSVColor(h=rotate_hue(base.h, offset), s=base.s, v=base.v))
    return colors


def match_harmony(base: HSVColor,
                  rule: Union[str, HarmonyRule, None],
                  palette: Iterable[PaletteEntry],
                  filters: Sequence[ExclusionFilter] = ()) -> HarmonyResult:
    """
    Snap each ideal harmony color onto the closest eligible dye.

    Args:
        base: Base color in HSV
        rule: Harmony rule name (case-insensitive)
        palette: Dyes to match against
        filters: Exclusion predicates

    Returns:
        HarmonyResult with one MatchResult per target hue. A target with no
        eligible dye is left out.
    """
    entries = list(palette)
    ideal_colors = generate_harmony(base, rule)
    result = HarmonyResult(rule=normalize_rule(rule), base=base)

    for index, ideal in enumerate(ideal_colors):
        target_rgb = hsv_to_rgb(ideal)
        match = match_closest(target_rgb, entries, filters)
        if match is None:
            continue
        annotated = MatchResult(
            entry=match.entry,
            distance=match.distance,
            ideal_hsv=ideal,
            matched_hsv=match.entry.hsv,
        )
        if index == 0:
            result.base_match = annotated
        else:
            result.matches.append(annotated)

    return result
