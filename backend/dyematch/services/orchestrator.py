"""
DyeMatch Match Orchestrator

Coordinates palette lookups, exclusion filters, matching, harmony generation
and quality scoring into the reports returned by the API.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union

from dyematch.config import config
from dyematch.services.colors.conversions import HSVColor, RGBColor, rgb_to_hex, rgb_to_hsv
from dyematch.services.colors.filters import ExclusionFilter, FilterConfig, build_filters
from dyematch.services.colors.harmony import HarmonyResult, match_harmony, normalize_rule
from dyematch.services.colors.matching import MatchResult, as_rgb, find_within_distance, match_closest
from dyematch.services.colors.palette import Palette, load_palette
from dyematch.services.colors.quality import QualityLabel, to_deviance, to_quality_label
from dyematch.utils.logging import get_logger
from dyematch.utils.metrics import get_metrics


@dataclass
class ScoredMatch:
    """A match plus its deviance score and quality tier."""
    match: MatchResult
    deviance: float
    quality: QualityLabel


@dataclass
class ColorMatchReport:
    query_hex: str
    query_hsv: HSVColor
    best: Optional[ScoredMatch] = None
    similar: List[ScoredMatch] = field(default_factory=list)


@dataclass
class HarmonyReport:
    rule: str
    rule_recognized: bool
    base_hex: str
    base: Optional[ScoredMatch] = None
    matches: List[ScoredMatch] = field(default_factory=list)


def score(match: MatchResult) -> ScoredMatch:
    deviance = to_deviance(match.distance)
    return ScoredMatch(match=match, deviance=deviance, quality=to_quality_label(deviance))


class MatchOrchestrator:
    """Entry point for color matching against one loaded palette."""

    def __init__(self, palette: Optional[Palette] = None,
                 expensive_ids: Optional[Sequence[int]] = None):
        self.palette = palette if palette is not None else load_palette(config.PALETTE_PATH)
        self.expensive_ids = frozenset(
            expensive_ids if expensive_ids is not None else config.EXPENSIVE_DYE_IDS
        )
        self.logger = get_logger()
        self.metrics = get_metrics()

    def filters_for(self, filter_config: Optional[FilterConfig]) -> List[ExclusionFilter]:
        return build_filters(filter_config, self.expensive_ids)

    def match_color(self, color: Union[RGBColor, str],
                    filter_config: Optional[FilterConfig] = None,
                    radius: Optional[float] = None,
                    limit: Optional[int] = None) -> Optional[ColorMatchReport]:
        """
        Match a color to the closest dye and list similar dyes.

        Args:
            color: Query color (RGBColor or hex)
            filter_config: Exclusion switches
            radius: Similar-dye distance cutoff (default from config)
            limit: Maximum similar dyes (default from config)

        Returns:
            ColorMatchReport (best is None when every dye was filtered out),
            or None when the color is malformed
        """
        rgb = as_rgb(color)
        if rgb is None:
            self.metrics.increment("match_invalid_color_total")
            return None

        radius = config.SIMILAR_RADIUS if radius is None else radius
        limit = config.SIMILAR_LIMIT if limit is None else limit
        filters = self.filters_for(filter_config)

        self.metrics.increment("match_requests_total")
        with self.metrics.timed("match"):
            best = match_closest(rgb, self.palette, filters)
            similar = find_within_distance(rgb, self.palette, radius, limit, filters)

        report = ColorMatchReport(query_hex=rgb_to_hex(rgb), query_hsv=rgb_to_hsv(rgb))
        if best is None:
            self.metrics.increment("match_no_result_total")
            self.logger.info("No eligible dye for color", extra={"hex": report.query_hex})
            return report

        report.best = score(best)
        report.similar = [score(result) for result in similar]
        self.metrics.record_deviance(report.best.deviance)
        self.logger.debug(
            "Matched color",
            extra={"hex": report.query_hex, "dye": best.entry.name, "distance": round(best.distance, 2)}
        )
        return report

    def harmony(self, base: Union[RGBColor, str], rule: str,
                filter_config: Optional[FilterConfig] = None) -> Optional[HarmonyReport]:
        """
        Build a harmony set around a base color.

        Unknown rule names fall back to the base color only and are reported
        with rule_recognized=False.

        Returns:
            HarmonyReport, or None when the base color is malformed
        """
        rgb = as_rgb(base)
        if rgb is None:
            self.metrics.increment("harmony_invalid_color_total")
            return None

        resolved = normalize_rule(rule)
        if resolved is None:
            self.logger.warning("Unknown harmony rule, returning base only", extra={"rule": rule})

        self.metrics.increment("harmony_requests_total")
        with self.metrics.timed("harmony"):
            result: HarmonyResult = match_harmony(
                rgb_to_hsv(rgb), rule, self.palette, self.filters_for(filter_config)
            )

        return HarmonyReport(
            rule=resolved.value if resolved else str(rule),
            rule_recognized=resolved is not None,
            base_hex=rgb_to_hex(rgb),
            base=score(result.base_match) if result.base_match else None,
            matches=[score(match) for match in result.matches],
        )

    def harmony_for_dye(self, dye_id: int, rule: str,
                        filter_config: Optional[FilterConfig] = None) -> Optional[HarmonyReport]:
        """Harmony around a palette dye; None if the id is unknown."""
        entry = self.palette.get_by_id(dye_id)
        if entry is None:
            return None
        return self.harmony(entry.rgb, rule, filter_config)



# Global orchestrator instance
_orchestrator: Optional[MatchOrchestrator] = None


def get_orchestrator() -> MatchOrchestrator:
    """Get or create the global orchestrator (loads the palette once)."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = MatchOrchestrator()
    return _orchestrator
