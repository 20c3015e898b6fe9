"""
Match quality scoring.

Maps a raw RGB distance onto a 0-10 deviance scale (0 = identical) and a
three-tier label for display.
"""

import math
from dataclasses import dataclass

MAX_RGB_DISTANCE = 441.67  # sqrt(3 * 255^2)


@dataclass(frozen=True)
class QualityLabel:
    tier: str
    label: str
    color: str


EXCELLENT = QualityLabel(tier="excellent", label="Excellent", color="#22C55E")
GOOD = QualityLabel(tier="good", label="Good", color="#EAB308")
POOR = QualityLabel(tier="poor", label="Poor", color="#EF4444")


def to_deviance(distance: float) -> float:
    """
    Rescale a distance to [0, 10] in steps of 0.5.

    Args:
        distance: Euclidean RGB distance

    Returns:
        Deviance rating, clamped to [0, 10]
    """
    rating = (distance / MAX_RGB_DISTANCE) * 10
    stepped = math.floor(rating * 2 + 0.5) / 2
    return min(10.0, max(0.0, stepped))


def to_quality_label(deviance: float) -> QualityLabel:
    """Tier a deviance: <=3 excellent, <=6 good, otherwise poor."""
    if deviance <= 3:
        return EXCELLENT
    elif deviance <= 6:
        return GOOD
    else:
        return POOR
