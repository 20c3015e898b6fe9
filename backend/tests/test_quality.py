"""
Unit tests for match quality scoring.
"""

import pytest

from dyematch.services.colors.quality import (
    EXCELLENT, GOOD, MAX_RGB_DISTANCE, POOR, to_deviance, to_quality_label
)


class TestDeviance:
    """Test distance to deviance rescaling"""

    def test_endpoints(self):
        assert to_deviance(0) == 0
        assert to_deviance(MAX_RGB_DISTANCE) == 10

    def test_clamped(self):
        assert to_deviance(1000) == 10
        assert to_deviance(-5) == 0

    def test_rounds_to_nearest_half(self):
        assert to_deviance(8.83) == 0.0     # rating ~0.2
        assert to_deviance(13.25) == 0.5    # rating ~0.3
        assert to_deviance(44.167) == 1.0   # rating ~1.0

    def test_multiples_of_half_and_monotone(self):
        previous = -1.0
        for step in range(0, 450, 3):
            deviance = to_deviance(step)
            assert (deviance * 2) == int(deviance * 2)
            assert 0 <= deviance <= 10
            assert deviance >= previous
            previous = deviance


class TestQualityLabel:
    """Test tier boundaries"""

    @pytest.mark.parametrize("deviance,expected", [
        (0, EXCELLENT), (3.0, EXCELLENT), (3.5, GOOD),
        (6.0, GOOD), (6.5, POOR), (10, POOR),
    ])
    def test_boundaries_belong_to_better_tier(self, deviance, expected):
        assert to_quality_label(deviance) == expected

    def test_labels_carry_display_colors(self):
        assert EXCELLENT.tier == "excellent"
        assert GOOD.tier == "good"
        assert POOR.tier == "poor"
        assert all(label.color.startswith("#") for label in (EXCELLENT, GOOD, POOR))
