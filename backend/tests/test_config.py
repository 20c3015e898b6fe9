"""
Unit tests for configuration defaults and validators.
"""

import math

import pytest

from dyematch.config import Config, config


class TestDefaults:
    """Test documented defaults"""

    def test_sampling_defaults(self):
        assert config.DEFAULT_SAMPLE_SIZE == 5
        assert config.validate_sample_size(config.DEFAULT_SAMPLE_SIZE)

    def test_expensive_ids(self):
        assert config.EXPENSIVE_DYE_IDS == frozenset({13114, 13115})


class TestValidators:
    """Test Config validation classmethods"""

    @pytest.mark.parametrize("zoom", [1, 10, 400, 5000])
    def test_zoom_accepted(self, zoom):
        assert Config.validate_zoom(zoom)

    @pytest.mark.parametrize("zoom", [0, -10, math.inf, math.nan])
    def test_zoom_rejected(self, zoom):
        assert not Config.validate_zoom(zoom)

    def test_sample_size_bounds(self):
        assert Config.validate_sample_size(1)
        assert Config.validate_sample_size(Config.MAX_SAMPLE_SIZE)
        assert not Config.validate_sample_size(0)
        assert not Config.validate_sample_size(Config.MAX_SAMPLE_SIZE + 1)

    def test_color_count_bounds(self):
        assert Config.validate_color_count(1)
        assert not Config.validate_color_count(0)
        assert not Config.validate_color_count(Config.MAX_PALETTE_COLORS + 1)
