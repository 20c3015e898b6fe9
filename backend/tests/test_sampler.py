"""
Unit tests for pixel sampling.

Tests single-pixel reads, box averaging, clamping and edge shrinking.
"""

import numpy as np
import pytest

from dyematch.services.imaging.raster import ImageSurface
from dyematch.services.imaging.sampler import (
    SampleRegion, sample_average, sample_pixel, sample_region
)


def uniform(color, size=10, alpha=255):
    rgba = np.zeros((size, size, 4), dtype=np.uint8)
    rgba[:, :] = (*color, alpha)
    return ImageSurface(rgba)


class TestSamplePixel:
    """Test single-pixel sampling"""

    def test_reads_pixel(self, quadrant_surface):
        assert sample_pixel(quadrant_surface, 5, 5) == "#FF0000"
        assert sample_pixel(quadrant_surface, 25, 5) == "#00FF00"
        assert sample_pixel(quadrant_surface, 5, 25) == "#0000FF"
        assert sample_pixel(quadrant_surface, 25, 25) == "#FFFFFF"

    def test_floors_fractional_coordinates(self, quadrant_surface):
        assert sample_pixel(quadrant_surface, 19.9, 19.9) == "#FF0000"
        assert sample_pixel(quadrant_surface, 20.0, 19.9) == "#00FF00"

    def test_clamps_out_of_bounds(self, quadrant_surface):
        assert sample_pixel(quadrant_surface, -5, -5) == "#FF0000"
        assert sample_pixel(quadrant_surface, 100, 100) == "#FFFFFF"

    def test_ignores_alpha(self):
        assert sample_pixel(uniform((255, 0, 0), alpha=0), 1, 1) == "#FF0000"

    def test_missing_or_empty_surface(self):
        assert sample_pixel(None, 0, 0) is None
        assert sample_pixel(ImageSurface(np.zeros((0, 0, 4), dtype=np.uint8)), 0, 0) is None


class TestSampleAverage:
    """Test box averaging"""

    def test_uniform_color(self):
        assert sample_average(uniform((255, 0, 0)), 5, 5, 5) == "#FF0000"

    def test_size_one_matches_pixel(self, quadrant_surface):
        for x, y in [(0, 0), (19.5, 19.5), (20, 20), (39, 0), (12.3, 31.9)]:
            assert sample_average(quadrant_surface, x, y, 1) == sample_pixel(quadrant_surface, x, y)

    def test_box_straddling_quadrants(self, quadrant_surface):
        # Pixels (19..20, 19..20): red, green, blue, white
        assert sample_average(quadrant_surface, 20, 20, 2) == "#808080"

    def test_box_shrinks_at_edge(self):
        rgba = np.full((10, 10, 4), 255, dtype=np.uint8)
        rgba[:, 0, :3] = 0
        surface = ImageSurface(rgba)
        # Columns 0..2 are read: one black, two white
        assert sample_average(surface, 0, 5, 3) == "#AAAAAA"

    def test_box_larger_than_surface(self):
        assert sample_average(uniform((10, 20, 30), size=4), 2, 2, 64) == "#0A141E"

    def test_alpha_does_not_weight(self):
        rgba = np.zeros((1, 2, 4), dtype=np.uint8)
        rgba[0, 0] = (200, 0, 0, 255)
        rgba[0, 1] = (0, 0, 0, 0)
        assert sample_average(ImageSurface(rgba), 1, 0, 2) == "#640000"

    def test_missing_surface(self):
        assert sample_average(None, 0, 0, 5) is None


class TestSampleRegion:
    """Test region dispatch"""

    def test_point_and_box(self, quadrant_surface):
        assert sample_region(quadrant_surface, SampleRegion(25, 25)) == "#FFFFFF"
        assert sample_region(quadrant_surface, SampleRegion(20, 20, size=2)) == "#808080"


class TestImageSurface:
    """Test the raster contract"""

    def test_rgb_input_gets_opaque_alpha(self):
        surface = ImageSurface(np.zeros((2, 3, 3), dtype=np.uint8))
        assert (surface.width, surface.height) == (3, 2)
        assert surface.pixels[:, :, 3].min() == 255

    def test_read_region_is_row_major_rgba(self, quadrant_surface):
        data = quadrant_surface.read_region(19, 0, 2, 1)
        assert list(data) == [255, 0, 0, 255, 0, 255, 0, 255]

    def test_rejects_bad_shapes(self):
        with pytest.raises(ValueError):
            ImageSurface(np.zeros((4, 4), dtype=np.uint8))
