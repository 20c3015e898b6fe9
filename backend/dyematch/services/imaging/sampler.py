"""
Pixel sampling from raster surfaces.

Coordinates are raster pixels. Anything outside the surface is clamped back
inside, and sample boxes shrink at the edges instead of failing.
"""

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from dyematch.services.colors.conversions import RGBColor, clamp_channel, rgb_to_hex
from .raster import RasterSurface, is_empty


@dataclass(frozen=True)
class SampleRegion:
    """Box to average: center in raster pixels and side length (>= 1)."""
    x: float
    y: float
    size: int = 1


def _clamp(value: int, low: int, high: int) -> int:
    return min(max(low, value), high)


def sample_pixel(surface: Optional[RasterSurface], x: float, y: float) -> Optional[str]:
    """
    Read a single pixel as "#RRGGBB", ignoring alpha.

    Returns:
        Hex color, or None if the surface is missing or zero-sized
    """
    if is_empty(surface):
        return None

    px = _clamp(math.floor(x), 0, surface.width - 1)
    py = _clamp(math.floor(y), 0, surface.height - 1)
    data = surface.read_region(px, py, 1, 1)
    return rgb_to_hex(RGBColor(data[0], data[1], data[2]))


def sample_average(surface: Optional[RasterSurface], x: float, y: float,
                   size: int = 1) -> Optional[str]:
    """
    Average the RGB of a square box centered on (x, y).

    The box origin is clamped into the surface and its extent trimmed to the
    surface edge, so a box near a border covers fewer pixels. Alpha does not
    weight the average. A size of 1 reads exactly the pixel sample_pixel reads.

    Args:
        surface: Surface to read
        x, y: Box center in raster pixels
        size: Side length in pixels (values below 1 are treated as 1)

    Returns:
        Averaged hex color, or None if the surface is missing or zero-sized
    """
    if is_empty(surface):
        return None

    side = max(1, int(size))
    start_x = _clamp(math.floor(x) - side // 2, 0, surface.width - 1)
    start_y = _clamp(math.floor(y) - side // 2, 0, surface.height - 1)
    width = min(side, surface.width - start_x)
    height = min(side, surface.height - start_y)

    data = surface.read_region(start_x, start_y, width, height)
    pixels = np.frombuffer(data, dtype=np.uint8).reshape(-1, 4)
    totals = pixels[:, :3].sum(axis=0, dtype=np.int64)
    count = pixels.shape[0]

    r, g, b = (clamp_channel(total / count) for total in totals)
    return rgb_to_hex(RGBColor(r, g, b))


def sample_region(surface: Optional[RasterSurface], region: SampleRegion) -> Optional[str]:
    """Dispatch a SampleRegion to the point or box sampler."""
    if region.size <= 1:
        return sample_pixel(surface, region.x, region.y)
    return sample_average(surface, region.x, region.y, region.size)
