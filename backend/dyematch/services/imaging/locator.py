"""
Marker placement for extracted palette colors.

For each extracted color, find a pixel in the image that looks like it so the
UI can draw an indicator there. The scan runs on a stride chosen to visit
roughly the same number of points regardless of image size. Positions are
only used for drawing; matching never depends on them.
"""

import math
from typing import List, NamedTuple, Optional, Sequence

import numpy as np

from dyematch.config import config
from dyematch.services.colors.conversions import RGBColor
from .raster import ImageSurface, RasterSurface, is_empty


class Position(NamedTuple):
    x: int
    y: int


def scan_stride(width: int, height: int, target_samples: int = 10000) -> int:
    """Stride giving about target_samples scan points: max(1, floor(sqrt(w*h/target)))."""
    return max(1, math.floor(math.sqrt(width * height / target_samples)))


def locate(surface: Optional[RasterSurface],
           centroids: Sequence[RGBColor],
           target_samples: Optional[int] = None,
           alpha_threshold: Optional[int] = None) -> List[Optional[Position]]:
    """
    Find one representative pixel per centroid.

    Pixels more transparent than alpha_threshold are skipped. When several
    pixels are equally close to a centroid the first one in row-major scan
    order is kept.

    Args:
        surface: Image to scan
        centroids: Colors to place
        target_samples: Approximate number of scan points
        alpha_threshold: Minimum alpha for a pixel to be considered

    Returns:
        One Position per centroid, or None for a centroid when no visible
        pixel was scanned
    """
    if target_samples is None:
        target_samples = config.LOCATOR_TARGET_SAMPLES
    if alpha_threshold is None:
        alpha_threshold = config.LOCATOR_ALPHA_THRESHOLD

    if not centroids:
        return []
    if is_empty(surface):
        return [None] * len(centroids)

    width, height = surface.width, surface.height
    stride = scan_stride(width, height, target_samples)

    rgba = np.frombuffer(surface.read_region(0, 0, width, height), dtype=np.uint8)
    grid = rgba.reshape(height, width, 4)[::stride, ::stride]
    rows, cols = grid.shape[:2]

    # Row-major flattening preserves scan order for argmin tie-breaking
    flat = grid.reshape(-1, 4)
    visible = np.flatnonzero(flat[:, 3] >= alpha_threshold)
    if visible.size == 0:
        return [None] * len(centroids)

    colors = flat[visible, :3].astype(np.float64)
    targets = np.array([c.as_tuple() for c in centroids], dtype=np.float64)
    distances = np.sqrt(((colors[:, None, :] - targets[None, :, :]) ** 2).sum(axis=2))
    best = distances.argmin(axis=0)

    positions = []
    for index in best:
        flat_index = int(visible[index])
        row, col = divmod(flat_index, cols)
        positions.append(Position(x=col * stride, y=row * stride))
    return positions


def draw_markers(surface: ImageSurface,
                 positions: Sequence[Optional[Position]],
                 colors: Sequence[RGBColor],
                 radius: Optional[int] = None) -> None:
    """
    Draw one marker per located color on the surface overlay.

    The canvas is redrawn from the original bitmap first so markers from an
    earlier extraction never pile up.
    """
    if radius is None:
        radius = config.MARKER_RADIUS

    surface.redraw()
    for position, color in zip(positions, colors):
        if position is None:
            continue
        center = (position.x, position.y)
        surface.fill_circle(center, radius, color.as_tuple())
        surface.stroke_circle(center, radius + 2, (255, 255, 255), thickness=2)
        surface.stroke_circle(center, radius + 4, (0, 0, 0), thickness=1)
