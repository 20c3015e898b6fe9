"""
Viewport state and screen <-> raster coordinate transforms.

One ViewportState exists per loaded image. The functions below take the state
explicitly and mutate it in place; nothing here runs on a timer.

Model: the displayed image is scaled by zoom/100 and shifted so that raster
point (pan_x, pan_y) sits at the container's top-left corner before the
container's own scroll offset is applied.
"""

import math
from dataclasses import dataclass, field
from typing import Optional, Tuple

from dyematch.config import config
from .sampler import SampleRegion

DEFAULT_ZOOM = 100.0

ZOOM_IN_KEYS = ("+", "=")
ZOOM_OUT_KEYS = ("-",)
ZOOM_RESET_KEYS = ("0",)


@dataclass
class DragState:
    """Raster coordinates of an in-progress drag selection."""
    start_x: float
    start_y: float
    current_x: float
    current_y: float


@dataclass
class ViewportState:
    surface_width: int
    surface_height: int
    zoom: float = DEFAULT_ZOOM
    pan_x: float = 0.0
    pan_y: float = 0.0
    zoom_min: float = field(default_factory=lambda: config.ZOOM_MIN)
    zoom_max: float = field(default_factory=lambda: config.ZOOM_MAX)
    zoom_step: float = field(default_factory=lambda: config.ZOOM_STEP)
    drag: Optional[DragState] = None

    @property
    def scale(self) -> float:
        return self.zoom / 100.0


def create_viewport(surface_width: int, surface_height: int, **bounds) -> ViewportState:
    """Create a viewport for a freshly loaded image (100% zoom, no pan)."""
    state = ViewportState(surface_width=surface_width, surface_height=surface_height, **bounds)
    reset(state)
    return state


def reset(state: ViewportState, surface_width: Optional[int] = None,
          surface_height: Optional[int] = None) -> ViewportState:
    """
    Return to 100% zoom and zero pan, dropping any drag in progress.

    Pass the new surface size when a different image is loaded.
    """
    if surface_width is not None:
        state.surface_width = surface_width
    if surface_height is not None:
        state.surface_height = surface_height
    state.zoom = _clamp_zoom(state, DEFAULT_ZOOM)
    state.pan_x = 0.0
    state.pan_y = 0.0
    state.drag = None
    return state


def _clamp_zoom(state: ViewportState, zoom: float) -> float:
    return min(state.zoom_max, max(state.zoom_min, zoom))


def set_zoom(state: ViewportState, zoom: float) -> float:
    state.zoom = _clamp_zoom(state, zoom)
    return state.zoom


def zoom_by(state: ViewportState, delta: float) -> float:
    """Add delta percentage points to the zoom, clamped to bounds."""
    return set_zoom(state, state.zoom + delta)


def wheel_zoom(state: ViewportState, delta_y: float, modifier: bool) -> float:
    """
    Apply a wheel gesture.

    Only a wheel combined with the modifier key zooms, and always by one fixed
    step regardless of wheel delta. Plain wheel scrolling leaves zoom alone.
    """
    if not modifier or delta_y == 0:
        return state.zoom
    step = state.zoom_step if delta_y < 0 else -state.zoom_step
    return zoom_by(state, step)


def key_zoom(state: ViewportState, key: str) -> float:
    """Keyboard shortcuts: "+"/"=" zoom in, "-" zoom out, "0" back to 100%."""
    if key in ZOOM_IN_KEYS:
        return zoom_by(state, state.zoom_step)
    if key in ZOOM_OUT_KEYS:
        return zoom_by(state, -state.zoom_step)
    if key in ZOOM_RESET_KEYS:
        return set_zoom(state, DEFAULT_ZOOM)
    return state.zoom


def screen_to_raster(state: ViewportState, screen_x: float, screen_y: float,
                     scroll_x: float = 0.0, scroll_y: float = 0.0) -> Tuple[float, float]:
    """
    Map a pointer position inside the container to raster pixel coordinates.

    Args:
        state: Current viewport
        screen_x, screen_y: Pointer position relative to the container origin
        scroll_x, scroll_y: Container scroll offset in screen pixels

    Returns:
        (raster_x, raster_y); may fall outside the surface, samplers clamp
    """
    scale = state.scale
    return (
        (screen_x + scroll_x) / scale + state.pan_x,
        (screen_y + scroll_y) / scale + state.pan_y,
    )


def raster_to_screen(state: ViewportState, raster_x: float, raster_y: float,
                     scroll_x: float = 0.0, scroll_y: float = 0.0) -> Tuple[float, float]:
    """Inverse of screen_to_raster."""
    scale = state.scale
    return (
        (raster_x - state.pan_x) * scale - scroll_x,
        (raster_y - state.pan_y) * scale - scroll_y,
    )


def fit_to_container(state: ViewportState, container_width: float,
                     container_height: float, mode: str = "fit") -> float:
    """
    Zoom so the image fills the container, then re-center.

    Args:
        state: Current viewport
        container_width, container_height: Visible area in screen pixels
        mode: "fit" matches the image's limiting dimension so the whole image
            is visible; "width" matches the width only

    Returns:
        The new zoom percentage (clamped to bounds)

    Raises:
        ValueError: If mode is unknown
    """
    if mode not in ("fit", "width"):
        raise ValueError(f"Unknown fit mode: {mode}")
    if (state.surface_width <= 0 or state.surface_height <= 0
            or container_width <= 0 or container_height <= 0):
        return state.zoom

    width_ratio = container_width / state.surface_width
    if mode == "width":
        ratio = width_ratio
    else:
        ratio = min(width_ratio, container_height / state.surface_height)

    set_zoom(state, ratio * 100)
    scale = state.scale
    # Center whichever axis is smaller than the container; the other starts at 0
    state.pan_x = min(0.0, (state.surface_width - container_width / scale) / 2)
    state.pan_y = min(0.0, (state.surface_height - container_height / scale) / 2)
    return state.zoom


# Drag-to-select

def begin_drag(state: ViewportState, raster_x: float, raster_y: float) -> DragState:
    state.drag = DragState(raster_x, raster_y, raster_x, raster_y)
    return state.drag


def update_drag(state: ViewportState, raster_x: float,
                raster_y: float) -> Optional[Tuple[float, float, float, float]]:
    """Move the drag's current corner; returns the normalized rectangle."""
    if state.drag is None:
        return None
    state.drag.current_x = raster_x
    state.drag.current_y = raster_y
    return selection_rect(state)


def selection_rect(state: ViewportState) -> Optional[Tuple[float, float, float, float]]:
    """Normalized (x, y, width, height) of the active drag, or None."""
    drag = state.drag
    if drag is None:
        return None
    x0, x1 = sorted((drag.start_x, drag.current_x))
    y0, y1 = sorted((drag.start_y, drag.current_y))
    return (x0, y0, x1 - x0, y1 - y0)


def cancel_drag(state: ViewportState) -> None:
    """Abandon the drag (e.g. the pointer left the image)."""
    state.drag = None


def end_drag(state: ViewportState, raster_x: float, raster_y: float,
             min_area: Optional[float] = None, point_size: int = 1) -> Optional[SampleRegion]:
    """
    Finish a drag and turn it into a sample region.

    A rectangle with area below min_area counts as a click and samples a
    point (or a point_size box) at its center. Otherwise the region is a
    square covering the rectangle: centered on it with side max(width, height).

    Returns:
        SampleRegion, or None if no drag was in progress
    """
    if state.drag is None:
        return None
    if min_area is None:
        min_area = config.DRAG_MIN_AREA

    update_drag(state, raster_x, raster_y)
    x, y, width, height = selection_rect(state)
    state.drag = None

    center_x = x + width / 2
    center_y = y + height / 2
    if width * height < min_area:
        return SampleRegion(x=center_x, y=center_y, size=max(1, point_size))

    side = max(1, math.ceil(max(width, height)))
    return SampleRegion(x=center_x, y=center_y, size=side)
