"""
DyeMatch Image Sessions

An image session owns one decoded surface together with its viewport and
drag state. Sessions live in a bounded in-memory store; the least recently
used session is evicted once the store is full.
"""
import base64
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from dyematch.config import config
from dyematch.services.colors.extraction import ExtractedColor, extract_palette
from dyematch.services.colors.filters import FilterConfig
from dyematch.services.imaging import viewport
from dyematch.services.imaging.locator import Position, draw_markers, locate
from dyematch.services.imaging.raster import ImageSurface
from dyematch.services.imaging.sampler import SampleRegion, sample_region
from dyematch.services.orchestrator import ColorMatchReport, MatchOrchestrator
from dyematch.utils.ids import generate_request_id
from dyematch.utils.logging import get_logger
from dyematch.utils.metrics import get_metrics


class SessionNotFoundError(LookupError):
    """Raised when a session id is unknown or has been evicted."""


class ExtractionInProgressError(RuntimeError):
    """Raised when a palette extraction is already running for a session."""


@dataclass
class SampledColor:
    """Result of sampling the surface at a point or over a region."""
    region: SampleRegion
    hex: Optional[str]
    report: Optional[ColorMatchReport] = None


@dataclass
class PaletteColor:
    extracted: ExtractedColor
    position: Optional[Position]
    report: Optional[ColorMatchReport]


@dataclass
class PaletteExtraction:
    colors: List[PaletteColor] = field(default_factory=list)
    overlay_png_b64: Optional[str] = None


class ImageSession:
    """Surface, viewport and extraction guard for one uploaded image."""

    def __init__(self, session_id: str, surface: ImageSurface):
        self.id = session_id
        self.surface = surface
        self.viewport = viewport.create_viewport(surface.width, surface.height)
        self.created_at = time.time()
        self.last_extraction: Optional[PaletteExtraction] = None
        self._extract_lock = threading.Lock()

    def load(self, surface: ImageSurface) -> None:
        """
        Swap in a new image, resetting zoom, pan and any drag.

        Raises:
            ExtractionInProgressError: If an extraction is reading the current image
        """
        if not self._extract_lock.acquire(blocking=False):
            raise ExtractionInProgressError(f"Extraction running for session {self.id}; cannot replace image")
        try:
            self.surface = surface
            self.last_extraction = None
            viewport.reset(self.viewport, surface.width, surface.height)
        finally:
            self._extract_lock.release()

    @property
    def extracting(self) -> bool:
        return self._extract_lock.locked()

    def sample_at(self, screen_x: float, screen_y: float,
                  scroll_x: float = 0.0, scroll_y: float = 0.0,
                  size: int = 1) -> SampledColor:
        """
        Sample the original bitmap under a pointer position.

        Args:
            screen_x, screen_y: Pointer position relative to the container
            scroll_x, scroll_y: Container scroll offset
            size: Box side length; 1 reads a single pixel

        Returns:
            SampledColor with the raster region and sampled hex
        """
        raster_x, raster_y = viewport.screen_to_raster(
            self.viewport, screen_x, screen_y, scroll_x, scroll_y
        )
        region = SampleRegion(x=raster_x, y=raster_y, size=max(1, int(size)))
        return SampledColor(region=region, hex=sample_region(self.surface, region))

    def select(self, start: Tuple[float, float], end: Tuple[float, float],
               scroll_x: float = 0.0, scroll_y: float = 0.0,
               point_size: int = 1) -> SampledColor:
        """
        Run a full drag gesture from start to end (screen coordinates).

        Small drags fall back to a point sample at the drag center.
        """
        raster_start = viewport.screen_to_raster(self.viewport, *start, scroll_x, scroll_y)
        raster_end = viewport.screen_to_raster(self.viewport, *end, scroll_x, scroll_y)
        viewport.begin_drag(self.viewport, *raster_start)
        region = viewport.end_drag(self.viewport, *raster_end, point_size=point_size)
        return SampledColor(region=region, hex=sample_region(self.surface, region))

    def extract_and_match(self, orchestrator: MatchOrchestrator,
                          k: Optional[int] = None,
                          filter_config: Optional[FilterConfig] = None) -> PaletteExtraction:
        """
        Extract dominant colors, place markers and match each color to a dye.

        Only one extraction may run per session at a time.

        Raises:
            ExtractionInProgressError: If another extraction holds the session
        """
        if not self._extract_lock.acquire(blocking=False):
            raise ExtractionInProgressError(f"Extraction already running for session {self.id}")

        try:
            with get_metrics().timed("extraction"):
                extracted = extract_palette(self.surface, k=k)
                centroids = [color.rgb for color in extracted]
                positions = locate(self.surface, centroids)
                draw_markers(self.surface, positions, centroids)

            colors = [
                PaletteColor(
                    extracted=color,
                    position=position,
                    report=orchestrator.match_color(color.rgb, filter_config),
                )
                for color, position in zip(extracted, positions)
            ]
            overlay = base64.b64encode(self.surface.canvas_png_bytes()).decode("ascii")
            self.last_extraction = PaletteExtraction(colors=colors, overlay_png_b64=overlay)
            get_metrics().increment("extractions_total")
            return self.last_extraction
        finally:
            self._extract_lock.release()


class SessionStore:
    """Thread-safe, size-bounded registry of image sessions."""

    def __init__(self, limit: Optional[int] = None):
        self.limit = limit if limit is not None else config.SESSION_LIMIT
        self._sessions: "OrderedDict[str, ImageSession]" = OrderedDict()
        self._lock = threading.Lock()
        self.logger = get_logger()

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self, surface: ImageSurface) -> ImageSession:
        session = ImageSession(generate_request_id(prefix="img"), surface)
        with self._lock:
            self._sessions[session.id] = session
            while len(self._sessions) > self.limit:
                evicted_id, _ = self._sessions.popitem(last=False)
                self.logger.info("Evicted image session", extra={"session_id": evicted_id})
        get_metrics().increment("sessions_created_total")
        self.logger.info(
            "Created image session",
            extra={"session_id": session.id, "width": surface.width, "height": surface.height}
        )
        return session

    def get(self, session_id: str) -> ImageSession:
        """
        Raises:
            SessionNotFoundError: If the id is unknown
        """
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None:
                self._sessions.move_to_end(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session not found: {session_id}")
        return session

    def delete(self, session_id: str) -> None:
        with self._lock:
            if self._sessions.pop(session_id, None) is None:
                raise SessionNotFoundError(f"Session not found: {session_id}")

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()

    def stats(self) -> Dict[str, int]:
        return {"active": len(self._sessions), "limit": self.limit}


# Global session store
_store: Optional[SessionStore] = None


def get_session_store() -> SessionStore:
    """Get or create the global session store."""
    global _store
    if _store is None:
        _store = SessionStore()
    return _store
