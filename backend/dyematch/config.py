"""
DyeMatch Configuration
Manages environment variables and defaults for the matching service.
"""
import math
import os
from typing import FrozenSet, Optional

from dotenv import load_dotenv

load_dotenv()


def _parse_id_set(raw: str) -> FrozenSet[int]:
    """Parse a comma separated id list like "13114,13115"."""
    return frozenset(int(part) for part in raw.split(",") if part.strip())


class Config:
    """Configuration class for DyeMatch services."""

    # Logging
    LOG_LEVEL: str = os.environ.get("DYEMATCH_LOG_LEVEL", "INFO")

    # Palette source (None means the bundled dye list)
    PALETTE_PATH: Optional[str] = os.environ.get("DYEMATCH_PALETTE_PATH")

    # Uploads
    MAX_FILE_MB: int = int(os.environ.get("DYEMATCH_MAX_FILE_MB", "10"))
    SUPPORTED_MIME_TYPES = ["image/jpeg", "image/png", "image/webp", "image/gif"]
    SUPPORTED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".gif"}

    # Viewport (zoom in percent)
    ZOOM_MIN: float = float(os.environ.get("DYEMATCH_ZOOM_MIN", "10"))
    ZOOM_MAX: float = float(os.environ.get("DYEMATCH_ZOOM_MAX", "400"))
    ZOOM_STEP: float = float(os.environ.get("DYEMATCH_ZOOM_STEP", "10"))

    # Sampling
    DEFAULT_SAMPLE_SIZE: int = int(os.environ.get("DYEMATCH_DEFAULT_SAMPLE_SIZE", "5"))
    MAX_SAMPLE_SIZE: int = int(os.environ.get("DYEMATCH_MAX_SAMPLE_SIZE", "64"))
    DRAG_MIN_AREA: float = float(os.environ.get("DYEMATCH_DRAG_MIN_AREA", "4"))

    # Matching
    SIMILAR_RADIUS: float = float(os.environ.get("DYEMATCH_SIMILAR_RADIUS", "100"))
    SIMILAR_LIMIT: int = int(os.environ.get("DYEMATCH_SIMILAR_LIMIT", "10"))
    EXPENSIVE_DYE_IDS: FrozenSet[int] = _parse_id_set(
        os.environ.get("DYEMATCH_EXPENSIVE_DYE_IDS", "13114,13115")
    )

    # Palette extraction
    PALETTE_COLOR_COUNT: int = int(os.environ.get("DYEMATCH_PALETTE_COLOR_COUNT", "4"))
    MAX_PALETTE_COLORS: int = int(os.environ.get("DYEMATCH_MAX_PALETTE_COLORS", "8"))
    EXTRACT_MAX_SAMPLES: int = int(os.environ.get("DYEMATCH_EXTRACT_MAX_SAMPLES", "20000"))
    EXTRACT_RNG_SEED: int = int(os.environ.get("DYEMATCH_EXTRACT_RNG_SEED", "42"))

    # Marker placement
    LOCATOR_TARGET_SAMPLES: int = int(os.environ.get("DYEMATCH_LOCATOR_TARGET_SAMPLES", "10000"))
    LOCATOR_ALPHA_THRESHOLD: int = int(os.environ.get("DYEMATCH_LOCATOR_ALPHA_THRESHOLD", "128"))
    MARKER_RADIUS: int = int(os.environ.get("DYEMATCH_MARKER_RADIUS", "8"))

    # Sessions
    SESSION_LIMIT: int = int(os.environ.get("DYEMATCH_SESSION_LIMIT", "32"))

    # CORS
    ALLOWED_ORIGINS: str = os.environ.get(
        "DYEMATCH_ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:5173"
    )

    @classmethod
    def validate_zoom(cls, zoom: float) -> bool:
        """Validate a requested zoom percent; in-range clamping happens in the viewport."""
        return math.isfinite(zoom) and zoom > 0

    @classmethod
    def validate_sample_size(cls, size: int) -> bool:
        """Validate sampling box side length."""
        return 1 <= size <= cls.MAX_SAMPLE_SIZE

    @classmethod
    def validate_color_count(cls, k: int) -> bool:
        """Validate number of colors requested from palette extraction."""
        return 1 <= k <= cls.MAX_PALETTE_COLORS


# Global config instance
config = Config()
