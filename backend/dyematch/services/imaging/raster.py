"""
Raster surfaces backed by numpy RGBA buffers.

A surface keeps the decoded bitmap untouched and draws marker overlays on a
separate canvas copy, so sampling never picks up overlay pixels.
"""

import io
from typing import Optional, Protocol, Tuple

import cv2
import numpy as np
from PIL import Image


class RasterSurface(Protocol):
    """Read contract used by the samplers and the locator."""

    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...

    def read_region(self, x: int, y: int, width: int, height: int) -> bytes:
        """Return the region as flat RGBA bytes, row-major, 4 bytes per pixel."""
        ...


class ImageSurface:
    """In-memory RGBA surface with a drawable overlay canvas."""

    def __init__(self, rgba: np.ndarray):
        """
        Args:
            rgba: Array of shape (H, W, 4) or (H, W, 3), dtype uint8

        Raises:
            ValueError: If the array does not look like an RGB(A) image
        """
        if rgba.ndim != 3 or rgba.shape[2] not in (3, 4):
            raise ValueError(f"Expected (H, W, 3|4) image array, got shape {rgba.shape}")
        if rgba.shape[2] == 3:
            alpha = np.full(rgba.shape[:2] + (1,), 255, dtype=np.uint8)
            rgba = np.concatenate([rgba, alpha], axis=2)
        self._pixels = np.ascontiguousarray(rgba, dtype=np.uint8)
        self._pixels.setflags(write=False)
        self._canvas = self._pixels.copy()

    @classmethod
    def from_pil(cls, image: Image.Image) -> "ImageSurface":
        return cls(np.asarray(image.convert("RGBA")))

    @property
    def width(self) -> int:
        return int(self._pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self._pixels.shape[0])

    @property
    def pixels(self) -> np.ndarray:
        """Read-only view of the original RGBA bitmap."""
        return self._pixels

    @property
    def canvas(self) -> np.ndarray:
        """Bitmap plus whatever overlays have been drawn since the last redraw."""
        return self._canvas

    def read_region(self, x: int, y: int, width: int, height: int) -> bytes:
        region = self._pixels[y:y + height, x:x + width]
        return region.tobytes()

    # Overlay primitives

    def redraw(self) -> None:
        """Restore the canvas to the original bitmap, dropping all overlays."""
        np.copyto(self._canvas, self._pixels)

    def fill_circle(self, center: Tuple[int, int], radius: int,
                    rgb: Tuple[int, int, int]) -> None:
        cv2.circle(self._canvas, (int(center[0]), int(center[1])), int(radius),
                   (int(rgb[0]), int(rgb[1]), int(rgb[2]), 255), thickness=-1,
                   lineType=cv2.LINE_AA)

    def stroke_circle(self, center: Tuple[int, int], radius: int,
                      rgb: Tuple[int, int, int], thickness: int = 2) -> None:
        cv2.circle(self._canvas, (int(center[0]), int(center[1])), int(radius),
                   (int(rgb[0]), int(rgb[1]), int(rgb[2]), 255), thickness=thickness,
                   lineType=cv2.LINE_AA)

    def canvas_png_bytes(self) -> bytes:
        """Encode the current canvas (with overlays) as PNG."""
        buffer = io.BytesIO()
        Image.fromarray(self._canvas).save(buffer, format="PNG")
        return buffer.getvalue()


def is_empty(surface: Optional[RasterSurface]) -> bool:
    """True when there is nothing to sample from."""
    return surface is None or surface.width <= 0 or surface.height <= 0
