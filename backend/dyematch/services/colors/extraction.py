"""
Dominant color extraction for uploaded images.

Clusters the visible pixels of a surface with MiniBatchKMeans and returns the
cluster centers ordered by how much of the image they cover.
"""

from collections import Counter
from dataclasses import dataclass
from typing import List, Optional

import numpy as np
from loguru import logger
from sklearn.cluster import MiniBatchKMeans

from dyematch.config import config
from dyematch.services.imaging.raster import RasterSurface, is_empty
from .conversions import RGBColor, rgb_to_hex


@dataclass(frozen=True)
class ExtractedColor:
    """A cluster center and the share of sampled pixels assigned to it."""
    rgb: RGBColor
    ratio: float

    @property
    def hex(self) -> str:
        return rgb_to_hex(self.rgb)


def collect_visible_pixels(surface: RasterSurface,
                           alpha_threshold: Optional[int] = None,
                           max_samples: Optional[int] = None,
                           rng_seed: Optional[int] = None) -> np.ndarray:
    """
    Flatten a surface into an (N, 3) uint8 array of visible RGB pixels.

    Args:
        surface: Image to read
        alpha_threshold: Minimum alpha for a pixel to count
        max_samples: Downsample (deterministically) above this many pixels
        rng_seed: Seed for the downsampling

    Returns:
        Visible RGB pixels, possibly empty
    """
    if alpha_threshold is None:
        alpha_threshold = config.LOCATOR_ALPHA_THRESHOLD
    if max_samples is None:
        max_samples = config.EXTRACT_MAX_SAMPLES
    if rng_seed is None:
        rng_seed = config.EXTRACT_RNG_SEED

    rgba = np.frombuffer(surface.read_region(0, 0, surface.width, surface.height), dtype=np.uint8)
    rgba = rgba.reshape(-1, 4)
    pixels = rgba[rgba[:, 3] >= alpha_threshold, :3]

    if pixels.shape[0] > max_samples:
        rng = np.random.default_rng(rng_seed)
        indices = rng.choice(pixels.shape[0], size=max_samples, replace=False)
        pixels = pixels[np.sort(indices)]
        logger.debug(f"Downsampled to {max_samples} pixels")

    return pixels


def cluster_palette(pixels_rgb_u8: np.ndarray, k: int = 4,
                    rng_seed: int = 42) -> List[ExtractedColor]:
    """
    Cluster pixels into a dominance-ordered palette using MiniBatchKMeans.

    If the pixels hold fewer distinct colors than k, k is reduced to match.

    Args:
        pixels_rgb_u8: RGB pixels (N, 3) uint8
        k: Number of clusters requested
        rng_seed: Random seed for deterministic clustering

    Returns:
        ExtractedColor list ordered by ratio, descending; empty for no pixels
    """
    if pixels_rgb_u8.size == 0 or k <= 0:
        return []

    unique_colors = np.unique(pixels_rgb_u8, axis=0)
    n_clusters = min(k, len(unique_colors))
    if n_clusters < k:
        logger.info(f"Only {n_clusters} unique colors, reducing k from {k}")

    if n_clusters == len(unique_colors):
        # Every distinct color is its own cluster; count them directly
        counts = Counter(map(tuple, pixels_rgb_u8.tolist()))
        total = pixels_rgb_u8.shape[0]
        palette = [
            ExtractedColor(rgb=RGBColor(*color), ratio=count / total)
            for color, count in counts.items()
        ]
        palette.sort(key=lambda c: -c.ratio)
        return palette

    logger.info(f"Starting clustering with k={n_clusters}, {len(pixels_rgb_u8)} pixels")
    kmeans = MiniBatchKMeans(
        n_clusters=n_clusters,
        random_state=rng_seed,
        batch_size=min(2048, len(pixels_rgb_u8)),
        n_init="auto",
        max_iter=100
    )
    labels = kmeans.fit_predict(pixels_rgb_u8.astype(np.float32))
    centers = np.clip(np.rint(kmeans.cluster_centers_), 0, 255).astype(np.uint8)

    label_counts = Counter(labels.tolist())
    total_pixels = len(labels)

    palette = []
    for i in range(n_clusters):
        r, g, b = (int(channel) for channel in centers[i])
        palette.append(ExtractedColor(rgb=RGBColor(r, g, b),
                                      ratio=label_counts.get(i, 0) / total_pixels))

    # Sort by dominance descending
    palette.sort(key=lambda c: -c.ratio)
    ratios_str = [f"{c.ratio:.3f}" for c in palette]
    logger.info(f"Clustering successful: {ratios_str}")
    return palette


def extract_palette(surface: Optional[RasterSurface], k: Optional[int] = None,
                    max_samples: Optional[int] = None,
                    rng_seed: Optional[int] = None) -> List[ExtractedColor]:
    """
    Extract up to k dominant colors from a surface.

    Returns:
        Dominance-ordered colors; empty when the surface is missing, empty or
        fully transparent
    """
    if is_empty(surface):
        return []
    if k is None:
        k = config.PALETTE_COLOR_COUNT
    if rng_seed is None:
        rng_seed = config.EXTRACT_RNG_SEED

    pixels = collect_visible_pixels(surface, max_samples=max_samples, rng_seed=rng_seed)
    return cluster_palette(pixels, k=k, rng_seed=rng_seed)
