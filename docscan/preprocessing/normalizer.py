"""Illumination normalization for photographed pages."""

import numpy as np

from docscan.preprocessing.block_stats import MEAN, MINMAX, compute_block_grid
from docscan.preprocessing.common import as_rgba, clamp_to_uint8, pixel_brightness

# Correction factor bounds for adaptive brightness
MIN_FACTOR = 0.5
MAX_FACTOR = 2.0

# Document mode: local ranges at or below this are too flat to stretch
MIN_LOCAL_RANGE = 20.0
# Document mode: paper maps into [PAPER_FLOOR, 255], ink into [0, PAPER_FLOOR]
PAPER_FLOOR = 215.0


def normalize_brightness(
    image: np.ndarray, block_size: int = 24, strength: float = 0.9
) -> np.ndarray:
    """
    Even out shadows and flash hotspots by rescaling local brightness.

    Every pixel is scaled toward the global mean of the block means, using
    a smoothly interpolated local brightness estimate. No hard threshold is
    applied, so the page keeps its tones.

    Args:
        image: Image buffer (copied, never modified).
        block_size: Tile size for local brightness estimation.
        strength: 0 leaves the image unchanged, 1 applies full correction.

    Returns:
        Corrected RGBA buffer.
    """
    rgba = as_rgba(image)
    grid = compute_block_grid(pixel_brightness(rgba), block_size, MEAN)

    target = grid["mean"].mean()
    local = grid.sample("mean")

    factor = np.ones_like(local)
    lit = local > 0
    factor[lit] = target / local[lit]
    factor = 1.0 + (factor - 1.0) * strength
    factor = np.clip(factor, MIN_FACTOR, MAX_FACTOR)

    rgb = rgba[:, :, :3].astype(np.float64) * factor[:, :, None]
    rgba[:, :, :3] = clamp_to_uint8(rgb)
    return rgba


def document_mode(
    image: np.ndarray, block_size: int = 24, white_point: float = 0.85
) -> np.ndarray:
    """
    Flatten paper to white while keeping ink contrast.

    Local minimum and maximum brightness are interpolated from block
    extremes. Where the local range is large enough, a channel value above
    ``min + range * white_point`` counts as paper and is pushed into
    [215, 255]; anything else counts as ink and is stretched linearly into
    [0, 215]. Flat regions (range <= 20) are left alone.

    Args:
        image: Image buffer (copied, never modified).
        block_size: Tile size for local min/max estimation.
        white_point: Fraction of the local range above which a value is paper.

    Returns:
        Corrected RGBA buffer.
    """
    rgba = as_rgba(image)
    grid = compute_block_grid(pixel_brightness(rgba), block_size, MINMAX)

    low = grid.sample("low")
    high = grid.sample("high")
    value_range = high - low
    active = value_range > MIN_LOCAL_RANGE
    if not np.any(active):
        return rgba

    low = low[active][:, None]
    high = high[active][:, None]
    value_range = value_range[active][:, None]
    threshold = low + value_range * white_point

    values = rgba[:, :, :3][active].astype(np.float64)
    paper = values > threshold

    headroom = np.maximum(high - threshold, np.finfo(np.float64).eps)
    paper_ratio = np.clip((values - threshold) / headroom, 0.0, 1.0)
    paper_values = PAPER_FLOOR + (255.0 - PAPER_FLOOR) * np.sqrt(paper_ratio)
    ink_values = PAPER_FLOOR * np.clip((values - low) / value_range, 0.0, 1.0)

    out = np.where(paper, paper_values, ink_values)
    rgba[:, :, :3][active] = clamp_to_uint8(out)
    return rgba
