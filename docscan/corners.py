"""Corner set validation and helpers for user-selected page corners."""

import numpy as np

from docscan.errors import InvalidCornersError

CORNER_NAMES = ("top-left", "top-right", "bottom-right", "bottom-left")


def validate_corners(corners) -> np.ndarray:
    """
    Validate a corner set and return it as a (4, 2) float64 array.

    Corners are (x, y) pairs ordered TL, TR, BR, BL in source pixel space.
    Accepts any sequence of pairs or an array of shape (4, 2) / (4, 1, 2).

    Raises:
        InvalidCornersError: If there are not exactly four 2-D points, or
            any coordinate is negative or not finite.
    """
    if corners is None:
        raise InvalidCornersError("No corners given")

    try:
        pts = np.asarray(corners, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidCornersError(f"Corners must be numeric (x, y) pairs: {e}") from e

    if pts.ndim == 3 and pts.shape[1] == 1:
        pts = pts.reshape(-1, 2)

    if pts.ndim != 2 or pts.shape[1] != 2:
        raise InvalidCornersError(f"Corners must be (x, y) pairs, got shape {pts.shape}")
    if pts.shape[0] != 4:
        raise InvalidCornersError(f"Expected 4 corners, got {pts.shape[0]}")
    if not np.all(np.isfinite(pts)):
        raise InvalidCornersError("Corner coordinates must be finite")
    if np.any(pts < 0):
        raise InvalidCornersError("Corner coordinates must be non-negative")

    return pts


def default_corners(width: int, height: int, margin: float = 0.05) -> list[tuple[float, float]]:
    """
    Corners of a rectangle inset by ``margin`` (fraction of each side).

    Used when the user has not adjusted the corners.
    """
    mx = width * margin
    my = height * margin
    return [
        (mx, my),
        (width - mx, my),
        (width - mx, height - my),
        (mx, height - my),
    ]


def corners_from_display(points, scale: float) -> list[tuple[float, float]]:
    """
    Convert corners picked on a downscaled preview to source pixel space.

    Args:
        points: Four (x, y) points in preview coordinates.
        scale: Preview size divided by source size (e.g. 0.25).
    """
    if not scale > 0:
        raise InvalidCornersError(f"Display scale must be positive, got {scale}")
    pts = validate_corners(points) / scale
    return [(float(x), float(y)) for x, y in pts]


def clamp_corners(corners, width: int, height: int) -> list[tuple[float, float]]:
    """Clamp each corner into the [0, width] x [0, height] image bounds."""
    try:
        pts = np.array(corners, dtype=np.float64).reshape(-1, 2)
    except (TypeError, ValueError) as e:
        raise InvalidCornersError(f"Corners must be numeric (x, y) pairs: {e}") from e
    pts[:, 0] = np.clip(pts[:, 0], 0, width)
    pts[:, 1] = np.clip(pts[:, 1], 0, height)
    return [(float(x), float(y)) for x, y in validate_corners(pts)]


def out_of_bounds(corners, width: int, height: int) -> list[str]:
    """Names of the corners lying outside a width x height image."""
    pts = validate_corners(corners)
    return [
        name
        for name, (x, y) in zip(CORNER_NAMES, pts)
        if x > width or y > height
    ]
