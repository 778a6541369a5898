"""Map a quadrilateral page region onto an upright rectangle."""

import warnings

import numpy as np

from docscan.corners import out_of_bounds, validate_corners
from docscan.models import DEFAULT_OUTPUT_HEIGHT, DEFAULT_OUTPUT_WIDTH
from docscan.preprocessing.common import as_rgba, resize_to


def quad_dimensions(corners) -> tuple[int, int]:
    """
    Intrinsic (width, height) of a TL, TR, BR, BL quadrilateral.

    Each side is the longer of its two opposing edges, so resampling onto a
    buffer of this size does not lose source resolution.
    """
    tl, tr, br, bl = validate_corners(corners)

    width = max(np.linalg.norm(tr - tl), np.linalg.norm(br - bl))
    height = max(np.linalg.norm(bl - tl), np.linalg.norm(br - tr))

    return max(int(round(width)), 1), max(int(round(height)), 1)


def rectify(
    source: np.ndarray,
    corners,
    output_width: int = DEFAULT_OUTPUT_WIDTH,
    output_height: int = DEFAULT_OUTPUT_HEIGHT,
) -> np.ndarray:
    """
    Extract the page bounded by ``corners`` as an upright RGBA image.

    Each pixel of an intermediate buffer at the quadrilateral's intrinsic
    size is mapped back into the source by bilinear interpolation of the
    four corners (an inverse bilinear warp, not a homography: mild
    perspective only). The nearest source pixel is copied; pixels that land
    outside the source stay transparent black. The intermediate buffer is
    then resized to the requested output size.

    Args:
        source: Source image, grayscale, RGB or RGBA.
        corners: Four (x, y) points ordered TL, TR, BR, BL in source pixels.
        output_width: Output width in pixels.
        output_height: Output height in pixels.

    Returns:
        RGBA buffer of exactly ``output_height`` x ``output_width``.
    """
    pts = validate_corners(corners)
    src = as_rgba(source)
    src_h, src_w = src.shape[:2]

    outside = out_of_bounds(pts, src_w, src_h)
    if outside:
        warnings.warn(
            f"Corners outside the {src_w}x{src_h} source ({', '.join(outside)}); "
            "uncovered output pixels will be transparent"
        )

    temp_w, temp_h = quad_dimensions(pts)
    tl, tr, br, bl = pts

    u = (np.arange(temp_w, dtype=np.float64) / temp_w)[None, :]
    v = (np.arange(temp_h, dtype=np.float64) / temp_h)[:, None]
    w_tl = (1 - u) * (1 - v)
    w_tr = u * (1 - v)
    w_br = u * v
    w_bl = (1 - u) * v

    src_x = w_tl * tl[0] + w_tr * tr[0] + w_br * br[0] + w_bl * bl[0]
    src_y = w_tl * tl[1] + w_tr * tr[1] + w_br * br[1] + w_bl * bl[1]

    # Nearest neighbour, rounding half up
    sx = np.floor(src_x + 0.5).astype(np.intp)
    sy = np.floor(src_y + 0.5).astype(np.intp)
    inside = (sx >= 0) & (sx < src_w) & (sy >= 0) & (sy < src_h)

    warped = np.zeros((temp_h, temp_w, 4), dtype=np.uint8)
    warped[inside] = src[sy[inside], sx[inside]]

    return resize_to(warped, output_width, output_height)
