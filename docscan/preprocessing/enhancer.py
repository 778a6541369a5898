"""Final global tone adjustment so text reads as dark ink on white paper."""

import numpy as np

from docscan.preprocessing.common import as_rgba, clamp_to_uint8, luma


def enhance(
    image: np.ndarray,
    contrast: float = 1.4,
    brightness: float = 20.0,
    grayscale: bool = False,
) -> np.ndarray:
    """
    Apply contrast around mid-gray, then a brightness offset.

    ``contrast=1, brightness=0, grayscale=False`` is the identity. Alpha is
    left untouched.
    """
    rgba = as_rgba(image)
    rgb = rgba[:, :, :3].astype(np.float64)

    if grayscale:
        rgb[:] = luma(rgb)[:, :, None]

    rgb = (rgb - 128.0) * contrast + 128.0 + brightness
    rgba[:, :, :3] = clamp_to_uint8(rgb)
    return rgba
