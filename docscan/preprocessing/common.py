"""Common pixel-buffer utilities shared by the pipeline stages."""

import cv2
import numpy as np

# ITU-R BT.601 luma weights
LUMA_WEIGHTS = (0.299, 0.587, 0.114)


def as_rgba(image: np.ndarray) -> np.ndarray:
    """
    Return an owned, contiguous RGBA uint8 copy of an image buffer.

    Grayscale (H, W) and RGB (H, W, 3) inputs get an opaque alpha channel.
    """
    if image.ndim == 2:
        rgba = cv2.cvtColor(image.astype(np.uint8), cv2.COLOR_GRAY2RGBA)
    elif image.ndim == 3 and image.shape[2] == 3:
        rgba = cv2.cvtColor(image.astype(np.uint8), cv2.COLOR_RGB2RGBA)
    elif image.ndim == 3 and image.shape[2] == 4:
        rgba = image.astype(np.uint8, copy=True)
    else:
        raise ValueError(f"Unsupported image shape: {image.shape}")
    return np.ascontiguousarray(rgba)


def pixel_brightness(rgba: np.ndarray) -> np.ndarray:
    """Per-pixel brightness: the mean of R, G and B, as float64 (H, W)."""
    return rgba[:, :, :3].astype(np.float64).mean(axis=2)


def luma(rgb: np.ndarray) -> np.ndarray:
    """Weighted luma of an (H, W, 3) float array."""
    r, g, b = LUMA_WEIGHTS
    return rgb[:, :, 0] * r + rgb[:, :, 1] * g + rgb[:, :, 2] * b


def clamp_to_uint8(values: np.ndarray) -> np.ndarray:
    """Round to nearest and clamp into [0, 255]."""
    return np.clip(np.rint(values), 0, 255).astype(np.uint8)


def resize_to(image: np.ndarray, width: int, height: int) -> np.ndarray:
    """
    Resize to an exact size with a smooth filter.

    Area averaging when shrinking in both directions, bilinear otherwise.
    """
    h, w = image.shape[:2]
    if (w, h) == (width, height):
        return image.copy()
    if width <= w and height <= h:
        interpolation = cv2.INTER_AREA
    else:
        interpolation = cv2.INTER_LINEAR
    return cv2.resize(image, (width, height), interpolation=interpolation)
