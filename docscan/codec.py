"""Image decoding and JPEG encoding at the pipeline boundary."""

from pathlib import Path

import cv2
import numpy as np

from docscan.errors import DecodeError, EncodeError
from docscan.preprocessing.common import as_rgba


def decode_image(data: bytes) -> np.ndarray:
    """
    Decode an encoded photo (JPEG, PNG, ...) into an RGBA buffer.

    EXIF orientation is applied by OpenCV.

    Raises:
        DecodeError: If the bytes are empty or cannot be decoded.
    """
    if not data:
        raise DecodeError("No image data")

    buf = np.frombuffer(data, dtype=np.uint8)
    try:
        bgr = cv2.imdecode(buf, cv2.IMREAD_COLOR)
    except cv2.error as e:
        raise DecodeError(f"Cannot decode image: {e}") from e

    if bgr is None:
        raise DecodeError("Cannot decode image: unsupported or corrupt data")

    return cv2.cvtColor(bgr, cv2.COLOR_BGR2RGBA)


def load_image(path: str | Path) -> np.ndarray:
    """
    Read and decode an image file into an RGBA buffer.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        DecodeError: If the file cannot be decoded.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Image not found: {path}")

    try:
        return decode_image(path.read_bytes())
    except DecodeError as e:
        raise DecodeError(f"Cannot read image {path}: {e}") from e


def encode_jpeg(image: np.ndarray, quality: float = 0.92) -> bytes:
    """
    Compress an image buffer to JPEG.

    Args:
        image: Grayscale, RGB or RGBA buffer. Alpha is dropped.
        quality: Quality in (0, 1]; mapped to OpenCV's 1-100 scale.

    Raises:
        EncodeError: If the JPEG backend fails.
    """
    jpeg_quality = min(100, max(1, int(round(quality * 100))))
    try:
        bgr = cv2.cvtColor(as_rgba(image), cv2.COLOR_RGBA2BGR)
        ok, encoded = cv2.imencode(".jpg", bgr, [cv2.IMWRITE_JPEG_QUALITY, jpeg_quality])
    except (cv2.error, ValueError) as e:
        raise EncodeError(f"JPEG encoding failed: {e}") from e

    if not ok:
        raise EncodeError("JPEG encoding failed")

    return encoded.tobytes()
