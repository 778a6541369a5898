"""Public API for turning page photos into scanned-looking JPEGs."""

import logging
import time
import warnings
from pathlib import Path

import numpy as np

from docscan.codec import decode_image, encode_jpeg, load_image
from docscan.corners import default_corners, out_of_bounds, validate_corners
from docscan.models import NormalizationMode, PipelineConfig, ScanResult
from docscan.preprocessing.enhancer import enhance
from docscan.preprocessing.normalizer import document_mode, normalize_brightness
from docscan.preprocessing.rectifier import rectify

logger = logging.getLogger(__name__)


def render_document(
    source: np.ndarray,
    corners,
    config: PipelineConfig | None = None,
) -> np.ndarray:
    """
    Run the pipeline up to, but not including, encoding.

    Rectify -> normalize (per ``config.normalization``) -> enhance. The
    configuration and corners are validated before any stage runs.

    Returns:
        RGBA buffer of ``config.output_height`` x ``config.output_width``.
    """
    config = (config or PipelineConfig()).validate()
    pts = validate_corners(corners)

    start = time.perf_counter()
    buffer = rectify(source, pts, config.output_width, config.output_height)
    logger.debug(
        "Rectified %dx%d source to %dx%d",
        source.shape[1], source.shape[0], config.output_width, config.output_height,
    )

    if config.normalization == NormalizationMode.ADAPTIVE_BRIGHTNESS:
        buffer = normalize_brightness(buffer, config.block_size, config.strength)
    elif config.normalization == NormalizationMode.DOCUMENT_MODE:
        buffer = document_mode(buffer, config.block_size, config.white_point)
    logger.debug(
        "Normalization %s (block_size=%d)", config.normalization.value, config.block_size
    )

    buffer = enhance(buffer, config.contrast, config.brightness, config.grayscale)
    logger.debug(
        "Pipeline finished in %.1fms", (time.perf_counter() - start) * 1000
    )
    return buffer


def process_document(
    source: np.ndarray,
    corners,
    config: PipelineConfig | None = None,
) -> bytes:
    """
    Rectify, clean up and JPEG-encode one photographed page.

    Args:
        source: Decoded source image (RGBA, RGB or grayscale array).
        corners: Four (x, y) points ordered TL, TR, BR, BL in source pixels.
        config: Pipeline options; defaults to ``PipelineConfig()``.

    Returns:
        JPEG bytes of exactly ``output_width`` x ``output_height`` pixels.

    Raises:
        InvalidConfigError: If an option is out of range.
        InvalidCornersError: If the corner set is invalid.
        EncodeError: If JPEG compression fails.
    """
    config = config or PipelineConfig()
    buffer = render_document(source, corners, config)
    data = encode_jpeg(buffer, config.quality)
    logger.debug("Encoded %d bytes at quality %.2f", len(data), config.quality)
    return data


class DocumentScanner:
    """
    Main entry point for scanning photographed pages.

    Usage:
        scanner = DocumentScanner()
        result = scanner.scan("path/to/photo.jpg")
        Path("page.jpg").write_bytes(result.data)
    """

    def __init__(self, config: PipelineConfig | None = None, margin: float = 0.05):
        """
        Initialize the scanner.

        Args:
            config: Pipeline options shared by every scanned page.
            margin: Inset fraction for default corners when none are given.
        """
        self.config = (config or PipelineConfig()).validate()
        self.margin = margin

    def scan(self, image_path: str | Path, corners=None) -> ScanResult:
        """
        Scan a page from an image file.

        Raises:
            FileNotFoundError: If the image file doesn't exist.
            DecodeError: If the image cannot be decoded.
        """
        return self.scan_array(load_image(image_path), corners)

    def scan_bytes(self, data: bytes, corners=None) -> ScanResult:
        """Scan a page from encoded image bytes."""
        return self.scan_array(decode_image(data), corners)

    def scan_array(self, image: np.ndarray, corners=None) -> ScanResult:
        """
        Scan a page from a decoded image array.

        Args:
            image: Image as numpy array (RGBA, RGB or grayscale).
            corners: Page corners in image pixels; defaults to an inset
                rectangle of ``self.margin``.

        Returns:
            ScanResult with the encoded page and the corners used.
        """
        h, w = image.shape[:2]
        if corners is None:
            corners = default_corners(w, h, self.margin)
        pts = validate_corners(corners)

        result_warnings = []
        outside = out_of_bounds(pts, w, h)
        if outside:
            result_warnings.append(
                f"Corners outside the image: {', '.join(outside)}"
            )

        with warnings.catch_warnings():
            # Already reported through result_warnings
            warnings.simplefilter("ignore", UserWarning)
            data = process_document(image, pts, self.config)

        return ScanResult(
            data=data,
            width=self.config.output_width,
            height=self.config.output_height,
            corners=[(float(x), float(y)) for x, y in pts],
            normalization=self.config.normalization,
            source_size=(w, h),
            warnings=result_warnings,
        )
