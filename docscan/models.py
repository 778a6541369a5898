"""Data models for the document scanning pipeline."""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from docscan.errors import InvalidConfigError

# US Letter (8.5" x 11") at 96 DPI
DEFAULT_OUTPUT_WIDTH = 816
DEFAULT_OUTPUT_HEIGHT = 1056


class NormalizationMode(Enum):
    NONE = "none"
    ADAPTIVE_BRIGHTNESS = "adaptive_brightness"
    DOCUMENT_MODE = "document_mode"


@dataclass(frozen=True)
class PipelineConfig:
    """
    Options for a single pipeline run.

    Immutable; derive variants with ``dataclasses.replace``. ``strength``
    applies to adaptive brightness, ``white_point`` to document mode.
    """

    output_width: int = DEFAULT_OUTPUT_WIDTH
    output_height: int = DEFAULT_OUTPUT_HEIGHT
    contrast: float = 1.4
    brightness: float = 20.0
    grayscale: bool = False
    normalization: NormalizationMode = NormalizationMode.ADAPTIVE_BRIGHTNESS
    block_size: int = 24
    strength: float = 0.9
    white_point: float = 0.85
    quality: float = 0.92  # JPEG quality in (0, 1]

    def validate(self) -> "PipelineConfig":
        """Raise InvalidConfigError if any option is out of range."""
        for name in ("output_width", "output_height", "block_size"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise InvalidConfigError(f"{name} must be a positive integer, got {value!r}")

        if not isinstance(self.normalization, NormalizationMode):
            raise InvalidConfigError(f"Unknown normalization mode: {self.normalization!r}")

        for name in ("contrast", "brightness"):
            if not _is_finite(getattr(self, name)):
                raise InvalidConfigError(f"{name} must be a finite number")

        for name in ("strength", "white_point"):
            value = getattr(self, name)
            if not _is_finite(value) or not 0.0 <= value <= 1.0:
                raise InvalidConfigError(f"{name} must be within [0, 1], got {value!r}")

        if not _is_finite(self.quality) or not 0.0 < self.quality <= 1.0:
            raise InvalidConfigError(f"quality must be within (0, 1], got {self.quality!r}")

        return self


def _is_finite(value) -> bool:
    try:
        return math.isfinite(value)
    except TypeError:
        return False


@dataclass
class ScanResult:
    """Encoded output of one scanned page."""

    data: bytes
    width: int
    height: int
    corners: list[tuple[float, float]]
    normalization: NormalizationMode = NormalizationMode.ADAPTIVE_BRIGHTNESS
    source_size: Optional[tuple[int, int]] = None  # (width, height)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        d = {
            "width": self.width,
            "height": self.height,
            "bytes": len(self.data),
            "normalization": self.normalization.value,
            "corners": [[round(x, 2), round(y, 2)] for x, y in self.corners],
            "warnings": self.warnings,
        }
        if self.source_size:
            d["source_width"], d["source_height"] = self.source_size
        return d
