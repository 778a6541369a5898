"""Command-line interface for scanning photographed pages."""

import argparse
import json
import logging
import sys
from pathlib import Path

from docscan.models import (
    DEFAULT_OUTPUT_HEIGHT,
    DEFAULT_OUTPUT_WIDTH,
    NormalizationMode,
    PipelineConfig,
)

_MODES = {
    "none": NormalizationMode.NONE,
    "adaptive": NormalizationMode.ADAPTIVE_BRIGHTNESS,
    "document": NormalizationMode.DOCUMENT_MODE,
}


def _parse_point(text: str) -> tuple[float, float]:
    try:
        x, y = text.split(",")
        return float(x), float(y)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected X,Y, got {text!r}")


def _parse_size(text: str) -> tuple[int, int]:
    try:
        w, h = text.lower().split("x")
        return int(w), int(h)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected WIDTHxHEIGHT, got {text!r}")


def build_parser() -> argparse.ArgumentParser:
    defaults = PipelineConfig()
    parser = argparse.ArgumentParser(
        prog="docscan",
        description="Turn a photo of a page into a flat, print-ready scan",
    )
    parser.add_argument(
        "image",
        help="Path to the photo",
    )
    parser.add_argument(
        "-o",
        "--output",
        help="Output JPEG path (default: <image>_scan.jpg)",
    )
    parser.add_argument(
        "--corners",
        nargs=4,
        type=_parse_point,
        metavar="X,Y",
        help="Page corners in image pixels, ordered TL TR BR BL",
    )
    parser.add_argument(
        "--margin",
        type=float,
        default=0.05,
        help="Inset fraction for default corners when --corners is omitted (default: 0.05)",
    )
    parser.add_argument(
        "--size",
        type=_parse_size,
        default=(DEFAULT_OUTPUT_WIDTH, DEFAULT_OUTPUT_HEIGHT),
        metavar="WxH",
        help=f"Output size (default: {DEFAULT_OUTPUT_WIDTH}x{DEFAULT_OUTPUT_HEIGHT}, Letter at 96 DPI)",
    )
    parser.add_argument(
        "--contrast",
        type=float,
        default=defaults.contrast,
        help=f"Contrast multiplier (default: {defaults.contrast})",
    )
    parser.add_argument(
        "--brightness",
        type=float,
        default=defaults.brightness,
        help=f"Brightness offset (default: {defaults.brightness})",
    )
    parser.add_argument(
        "--grayscale",
        action="store_true",
        help="Convert to grayscale",
    )
    parser.add_argument(
        "--mode",
        choices=sorted(_MODES),
        default="adaptive",
        help="Illumination normalization (default: adaptive)",
    )
    parser.add_argument(
        "--block-size",
        type=int,
        default=defaults.block_size,
        help=f"Block size for local brightness statistics (default: {defaults.block_size})",
    )
    parser.add_argument(
        "--strength",
        type=float,
        default=defaults.strength,
        help=f"Adaptive correction strength 0-1 (default: {defaults.strength})",
    )
    parser.add_argument(
        "--white-point",
        type=float,
        default=defaults.white_point,
        help=f"Document mode paper threshold 0-1 (default: {defaults.white_point})",
    )
    parser.add_argument(
        "--quality",
        type=float,
        default=defaults.quality,
        help=f"JPEG quality 0-1 (default: {defaults.quality})",
    )
    parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Summary format (default: text)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log pipeline stages",
    )
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    image_path = Path(args.image)
    if not image_path.exists():
        print(f"Error: Image not found: {image_path}", file=sys.stderr)
        sys.exit(1)

    output_path = Path(args.output) if args.output else image_path.with_name(
        f"{image_path.stem}_scan.jpg"
    )

    from docscan.api import DocumentScanner
    from docscan.errors import DocScanError

    width, height = args.size
    config = PipelineConfig(
        output_width=width,
        output_height=height,
        contrast=args.contrast,
        brightness=args.brightness,
        grayscale=args.grayscale,
        normalization=_MODES[args.mode],
        block_size=args.block_size,
        strength=args.strength,
        white_point=args.white_point,
        quality=args.quality,
    )

    try:
        scanner = DocumentScanner(config, margin=args.margin)
        result = scanner.scan(image_path, args.corners)
    except DocScanError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    output_path.write_bytes(result.data)
    _print_result(result, output_path, args.format)


def _print_result(result, output_path, fmt):
    """Print a summary of the scanned page."""
    if fmt == "json":
        output = result.to_dict()
        output["output"] = str(output_path)
        print(json.dumps(output, indent=2))
        return

    corners = "  ".join(f"({x:.0f},{y:.0f})" for x, y in result.corners)
    print(f"Output:          {output_path}")
    print(f"Size:            {result.width}x{result.height}")
    print(f"Bytes:           {len(result.data)}")
    print(f"Normalization:   {result.normalization.value}")
    print(f"Corners:         {corners}")

    if result.warnings:
        print("\nWarnings:")
        for w in result.warnings:
            print(f"  - {w}")


if __name__ == "__main__":
    main()
