#!/usr/bin/env python3
"""
Generate a synthetic photo of a handwritten-style page for trying the pipeline.

The page is drawn as a slightly keystoned quadrilateral on a dark desk, with
ruled lines, a few lines of text, a soft shadow across one side and a flash
hotspot. The page corners are printed so they can be passed to
``docscan --corners``.
"""

import argparse
from pathlib import Path

import cv2
import numpy as np

PHOTO_WIDTH = 1200
PHOTO_HEIGHT = 1600

# TL, TR, BR, BL
PAGE_CORNERS = np.array(
    [[130, 110], [1080, 150], [1110, 1480], [90, 1450]], dtype=np.float32
)

LINES = [
    "Homework 3 - Linear Algebra",
    "1. Show that det(AB) = det(A) det(B).",
    "2. Find the eigenvalues of [[2, 1], [1, 2]].",
    "   lambda = 1, lambda = 3",
    "3. Orthogonal projection onto span{v}:",
    "   P = v v^T / (v^T v)",
]


def _draw_flat_page(width: int, height: int) -> np.ndarray:
    """Draw the unwarped page: off-white paper, ruled lines, text."""
    page = np.full((height, width, 3), (236, 240, 242), dtype=np.uint8)

    for y in range(140, height - 60, 48):
        cv2.line(page, (40, y), (width - 40, y), (215, 190, 170), 1)
    cv2.line(page, (110, 0), (110, height), (170, 170, 230), 2)

    y = 130
    for text in LINES:
        cv2.putText(
            page, text, (130, y), cv2.FONT_HERSHEY_SIMPLEX, 1.0, (60, 40, 30), 2, cv2.LINE_AA
        )
        y += 96
    return page


def _apply_lighting(photo: np.ndarray) -> np.ndarray:
    """Darken the left side like a hand shadow and add a flash hotspot."""
    h, w = photo.shape[:2]
    yy, xx = np.mgrid[0:h, 0:w].astype(np.float32)

    shadow = 0.55 + 0.45 * np.clip(xx / (w * 0.6), 0.0, 1.0)
    hotspot = 1.0 + 0.35 * np.exp(-(((xx - w * 0.7) ** 2 + (yy - h * 0.3) ** 2) / (2 * 180.0**2)))

    lit = photo.astype(np.float32) * (shadow * hotspot)[:, :, None]
    return np.clip(lit, 0, 255).astype(np.uint8)


def generate(seed: int = 0) -> np.ndarray:
    """Return a synthetic BGR photo of a page."""
    rng = np.random.default_rng(seed)

    flat = _draw_flat_page(850, 1100)
    src = np.array([[0, 0], [849, 0], [849, 1099], [0, 1099]], dtype=np.float32)
    matrix = cv2.getPerspectiveTransform(src, PAGE_CORNERS)

    desk = np.full((PHOTO_HEIGHT, PHOTO_WIDTH, 3), (45, 60, 80), dtype=np.uint8)
    photo = cv2.warpPerspective(
        flat, matrix, (PHOTO_WIDTH, PHOTO_HEIGHT),
        dst=desk, borderMode=cv2.BORDER_TRANSPARENT,
    )

    photo = _apply_lighting(photo)
    noise = rng.normal(0, 4, photo.shape)
    photo = np.clip(photo.astype(np.float32) + noise, 0, 255).astype(np.uint8)
    return cv2.GaussianBlur(photo, (3, 3), 0)


def main():
    parser = argparse.ArgumentParser(description="Generate a synthetic page photo")
    parser.add_argument("output", nargs="?", default="sample_page.jpg", help="Output path")
    parser.add_argument("--seed", type=int, default=0, help="Noise seed")
    args = parser.parse_args()

    output = Path(args.output)
    cv2.imwrite(str(output), generate(args.seed))

    corners = " ".join(f"{x:.0f},{y:.0f}" for x, y in PAGE_CORNERS)
    print(f"Wrote {output} ({PHOTO_WIDTH}x{PHOTO_HEIGHT})")
    print(f"  docscan {output} --corners {corners}")


if __name__ == "__main__":
    main()
