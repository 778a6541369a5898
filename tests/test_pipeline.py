"""Tests for the end-to-end document pipeline, codec and corner helpers."""

import dataclasses
from unittest.mock import patch

import cv2
import numpy as np
import pytest

from docscan.api import DocumentScanner, process_document, render_document
from docscan.codec import decode_image, encode_jpeg, load_image
from docscan.corners import (
    clamp_corners,
    corners_from_display,
    default_corners,
    out_of_bounds,
    validate_corners,
)
from docscan.errors import (
    DecodeError,
    DocScanError,
    EncodeError,
    InvalidConfigError,
    InvalidCornersError,
)
from docscan.models import NormalizationMode, PipelineConfig, ScanResult
from docscan.preprocessing.normalizer import document_mode, normalize_brightness
from docscan.preprocessing.rectifier import rectify

PAGE_CORNERS = [(50, 50), (950, 50), (950, 1350), (50, 1350)]


def _synthetic_photo(width=1000, height=1400):
    """Desk-coloured background, paper with ink lines and a side shadow."""
    image = np.empty((height, width, 4), dtype=np.uint8)
    image[:, :] = (70, 60, 50, 255)
    image[50:1350, 50:950, :3] = 235
    image[150:1300:40, 100:900, :3] = 30
    shade = np.linspace(0.6, 1.0, width)[None, :, None]
    image[:, :, :3] = (image[:, :, :3] * shade).astype(np.uint8)
    return image


@pytest.fixture(scope="module")
def photo():
    return _synthetic_photo()


class TestProcessDocument:
    def test_default_config_end_to_end(self, photo):
        data = process_document(photo, PAGE_CORNERS)

        assert data[:2] == b"\xff\xd8"
        decoded = decode_image(data)
        assert decoded.shape == (1056, 816, 4)
        assert decoded.dtype == np.uint8

    @pytest.mark.parametrize("mode", list(NormalizationMode))
    def test_every_mode_yields_requested_size(self, photo, mode):
        config = PipelineConfig(output_width=300, output_height=400, normalization=mode)
        buffer = render_document(photo, PAGE_CORNERS, config)
        assert buffer.shape == (400, 300, 4)
        assert buffer.dtype == np.uint8

    def test_no_adjustment_matches_rectify(self, photo):
        config = PipelineConfig(
            output_width=200,
            output_height=280,
            contrast=1.0,
            brightness=0.0,
            normalization=NormalizationMode.NONE,
        )
        rendered = render_document(photo, PAGE_CORNERS, config)
        assert np.array_equal(rendered, rectify(photo, PAGE_CORNERS, 200, 280))

    def test_full_bounds_reproduces_scaled_source(self):
        rng = np.random.default_rng(0)
        source = rng.integers(0, 256, (120, 90, 4), dtype=np.uint8)
        source[:, :, 3] = 255
        config = PipelineConfig(
            output_width=45,
            output_height=60,
            contrast=1.0,
            brightness=0.0,
            normalization=NormalizationMode.NONE,
        )

        rendered = render_document(source, [(0, 0), (90, 0), (90, 120), (0, 120)], config)
        expected = cv2.resize(source, (45, 60), interpolation=cv2.INTER_AREA)

        assert np.abs(rendered.astype(int) - expected.astype(int)).max() <= 1

    def test_strategy_selection(self, photo):
        small = dict(output_width=120, output_height=160)
        with patch("docscan.api.normalize_brightness", wraps=normalize_brightness) as nb, \
                patch("docscan.api.document_mode", wraps=document_mode) as dm:
            render_document(photo, PAGE_CORNERS, PipelineConfig(**small))
            assert nb.call_count == 1 and dm.call_count == 0

            render_document(
                photo,
                PAGE_CORNERS,
                PipelineConfig(normalization=NormalizationMode.DOCUMENT_MODE, **small),
            )
            assert nb.call_count == 1 and dm.call_count == 1

            render_document(
                photo,
                PAGE_CORNERS,
                PipelineConfig(normalization=NormalizationMode.NONE, **small),
            )
            assert nb.call_count == 1 and dm.call_count == 1

    def test_deterministic_and_independent(self, photo):
        config = PipelineConfig(output_width=200, output_height=260)
        before = photo.copy()
        first = process_document(photo, PAGE_CORNERS, config)
        second = process_document(photo, PAGE_CORNERS, config)
        assert first == second
        assert np.array_equal(photo, before)

    def test_grayscale_output(self, photo):
        config = PipelineConfig(output_width=200, output_height=260, grayscale=True)
        buffer = render_document(photo, PAGE_CORNERS, config)
        assert np.array_equal(buffer[:, :, 0], buffer[:, :, 1])
        assert np.array_equal(buffer[:, :, 1], buffer[:, :, 2])

    def test_wrong_corner_count(self, photo):
        with pytest.raises(InvalidCornersError):
            process_document(photo, PAGE_CORNERS[:3])
        with pytest.raises(InvalidCornersError):
            process_document(photo, PAGE_CORNERS + [(10, 10)])

    def test_config_checked_before_corners(self, photo):
        with pytest.raises(InvalidConfigError):
            process_document(photo, PAGE_CORNERS[:3], PipelineConfig(quality=0))

    def test_encode_failure(self, photo):
        config = PipelineConfig(output_width=50, output_height=60)
        with patch("docscan.codec.cv2.imencode", return_value=(False, None)):
            with pytest.raises(EncodeError):
                process_document(photo, PAGE_CORNERS, config)


class TestPipelineConfig:
    def test_defaults_valid(self):
        config = PipelineConfig()
        assert config.validate() is config
        assert (config.output_width, config.output_height) == (816, 1056)
        assert config.quality == 0.92

    @pytest.mark.parametrize(
        "changes",
        [
            {"output_width": 0},
            {"output_height": -5},
            {"output_width": 10.5},
            {"block_size": 0},
            {"quality": 0.0},
            {"quality": 1.5},
            {"strength": 1.2},
            {"white_point": -0.1},
            {"contrast": float("nan")},
            {"brightness": float("inf")},
            {"normalization": "document_mode"},
        ],
    )
    def test_out_of_range(self, changes):
        config = dataclasses.replace(PipelineConfig(), **changes)
        with pytest.raises(InvalidConfigError):
            config.validate()

    def test_immutable(self):
        config = PipelineConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.contrast = 2.0

    def test_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            PipelineConfig(output_width=0).validate()


class TestCodec:
    def test_decode_garbage(self):
        with pytest.raises(DecodeError):
            decode_image(b"definitely not an image")

    def test_decode_empty(self):
        with pytest.raises(DecodeError):
            decode_image(b"")

    def test_decode_png(self):
        bgr = np.zeros((10, 20, 3), dtype=np.uint8)
        bgr[:, :, 2] = 255  # red in BGR
        ok, png = cv2.imencode(".png", bgr)
        assert ok

        rgba = decode_image(png.tobytes())

        assert rgba.shape == (10, 20, 4)
        assert np.all(rgba[:, :, 0] == 255)
        assert np.all(rgba[:, :, 2] == 0)
        assert np.all(rgba[:, :, 3] == 255)

    def test_encode_quality_affects_size(self):
        rng = np.random.default_rng(0)
        image = rng.integers(0, 256, (64, 64, 4), dtype=np.uint8)
        assert len(encode_jpeg(image, 0.3)) < len(encode_jpeg(image, 1.0))

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_image(tmp_path / "missing.jpg")

    def test_load_corrupt_file(self, tmp_path):
        path = tmp_path / "broken.jpg"
        path.write_bytes(b"\xff\xd8 truncated")
        with pytest.raises(DecodeError):
            load_image(path)


class TestCorners:
    def test_default_corners(self):
        assert default_corners(1000, 1400) == [
            (50.0, 70.0),
            (950.0, 70.0),
            (950.0, 1330.0),
            (50.0, 1330.0),
        ]

    def test_default_corners_custom_margin(self):
        assert default_corners(200, 100, margin=0.1)[2] == (180.0, 90.0)

    def test_validate_shapes(self):
        pts = validate_corners(np.array(PAGE_CORNERS).reshape(4, 1, 2))
        assert pts.shape == (4, 2)
        assert pts.dtype == np.float64

    @pytest.mark.parametrize(
        "corners",
        [
            None,
            [],
            [(0, 0), (1, 1), (2, 2)],
            [(0, 0, 0), (1, 1, 1), (2, 2, 2), (3, 3, 3)],
            [(0, 0), (1, 0), (1, float("nan")), (0, 1)],
            [(0, 0), (1, 0), (1, float("inf")), (0, 1)],
            [(0, -1), (1, 0), (1, 1), (0, 1)],
            [("a", "b"), (1, 0), (1, 1), (0, 1)],
        ],
    )
    def test_invalid(self, corners):
        with pytest.raises(InvalidCornersError):
            validate_corners(corners)

    def test_from_display(self):
        assert corners_from_display([(10, 10), (20, 10), (20, 30), (10, 30)], 0.5) == [
            (20.0, 20.0),
            (40.0, 20.0),
            (40.0, 60.0),
            (20.0, 60.0),
        ]

    def test_from_display_bad_scale(self):
        with pytest.raises(InvalidCornersError):
            corners_from_display(PAGE_CORNERS, 0)

    def test_clamp(self):
        clamped = clamp_corners([(-5, 10), (120, -3), (130, 90), (4, 250)], 100, 200)
        assert clamped == [(0.0, 10.0), (100.0, 0.0), (100.0, 90.0), (4.0, 200.0)]

    def test_out_of_bounds(self):
        assert out_of_bounds(PAGE_CORNERS, 1000, 1400) == []
        assert out_of_bounds(PAGE_CORNERS, 900, 1400) == ["top-right", "bottom-right"]


class TestDocumentScanner:
    @pytest.fixture
    def scanner(self):
        return DocumentScanner(PipelineConfig(output_width=170, output_height=220))

    def test_scan_array_default_corners(self, scanner, photo):
        result = scanner.scan_array(photo)

        assert isinstance(result, ScanResult)
        assert (result.width, result.height) == (170, 220)
        assert result.corners == default_corners(1000, 1400)
        assert result.source_size == (1000, 1400)
        assert result.warnings == []
        assert decode_image(result.data).shape == (220, 170, 4)

    def test_scan_file(self, scanner, tmp_path, photo):
        path = tmp_path / "page.png"
        cv2.imwrite(str(path), cv2.cvtColor(photo, cv2.COLOR_RGBA2BGR))

        result = scanner.scan(path, PAGE_CORNERS)

        assert result.corners == [(float(x), float(y)) for x, y in PAGE_CORNERS]
        assert decode_image(result.data).shape == (220, 170, 4)

    def test_scan_bytes(self, scanner, photo):
        result = scanner.scan_bytes(encode_jpeg(photo), PAGE_CORNERS)
        assert len(result.data) > 0

    def test_scan_missing_file(self, scanner):
        with pytest.raises(FileNotFoundError):
            scanner.scan("nonexistent.jpg")

    def test_scan_bytes_garbage(self, scanner):
        with pytest.raises(DocScanError):
            scanner.scan_bytes(b"garbage")

    def test_corners_outside_reported(self, scanner, photo):
        corners = [(50, 50), (1100, 50), (1100, 1350), (50, 1350)]
        result = scanner.scan_array(photo, corners)
        assert len(result.warnings) == 1
        assert "top-right" in result.warnings[0]

    def test_invalid_config_rejected_up_front(self):
        with pytest.raises(InvalidConfigError):
            DocumentScanner(PipelineConfig(block_size=0))

    def test_to_dict(self, scanner, photo):
        d = scanner.scan_array(photo, PAGE_CORNERS).to_dict()
        assert d["width"] == 170
        assert d["height"] == 220
        assert d["normalization"] == "adaptive_brightness"
        assert d["corners"][1] == [950, 50]
        assert d["source_width"] == 1000
        assert d["source_height"] == 1400
        assert d["bytes"] > 0
        assert d["warnings"] == []
