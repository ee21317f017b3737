"""Tests for the image preprocessing pipeline."""

import numpy as np
import pytest

from docfields.preprocessing.convolution import DENOISE_KERNEL, SHARPEN_KERNEL, convolve
from docfields.preprocessing.pipeline import (
    PreprocessingPipeline,
    QualityMetrics,
    apply_filter,
    calculate_contrast,
    calculate_sharpness,
    preprocess,
    stretch_contrast,
    to_grayscale,
    upscale,
)
from docfields.profiles import DocumentClass, FilterKind
from docfields.utils.config import PreprocessingConfig


def _make_color_image(height: int = 40, width: int = 60) -> np.ndarray:
    """Create a synthetic RGB page with distinct channel values."""
    rng = np.random.default_rng(42)
    return rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8)


def _no_upscale() -> PreprocessingConfig:
    return PreprocessingConfig(upscale_min_width=1)


class TestGrayscale:
    """Tests for red-channel grayscale conversion."""

    def test_uses_red_channel_only(self) -> None:
        image = np.zeros((2, 2, 3), dtype=np.uint8)
        image[...] = (200, 10, 30)
        gray = to_grayscale(image)
        assert gray.shape == (2, 2)
        assert np.all(gray == 200)

    def test_rgba_input(self) -> None:
        image = np.zeros((2, 2, 4), dtype=np.uint8)
        image[..., 0] = 77
        image[..., 3] = 255
        np.testing.assert_array_equal(to_grayscale(image), np.full((2, 2), 77))

    def test_grayscale_input_copied(self, sample_image: np.ndarray) -> None:
        gray = to_grayscale(sample_image)
        np.testing.assert_array_equal(gray, sample_image)
        assert gray is not sample_image


class TestContrastStretch:
    """Tests for the linear contrast stretch."""

    def test_identity_at_factor_one(self) -> None:
        image = np.arange(256, dtype=np.uint8).reshape(16, 16)
        np.testing.assert_array_equal(stretch_contrast(image, 1.0), image)

    def test_known_values(self) -> None:
        image = np.array([[0, 100, 128, 150, 200, 255]], dtype=np.uint8)
        result = stretch_contrast(image, 1.8)
        np.testing.assert_array_equal(result, [[0, 78, 128, 168, 255, 255]])

    def test_pushes_values_away_from_midpoint(self) -> None:
        values = np.arange(256, dtype=np.uint8)
        for factor in (1.3, 1.5, 1.8):
            result = stretch_contrast(values, factor).astype(int)
            above = values > 128
            below = values < 128
            assert np.all(result[above] >= values[above])
            assert np.all(result[below] <= values[below])

    def test_output_dtype(self) -> None:
        image = np.array([[10, 250]], dtype=np.uint8)
        assert stretch_contrast(image, 1.5).dtype == np.uint8


class TestApplyFilter:
    """Tests for profile filter selection."""

    def test_none_returns_copy(self, sample_image: np.ndarray) -> None:
        result = apply_filter(sample_image, FilterKind.NONE)
        np.testing.assert_array_equal(result, sample_image)
        assert result is not sample_image

    def test_sharpen_uses_sharpen_kernel(self, sample_image: np.ndarray) -> None:
        np.testing.assert_array_equal(
            apply_filter(sample_image, FilterKind.SHARPEN),
            convolve(sample_image, SHARPEN_KERNEL),
        )

    def test_denoise_uses_denoise_kernel(self, sample_image: np.ndarray) -> None:
        np.testing.assert_array_equal(
            apply_filter(sample_image, FilterKind.DENOISE),
            convolve(sample_image, DENOISE_KERNEL),
        )


class TestUpscale:
    """Tests for threshold-based upscaling."""

    def test_narrow_image_doubled(self) -> None:
        image = np.zeros((100, 500), dtype=np.uint8)
        result = upscale(image)
        assert result.shape == (200, 1000)

    def test_wide_image_untouched(self) -> None:
        image = np.zeros((50, 1000), dtype=np.uint8)
        assert upscale(image) is image

    def test_single_document_threshold(self) -> None:
        narrow = np.zeros((10, 700), dtype=np.uint8)
        wide = np.zeros((10, 900), dtype=np.uint8)
        assert upscale(narrow, min_width=800).shape == (20, 1400)
        assert upscale(wide, min_width=800) is wide

    def test_preserves_constant_intensity(self) -> None:
        image = np.full((20, 30), 118, dtype=np.uint8)
        result = upscale(image)
        assert result.shape == (40, 60)
        assert np.all(np.abs(result.astype(int) - 118) <= 1)


class TestQualityMetrics:
    """Tests for image quality measurement functions."""

    def test_blank_image_low_sharpness(self) -> None:
        blank = np.zeros((100, 100), dtype=np.uint8)
        assert calculate_sharpness(blank) == 0.0

    def test_color_image_metrics(self, sample_color_image: np.ndarray) -> None:
        assert calculate_sharpness(sample_color_image) > 0
        assert calculate_contrast(sample_color_image) > 0


class TestPreprocessingPipeline:
    """Tests for the per-class pipeline."""

    def test_identity_card_profile(self) -> None:
        image = _make_color_image()
        result = preprocess(image, DocumentClass.IDENTITY_CARD, _no_upscale())
        expected = convolve(stretch_contrast(image[..., 0], 1.8), SHARPEN_KERNEL)
        np.testing.assert_array_equal(result, expected)

    def test_passport_matches_identity_card(self) -> None:
        image = _make_color_image()
        np.testing.assert_array_equal(
            preprocess(image, DocumentClass.PASSPORT, _no_upscale()),
            preprocess(image, DocumentClass.IDENTITY_CARD, _no_upscale()),
        )

    @pytest.mark.parametrize(
        "document_class", [DocumentClass.INVOICE, DocumentClass.CONTRACT]
    )
    def test_commercial_profile(self, document_class: DocumentClass) -> None:
        image = _make_color_image()
        result = preprocess(image, document_class, _no_upscale())
        np.testing.assert_array_equal(result, stretch_contrast(image[..., 0], 1.3))

    def test_medical_profile(self) -> None:
        image = _make_color_image()
        result = preprocess(image, DocumentClass.MEDICAL_RECORD, _no_upscale())
        expected = convolve(stretch_contrast(image[..., 0], 1.5), DENOISE_KERNEL)
        np.testing.assert_array_equal(result, expected)

    def test_accepts_string_class(self) -> None:
        image = _make_color_image()
        np.testing.assert_array_equal(
            preprocess(image, "invoice", _no_upscale()),
            preprocess(image, DocumentClass.INVOICE, _no_upscale()),
        )

    def test_default_upscale(self, sample_color_image: np.ndarray) -> None:
        result = preprocess(sample_color_image, DocumentClass.INVOICE)
        assert result.shape == (400, 600)

    def test_never_shrinks(self) -> None:
        image = np.zeros((30, 1200, 3), dtype=np.uint8)
        result = preprocess(image, DocumentClass.CONTRACT)
        assert result.shape == (30, 1200)

    def test_input_not_mutated(self) -> None:
        image = _make_color_image()
        original = image.copy()
        preprocess(image, DocumentClass.IDENTITY_CARD)
        np.testing.assert_array_equal(image, original)

    def test_none_image(self) -> None:
        assert preprocess(None, DocumentClass.INVOICE) is None

    def test_empty_image(self) -> None:
        empty = np.zeros((0, 0, 3), dtype=np.uint8)
        assert preprocess(empty, DocumentClass.PASSPORT) is None

    def test_unknown_class_raises(self) -> None:
        with pytest.raises(ValueError, match="Unsupported document class"):
            preprocess(_make_color_image(), "receipt")

    def test_metrics_populated(self) -> None:
        pipeline = PreprocessingPipeline(PreprocessingConfig())
        result, metrics = pipeline.process(
            _make_color_image(), DocumentClass.MEDICAL_RECORD
        )
        assert isinstance(metrics, QualityMetrics)
        assert metrics.sharpness_before >= 0
        assert metrics.contrast_after >= 0
        assert result is not None

    def test_metrics_disabled(self) -> None:
        pipeline = PreprocessingPipeline(PreprocessingConfig(track_quality=False))
        result, metrics = pipeline.process(
            _make_color_image(), DocumentClass.INVOICE
        )
        assert metrics is None
        assert result is not None

    def test_no_image_has_no_metrics(self) -> None:
        pipeline = PreprocessingPipeline()
        assert pipeline.process(None, DocumentClass.INVOICE) == (None, None)
