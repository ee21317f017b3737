"""Per-document-class image preprocessing pipeline for OCR.

Runs grayscale conversion, contrast stretch, the profile's convolution
filter and upscaling, with quality metrics tracking.
"""

from dataclasses import dataclass

import cv2
import numpy as np

from docfields.profiles import DocumentClass, FilterKind, get_profile
from docfields.utils.config import PreprocessingConfig
from docfields.utils.logger import get_logger

from .convolution import (
    DENOISE_KERNEL,
    SHARPEN_KERNEL,
    convolve,
    red_intensity,
    to_uint8,
)

logger = get_logger(__name__)

_FILTER_KERNELS = {
    FilterKind.SHARPEN: SHARPEN_KERNEL,
    FilterKind.DENOISE: DENOISE_KERNEL,
}


@dataclass
class QualityMetrics:
    """Before/after image quality measurements."""

    sharpness_before: float
    sharpness_after: float
    contrast_before: float
    contrast_after: float


def calculate_sharpness(image: np.ndarray) -> float:
    """Calculate image sharpness using Laplacian variance.

    Args:
        image: Input image (RGB or grayscale).

    Returns:
        Sharpness score (higher means sharper).
    """
    gray = np.ascontiguousarray(red_intensity(image))
    return float(cv2.Laplacian(gray, cv2.CV_64F).var())


def calculate_contrast(image: np.ndarray) -> float:
    """Calculate image contrast as the standard deviation of intensities."""
    return float(red_intensity(image).std())


def to_grayscale(image: np.ndarray) -> np.ndarray:
    """Convert an image to a single intensity plane.

    The intensity is the red channel as-is, not a luminance average; the
    contrast and filter steps read it back from that slot.

    Args:
        image: HxW grayscale or HxWxC RGB/RGBA image.

    Returns:
        HxW uint8 grayscale image.
    """
    gray = np.array(red_intensity(image), dtype=np.uint8, copy=True)
    logger.debug("Converted %s image to grayscale", image.shape)
    return gray


def stretch_contrast(image: np.ndarray, factor: float) -> np.ndarray:
    """Stretch intensities away from mid-gray.

    Computes ``clamp(0, 255, round((in - 128) * factor + 128))`` per pixel.

    Args:
        image: Grayscale image.
        factor: Stretch factor; 1.0 leaves the image unchanged.

    Returns:
        Contrast-adjusted uint8 image.
    """
    stretched = (image.astype(np.float64) - 128.0) * factor + 128.0
    result = to_uint8(stretched)
    logger.debug("Applied contrast stretch (factor=%.2f)", factor)
    return result


def apply_filter(image: np.ndarray, filter_kind: FilterKind) -> np.ndarray:
    """Apply the convolution filter selected by a document profile."""
    kernel = _FILTER_KERNELS.get(filter_kind)
    if kernel is None:
        return image.copy()
    return convolve(image, kernel)


def upscale(
    image: np.ndarray, min_width: int = 1000, factor: float = 2.0
) -> np.ndarray:
    """Enlarge narrow images with bicubic interpolation.

    Args:
        image: Input image.
        min_width: Images narrower than this are scaled.
        factor: Scale applied to both dimensions.

    Returns:
        The scaled image, or ``image`` itself when already wide enough.
    """
    height, width = image.shape[:2]
    if width >= min_width:
        return image

    new_size = (int(width * factor), int(height * factor))
    result = cv2.resize(image, new_size, interpolation=cv2.INTER_CUBIC)
    logger.debug("Upscaled %dx%d image to %dx%d", width, height, *new_size)
    return result


class PreprocessingPipeline:
    """Document image preprocessing driven by the document class profile.

    Args:
        config: Preprocessing configuration (upscale threshold and factor,
            quality tracking).
    """

    def __init__(self, config: PreprocessingConfig | None = None) -> None:
        self.config = config or PreprocessingConfig()

    def process(
        self, image: np.ndarray | None, document_class: DocumentClass | str
    ) -> tuple[np.ndarray | None, QualityMetrics | None]:
        """Run the full preprocessing pipeline on a page image.

        Args:
            image: Input page image (RGB or grayscale).
            document_class: Class selecting the contrast factor and filter.

        Returns:
            Tuple of (processed_image, quality_metrics). The image is
            ``None`` when the input is missing or empty; metrics are
            ``None`` in that case or when quality tracking is disabled.
        """
        if image is None or image.size == 0:
            logger.warning("No image to preprocess")
            return None, None

        profile = get_profile(document_class)

        result = to_grayscale(image)
        result = stretch_contrast(result, profile.contrast_factor)
        result = apply_filter(result, profile.filter_kind)
        result = upscale(
            result,
            min_width=self.config.upscale_min_width,
            factor=self.config.upscale_factor,
        )

        if not self.config.track_quality:
            return result, None

        metrics = QualityMetrics(
            sharpness_before=calculate_sharpness(image),
            sharpness_after=calculate_sharpness(result),
            contrast_before=calculate_contrast(image),
            contrast_after=calculate_contrast(result),
        )
        logger.info(
            "Preprocessing (%s) complete: sharpness %.1f->%.1f, contrast %.1f->%.1f",
            DocumentClass(document_class),
            metrics.sharpness_before,
            metrics.sharpness_after,
            metrics.contrast_before,
            metrics.contrast_after,
        )
        return result, metrics


def preprocess(
    image: np.ndarray | None,
    document_class: DocumentClass | str,
    config: PreprocessingConfig | None = None,
) -> np.ndarray | None:
    """Condition a page image for OCR.

    Args:
        image: Input page image; never modified.
        document_class: Class selecting the preprocessing profile.
        config: Optional preprocessing configuration.

    Returns:
        Processed grayscale image, or ``None`` when there is no image.
    """
    result, _ = PreprocessingPipeline(config).process(image, document_class)
    return result
