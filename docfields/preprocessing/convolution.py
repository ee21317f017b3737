"""2-D kernel convolution over single-intensity document images.

Intensity is read from the red slot of the image, the kernel-weighted sum
is written back to every interior pixel and replicated across the colour
channels. Pixels closer to an edge than the kernel radius keep their
original values.
"""

from dataclasses import dataclass

import numpy as np

from docfields.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, eq=False)
class Kernel:
    """Square, odd-sided convolution kernel."""

    weights: np.ndarray

    def __post_init__(self) -> None:
        weights = np.array(self.weights, dtype=np.float64)
        if weights.ndim != 2 or weights.shape[0] != weights.shape[1]:
            raise ValueError(f"Kernel must be square, got shape {weights.shape}")
        if weights.shape[0] % 2 == 0:
            raise ValueError(f"Kernel side must be odd, got {weights.shape[0]}")
        weights.setflags(write=False)
        object.__setattr__(self, "weights", weights)

    @property
    def size(self) -> int:
        return int(self.weights.shape[0])

    @property
    def radius(self) -> int:
        return self.size // 2


SHARPEN_KERNEL = Kernel(
    np.array(
        [
            [0, -1, 0],
            [-1, 5, -1],
            [0, -1, 0],
        ]
    )
)

DENOISE_KERNEL = Kernel(
    np.array(
        [
            [1, 2, 1],
            [2, 4, 2],
            [1, 2, 1],
        ]
    )
    / 16
)


def to_uint8(values: np.ndarray) -> np.ndarray:
    """Clamp to [0, 255] and round half up to 8-bit intensities."""
    return np.floor(np.clip(values, 0, 255) + 0.5).astype(np.uint8)


def red_intensity(image: np.ndarray) -> np.ndarray:
    """Return the intensity plane stored in the red slot of an image."""
    return image if image.ndim == 2 else image[..., 0]


def convolve(image: np.ndarray, kernel: Kernel) -> np.ndarray:
    """Apply ``kernel`` to the interior of an image.

    Args:
        image: HxW grayscale or HxWxC (RGB/RGBA) image.
        kernel: Convolution kernel.

    Returns:
        New uint8 image with the same shape as ``image``. Border pixels
        within ``kernel.radius`` of an edge are copied unchanged; images
        smaller than the kernel are returned as an unchanged copy.
    """
    result = np.array(image, dtype=np.uint8, copy=True)
    height, width = result.shape[:2]
    radius = kernel.radius

    if height < kernel.size or width < kernel.size:
        logger.debug(
            "Image %dx%d smaller than %dx%d kernel, skipping convolution",
            width,
            height,
            kernel.size,
            kernel.size,
        )
        return result

    intensity = red_intensity(result).astype(np.float64)
    inner_h = height - 2 * radius
    inner_w = width - 2 * radius

    acc = np.zeros((inner_h, inner_w), dtype=np.float64)
    for dy in range(kernel.size):
        for dx in range(kernel.size):
            weight = kernel.weights[dy, dx]
            if weight:
                acc += weight * intensity[dy : dy + inner_h, dx : dx + inner_w]

    values = to_uint8(acc)
    if result.ndim == 2:
        result[radius : height - radius, radius : width - radius] = values
    else:
        # Alpha, if present, is left untouched
        channels = min(3, result.shape[2])
        result[radius : height - radius, radius : width - radius, :channels] = values[
            ..., np.newaxis
        ]

    logger.debug(
        "Applied %dx%d convolution to %dx%d image",
        kernel.size,
        kernel.size,
        width,
        height,
    )
    return result
