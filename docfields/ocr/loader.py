"""Page image loading from image files, PDFs or raw bytes."""

import io
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from docfields.errors import InputUnavailableError
from docfields.utils.logger import get_logger

from .pdf_handler import PDFHandler

logger = get_logger(__name__)

IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".tiff", ".tif", ".bmp")
PDF_EXTENSION = ".pdf"
SUPPORTED_EXTENSIONS = (*IMAGE_EXTENSIONS, PDF_EXTENSION)


def _read_image(source: Path | io.BytesIO) -> list[np.ndarray]:
    """Decode every frame of an image (multi-page TIFFs have several)."""
    with Image.open(source) as img:
        frames = []
        for index in range(getattr(img, "n_frames", 1)):
            img.seek(index)
            frames.append(np.array(img.convert("RGB")))
    return frames


def load_pages(
    source: Path | str | bytes, pdf_handler: PDFHandler | None = None
) -> list[np.ndarray]:
    """Load the page images of a document.

    Args:
        source: Path to a PDF or image file, or the raw file bytes.
        pdf_handler: Renderer for PDF input; a 300 DPI one by default.

    Returns:
        RGB page images in page order.

    Raises:
        InputUnavailableError: If the file is missing, has an unsupported
            extension or cannot be decoded.
    """
    pdf_handler = pdf_handler or PDFHandler()

    try:
        if isinstance(source, bytes):
            if source[:4] == b"%PDF":
                return pdf_handler.pdf_to_images(source)
            return _read_image(io.BytesIO(source))

        path = Path(source)
        if not path.exists():
            raise InputUnavailableError(f"file not found: {path}")

        suffix = path.suffix.lower()
        if suffix == PDF_EXTENSION:
            return pdf_handler.pdf_to_images(path)
        if suffix in IMAGE_EXTENSIONS:
            return _read_image(path)
        raise InputUnavailableError(f"unsupported file format: {suffix or path.name}")

    except (
        RuntimeError,
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
    ) as exc:
        logger.error("Could not load document pages: %s", exc)
        raise InputUnavailableError(f"could not decode document: {exc}") from exc
