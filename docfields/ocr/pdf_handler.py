"""Rasterisation of PDF documents into page images."""

from pathlib import Path

import numpy as np
from PIL import Image
from pdf2image import convert_from_bytes, convert_from_path

from docfields.utils.logger import get_logger

logger = get_logger(__name__)


class PDFHandler:
    """Renders PDF pages to RGB arrays with pdf2image (poppler).

    Args:
        dpi: Rendering resolution. 300 DPI suits Tesseract; lower values
            save memory on long documents at some cost in accuracy.
    """

    def __init__(self, dpi: int = 300) -> None:
        self.dpi = dpi

    def pdf_to_images(self, pdf_source: Path | str | bytes) -> list[np.ndarray]:
        """Render every page of a PDF, first page first.

        Args:
            pdf_source: PDF file path, or the file's raw bytes.

        Returns:
            One HxWx3 uint8 array per page.

        Raises:
            FileNotFoundError: If ``pdf_source`` is a path that does not exist.
            RuntimeError: If poppler cannot render the document.
        """
        if isinstance(pdf_source, bytes):
            pages = self._render(convert_from_bytes, pdf_source)
        else:
            path = Path(pdf_source)
            if not path.exists():
                raise FileNotFoundError(f"PDF file not found: {path}")
            pages = self._render(convert_from_path, str(path))

        images = [np.array(page.convert("RGB")) for page in pages]
        logger.info("Rendered %d PDF pages at %d DPI", len(images), self.dpi)
        return images

    def _render(self, converter, source) -> list[Image.Image]:
        try:
            return converter(source, dpi=self.dpi)
        except Exception as exc:
            raise RuntimeError(f"PDF conversion failed: {exc}") from exc
