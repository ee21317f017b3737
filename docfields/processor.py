"""End-to-end document field extraction.

Loads page images, conditions each page for its document class, runs OCR
page by page and extracts fields from the concatenated text.
"""

from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import cv2
import numpy as np

from docfields.errors import InputUnavailableError
from docfields.extraction.engine import ExtractionResult, FieldExtractor
from docfields.ocr.loader import load_pages
from docfields.ocr.pdf_handler import PDFHandler
from docfields.ocr.tesseract_engine import IDENTITY_CHAR_WHITELIST, TesseractEngine
from docfields.preprocessing.pipeline import PreprocessingPipeline, QualityMetrics
from docfields.profiles import DocumentClass, get_profile
from docfields.utils.config import AppConfig
from docfields.utils.logger import get_logger

logger = get_logger(__name__)

PAGE_SEPARATOR = "\n\n--- Page Break ---\n\n"


@dataclass
class PageResult:
    """OCR output for a single document page."""

    page_number: int
    text: str
    quality_metrics: QualityMetrics | None = None


@dataclass
class DocumentResult:
    """Complete processing result for a document.

    ``error`` carries the reason when no page could be read; the field map
    is then empty.
    """

    source: str
    document_class: DocumentClass
    page_count: int = 0
    pages: list[PageResult] = field(default_factory=list)
    combined_text: str = ""
    extraction: ExtractionResult = field(default_factory=ExtractionResult)
    skipped_pages: list[int] = field(default_factory=list)
    error: str | None = None

    @property
    def fields(self) -> dict[str, str | list[str]]:
        return self.extraction.fields

    @property
    def identity_validity(self) -> dict[str, list[bool]]:
        return self.extraction.identity_validity

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serialisable summary of the result."""
        return {
            "source": self.source,
            "document_class": str(self.document_class),
            "page_count": self.page_count,
            "pages_read": [p.page_number for p in self.pages],
            "skipped_pages": self.skipped_pages,
            "fields": self.fields,
            "identity_validity": self.identity_validity,
            "error": self.error,
        }


class DocumentProcessor:
    """Document field extraction pipeline.

    Args:
        config: Application configuration; defaults when omitted.
        extractor: Field extractor, e.g. one built on a custom registry.
        ocr_engine: OCR engine; a Tesseract engine from ``config.ocr``
            by default.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        extractor: FieldExtractor | None = None,
        ocr_engine: TesseractEngine | None = None,
    ) -> None:
        self.config = config or AppConfig()
        self.pdf_handler = PDFHandler(dpi=self.config.ocr.pdf_dpi)
        self.preprocessing = PreprocessingPipeline(self.config.preprocessing)
        self.ocr_engine = ocr_engine or TesseractEngine(
            tesseract_cmd=self.config.ocr.tesseract_cmd,
            lang=self.config.ocr.lang,
            psm=self.config.ocr.psm,
            oem=self.config.ocr.oem,
            char_whitelist=self.config.ocr.char_whitelist,
        )
        self.extractor = extractor or FieldExtractor()

    def process(
        self,
        source: Path | str | bytes,
        document_class: DocumentClass | str,
        filename: str | None = None,
    ) -> DocumentResult:
        """Extract fields from a document file or its raw bytes.

        Args:
            source: Path to a PDF/image file, or the raw file bytes.
            document_class: Class of the document.
            filename: Display name; defaults to the file name.

        Returns:
            Document result. Loading failures produce an empty result whose
            ``error`` explains what went wrong.
        """
        document_class = DocumentClass(document_class)
        if filename is None:
            filename = "document" if isinstance(source, bytes) else Path(source).name

        logger.info("Processing %s as %s", filename, document_class)
        try:
            images = load_pages(source, self.pdf_handler)
        except InputUnavailableError as exc:
            logger.warning("Input unavailable for %s: %s", filename, exc.reason)
            return DocumentResult(
                source=filename, document_class=document_class, error=exc.reason
            )

        return self.process_images(images, document_class, source=filename)

    def process_images(
        self,
        images: Sequence[np.ndarray | None],
        document_class: DocumentClass | str,
        source: str = "document",
    ) -> DocumentResult:
        """Extract fields from already-loaded page images.

        Pages are processed independently but their texts are joined in
        ascending page order before extraction.

        Args:
            images: One image per page, in page order.
            document_class: Class of the document.
            source: Display name for the document.

        Returns:
            Document result with the fields found across all readable pages.
        """
        document_class = DocumentClass(document_class)
        result = DocumentResult(
            source=source, document_class=document_class, page_count=len(images)
        )

        if not images:
            logger.warning("No images supplied for %s", source)
            result.error = "no images supplied"
            return result

        numbered = list(enumerate(images, 1))
        workers = min(self.config.processing.max_workers, len(numbered))
        if workers <= 1:
            pages = [self._process_page(n, img, document_class) for n, img in numbered]
        else:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                pages = list(
                    executor.map(
                        lambda item: self._process_page(*item, document_class),
                        numbered,
                    )
                )

        for (page_number, _), page in zip(numbered, pages):
            if page is None:
                result.skipped_pages.append(page_number)
            else:
                result.pages.append(page)

        if not result.pages:
            result.error = "no readable pages"
            logger.warning("No readable pages in %s", source)
            return result

        result.combined_text = PAGE_SEPARATOR.join(p.text for p in result.pages)
        result.extraction = self.extractor.extract(result.combined_text, document_class)

        logger.info(
            "Processed %d/%d pages from %s, %d fields found",
            len(result.pages),
            result.page_count,
            source,
            len(result.fields),
        )
        return result

    def _process_page(
        self,
        page_number: int,
        image: np.ndarray | None,
        document_class: DocumentClass,
    ) -> PageResult | None:
        """Preprocess and recognise one page; ``None`` if it cannot be read."""
        logger.debug("Processing page %d", page_number)
        try:
            processed, metrics = self.preprocessing.process(image, document_class)
        except (cv2.error, ValueError) as exc:
            logger.warning("Skipping unreadable page %d: %s", page_number, exc)
            return None

        if processed is None:
            logger.warning("Skipping page %d: no image", page_number)
            return None

        whitelist = self._char_whitelist(document_class)
        text = self.ocr_engine.recognize(processed, whitelist)
        return PageResult(page_number=page_number, text=text, quality_metrics=metrics)

    def _char_whitelist(self, document_class: DocumentClass) -> str | None:
        if (
            self.config.ocr.restrict_identity_charset
            and get_profile(document_class).validate_identity
        ):
            return IDENTITY_CHAR_WHITELIST
        return None
