"""Tesseract OCR engine wrapper.

Turns a preprocessed page image into plain text using the configured
languages, page segmentation mode and OCR engine mode.
"""

import shlex

import numpy as np
import pytesseract
from PIL import Image

from docfields.utils.logger import get_logger

logger = get_logger(__name__)

# Digits, Latin letters with Spanish accents and the punctuation found on
# identity cards
IDENTITY_CHAR_WHITELIST = (
    "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
    "ÁÉÍÓÚÑáéíóúñ :.-/"
)


class TesseractEngine:
    """Wrapper around Tesseract OCR for page text recognition.

    Args:
        tesseract_cmd: Path to the Tesseract executable.
            If ``None``, uses the system default.
        lang: Tesseract language codes, ``+``-separated.
        psm: Page segmentation mode.
        oem: OCR engine mode.
        char_whitelist: Optional set of characters Tesseract may emit.
    """

    def __init__(
        self,
        tesseract_cmd: str | None = None,
        lang: str = "spa+eng",
        psm: int = 1,
        oem: int = 1,
        char_whitelist: str | None = None,
    ) -> None:
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.lang = lang
        self.psm = psm
        self.oem = oem
        self.char_whitelist = char_whitelist

    def build_config(self, char_whitelist: str | None = None) -> str:
        """Return the Tesseract command-line configuration string.

        Args:
            char_whitelist: Overrides the engine's whitelist for one call.
        """
        config = f"--psm {self.psm} --oem {self.oem}"
        whitelist = char_whitelist or self.char_whitelist
        if whitelist:
            config += f" -c {shlex.quote(f'tessedit_char_whitelist={whitelist}')}"
        return config

    def recognize(self, image: np.ndarray, char_whitelist: str | None = None) -> str:
        """Recognise the text on a page image.

        Args:
            image: Page image as a numpy array.
            char_whitelist: Characters Tesseract may emit for this page.

        Returns:
            Recognised text, possibly empty. Tesseract failures are logged
            and reported as empty text.
        """
        pil_image = Image.fromarray(image)
        try:
            text = pytesseract.image_to_string(
                pil_image, lang=self.lang, config=self.build_config(char_whitelist)
            )
        except pytesseract.TesseractError as exc:
            logger.warning("Tesseract failed, treating page as empty: %s", exc)
            return ""

        logger.info("OCR recognised %d characters", len(text))
        return text
