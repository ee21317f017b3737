"""Structured field extraction for scanned Spanish documents.

Conditions page images per document class, runs Tesseract OCR and mines
the resulting text for identity numbers, dates, amounts, addresses and
other labelled fields, validating NIF/NIE check letters along the way.
"""

__version__ = "0.1.0"
