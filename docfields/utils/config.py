"""Configuration management for docfields.

Loads and validates YAML configuration with defaults for preprocessing,
OCR and page processing settings.
"""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("configs/config.yaml")


class PreprocessingConfig(BaseModel):
    """Configuration for the page image preprocessor."""

    upscale_min_width: int = Field(default=1000, gt=0)
    upscale_factor: float = Field(default=2.0, gt=1.0)
    track_quality: bool = True


class OCRConfig(BaseModel):
    """Configuration for the Tesseract OCR engine."""

    tesseract_cmd: str | None = None
    lang: str = "spa+eng"
    psm: int = 1
    oem: int = 1
    char_whitelist: str | None = None
    restrict_identity_charset: bool = False
    pdf_dpi: int = 300


class ProcessingConfig(BaseModel):
    """Configuration for multi-page document processing."""

    max_workers: int = Field(default=1, ge=1)


class AppConfig(BaseModel):
    """Top-level application configuration."""

    preprocessing: PreprocessingConfig = Field(default_factory=PreprocessingConfig)
    ocr: OCRConfig = Field(default_factory=OCRConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = DEFAULT_CONFIG_PATH

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        return AppConfig(**raw)

    logger.info("No config file found at %s, using defaults", path)
    return AppConfig()
