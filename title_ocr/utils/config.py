"""Configuration management for the vehicle title OCR pipeline.

Loads a YAML file into validated pydantic models. Every section has
defaults, so a missing file yields a working configuration with the
three standard recognition passes.
"""

import logging
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

logger = logging.getLogger(__name__)

# Letters and digits only; keywords still read, punctuation noise does not.
TITLE_WHITELIST = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"


class RecognitionPassConfig(BaseModel):
    """One OCR engine configuration variant.

    ``psm`` is the Tesseract page segmentation mode (6 = single block,
    3 = automatic, 11 = sparse text). ``scale`` resizes the page before
    recognition and ``dpi`` is passed to the engine as a resolution hint.
    """

    model_config = ConfigDict(frozen=True)

    config_id: str
    psm: int = Field(default=3, ge=0, le=13)
    whitelist: str | None = None
    dpi: int | None = Field(default=None, gt=0)
    scale: float = Field(default=1.0, gt=0.0, le=4.0)
    preprocess: Literal["none", "otsu", "adaptive", "clahe"] = "none"


def default_passes() -> list[RecognitionPassConfig]:
    """Return the standard block / high-resolution / sparse pass set."""
    return [
        RecognitionPassConfig(
            config_id="block_restricted",
            psm=6,
            whitelist=TITLE_WHITELIST,
            preprocess="adaptive",
        ),
        RecognitionPassConfig(
            config_id="high_res_auto",
            psm=3,
            dpi=300,
            scale=2.0,
            preprocess="clahe",
        ),
        RecognitionPassConfig(
            config_id="sparse_text",
            psm=11,
            preprocess="otsu",
        ),
    ]


class PreprocessingConfig(BaseModel):
    """Parameters for the per-pass image preparation steps."""

    clahe_clip_limit: float = 2.0
    clahe_tile_size: int = 8
    adaptive_block_size: int = 31
    adaptive_c: int = 10

    @model_validator(mode="after")
    def _check_block_size(self) -> "PreprocessingConfig":
        if self.adaptive_block_size < 3 or self.adaptive_block_size % 2 == 0:
            raise ValueError("adaptive_block_size must be an odd number >= 3")
        return self


class OCRConfig(BaseModel):
    """Configuration for the Tesseract engine and the multi-pass runner."""

    tesseract_cmd: str | None = None
    default_lang: str = "eng"
    oem: int = 3
    pdf_dpi: int = 300
    pass_timeout_s: float = Field(default=30.0, gt=0.0)
    max_workers: int = Field(default=3, ge=1)
    passes: list[RecognitionPassConfig] = Field(default_factory=default_passes)
    fallback_pass: RecognitionPassConfig = Field(
        default_factory=lambda: RecognitionPassConfig(config_id="default")
    )


class ExtractionConfig(BaseModel):
    """Configuration for the field extractors."""

    min_year: int = 1990
    max_year: int = 2030
    broad_min_year: int = 1900
    make_aliases_path: str | None = None

    @model_validator(mode="after")
    def _check_year_bounds(self) -> "ExtractionConfig":
        if not self.broad_min_year <= self.min_year <= self.max_year:
            raise ValueError("year bounds must satisfy broad_min_year <= min_year <= max_year")
        return self


class AppConfig(BaseModel):
    """Top-level application configuration."""

    preprocessing: PreprocessingConfig = Field(default_factory=PreprocessingConfig)
    ocr: OCRConfig = Field(default_factory=OCRConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
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
        path = Path("configs/config.yaml")

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        return AppConfig(**raw)

    logger.info("No config file found at %s, using defaults", path)
    return AppConfig()
