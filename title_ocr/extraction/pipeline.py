"""End-to-end extraction of vehicle fields from title images or text.

Combines the multi-pass recognizer, candidate scoring, normalization,
character correction and the five field extractors. The pipeline
keeps no state between calls; the alias table and year bounds are
passed in explicitly so alternate tables can be used side by side.
"""

import numpy as np

from title_ocr.ocr.recognizer import MultiPassRecognizer
from title_ocr.utils.config import ExtractionConfig
from title_ocr.utils.logger import get_logger

from .aliases import MakeAliasTable
from .corrector import ambiguous_variants, correct
from .fields import ExtractedField, ExtractionResult
from .make import extract_make
from .model import extract_model
from .normalizer import normalize_lines
from .plate import extract_plate
from .scorer import select_best
from .vin import extract_vin
from .year import extract_year

logger = get_logger(__name__)

VARIANT_VIN_CONFIDENCE = 0.8
VARIANT_VIN_STRATEGIES = ("strict", "context")


def prepare_text(raw_text: str) -> str:
    """Normalize and correct raw OCR text, keeping line breaks."""
    return correct(normalize_lines(raw_text))


class TitleExtractionPipeline:
    """Extracts an :class:`ExtractionResult` from a title page.

    Args:
        aliases: Make alias table shared by the make and model extractors.
        recognizer: Multi-pass recognizer. Only required for
            :meth:`extract_image`.
        config: Year bounds for the year extractor.
    """

    def __init__(
        self,
        aliases: MakeAliasTable,
        recognizer: MultiPassRecognizer | None = None,
        config: ExtractionConfig | None = None,
    ) -> None:
        self.aliases = aliases
        self.recognizer = recognizer
        self.config = config or ExtractionConfig()

    def extract_image(self, image: np.ndarray) -> ExtractionResult:
        """Recognize a page image and extract its fields.

        Raises:
            ValueError: If the pipeline was built without a recognizer.
        """
        if self.recognizer is None:
            raise ValueError("extract_image requires a recognizer")
        passes = self.recognizer.recognize(image)
        return self.extract_candidates([p.raw_text for p in passes])

    def extract_candidates(self, texts: list[str]) -> ExtractionResult:
        """Pick the best raw candidate and extract its fields."""
        best = select_best(texts)
        if best is None:
            logger.warning("No recognition candidates; returning empty result")
            return ExtractionResult.empty()
        return self.extract_text(best)

    def extract_text(self, raw_text: str) -> ExtractionResult:
        """Extract every field from one raw recognition string."""
        text = prepare_text(raw_text)
        if not text:
            return ExtractionResult.empty()

        make = extract_make(text, self.aliases)
        result = ExtractionResult(
            vehicle_id=self._extract_vehicle_id(text),
            license_plate=extract_plate(text),
            year=extract_year(
                text,
                min_year=self.config.min_year,
                max_year=self.config.max_year,
                broad_min_year=self.config.broad_min_year,
            ),
            make=make,
            model=extract_model(text, make.value, self.aliases),
        )
        logger.info("Extracted %d of 5 fields", result.found_count())
        return result

    def _extract_vehicle_id(self, text: str) -> ExtractedField:
        field = extract_vin(text)
        if field.found:
            return field
        # Look-alike readings are tried only for the VIN, where I, O and Q
        # can never be right, and only with the token-level strategies.
        for variant in ambiguous_variants(text):
            field = extract_vin(
                variant,
                confidence=VARIANT_VIN_CONFIDENCE,
                strategies=VARIANT_VIN_STRATEGIES,
            )
            if field.found:
                return ExtractedField(field.value, field.confidence, f"{field.method}_variant")
        return field
