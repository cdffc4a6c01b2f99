"""Model year extraction."""

import re

from title_ocr.utils.logger import get_logger

from .fields import ExtractedField

logger = get_logger(__name__)

CONTEXT_CONFIDENCE = 0.9
FALLBACK_CONFIDENCE = 0.7

_YEAR_TOKEN = re.compile(r"\b\d{4}\b")
_CONTEXT = re.compile(r"\b(?:MODEL\s+YEAR|YEAR\s+MODEL|YEAR|YR|MODEL)\s+(\d{4})\b")


def extract_year(
    text: str,
    min_year: int = 1990,
    max_year: int = 2030,
    broad_min_year: int = 1900,
) -> ExtractedField:
    """Extract the model year.

    A year directly after a year or model keyword wins. Otherwise the
    newest year in ``min_year..max_year`` is taken, since titles list
    older dates (first sale, lien) far more often than future ones.

    Args:
        text: Normalized and corrected OCR text.
        min_year: Lower bound for an unlabelled year.
        max_year: Upper bound for any year.
        broad_min_year: Lower bound for a keyword-labelled year.

    Returns:
        The year field, absent when no plausible year is present.
    """
    for match in _CONTEXT.finditer(text):
        year = int(match.group(1))
        if broad_min_year <= year <= max_year:
            return ExtractedField(match.group(1), CONTEXT_CONFIDENCE, "year_context")

    years = [
        int(token)
        for token in _YEAR_TOKEN.findall(text)
        if min_year <= int(token) <= max_year
    ]
    if not years:
        return ExtractedField.absent()

    newest = max(years)
    logger.debug("Year fallback picked %d from %d candidates", newest, len(years))
    return ExtractedField(str(newest), FALLBACK_CONFIDENCE, "year_newest")
