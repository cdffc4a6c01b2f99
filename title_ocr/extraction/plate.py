"""License plate extraction from normalized title text."""

import re
from collections.abc import Callable
from dataclasses import dataclass

from title_ocr.utils.logger import get_logger

from .fields import ExtractedField
from .vin import loose_vin_spans

logger = get_logger(__name__)

CONTEXT_CONFIDENCE = 0.9
GENERIC_CONFIDENCE = 0.6
MIN_PLATE_LENGTH = 6
MAX_PLATE_LENGTH = 8
MIN_CONTEXT_PLATE_LENGTH = 5

# Candidates containing any of these are document text, not plates.
DENYLIST_WORDS: tuple[str, ...] = (
    "TITLE",
    "CERTIFICATE",
    "CALIFORNIA",
    "VEHICLE",
    "REGISTRATION",
    "OWNER",
    "ISSUED",
    "LICENSE",
    "PLATE",
    "NUMBER",
    "MODEL",
    "YEAR",
    "MAKE",
    "DATE",
    "EXPIRES",
    "STATE",
    "COUNTY",
    "ADDRESS",
)

# Short labels that the spaced pattern would otherwise glue to a number.
_LABEL_TOKENS = frozenset({"YR", "NO", "NUM", "VIN", "LIC", "ID", "MK", "MDL", "DL"})


def _join(match: re.Match[str]) -> str:
    return "".join(match.groups()) if match.groups() else match.group(0)


def _leading_one(match: re.Match[str]) -> str:
    return "1" + match.group(0)[1:]


@dataclass(frozen=True)
class PlatePattern:
    """A regional plate layout and how to turn a match into a plate."""

    method: str
    pattern: re.Pattern[str]
    confidence: float
    to_plate: Callable[[re.Match[str]], str] = _join


_REGIONAL_PATTERNS: tuple[PlatePattern, ...] = (
    # 7ABC123, the current California layout.
    PlatePattern("plate_digit_letters_digits", re.compile(r"\b\d[A-Z]{3}\d{3}\b"), 0.85),
    # The same layout with the leading 1 read as I or L.
    PlatePattern(
        "plate_misread_leading_one",
        re.compile(r"\b[IL][A-Z]{3}\d{3}\b"),
        0.8,
        _leading_one,
    ),
    PlatePattern("plate_letters_digits", re.compile(r"\b[A-Z]{3}\d{3,4}\b"), 0.8),
    PlatePattern("plate_digits_letters", re.compile(r"\b\d{3}[A-Z]{3}\b"), 0.8),
    PlatePattern(
        "plate_spaced",
        re.compile(r"\b([A-Z0-9]{2,3})[ \-]([A-Z0-9]{3,4})\b"),
        0.7,
    ),
)

_CONTEXT = re.compile(
    r"\b(?:LICENSE\s+PLATE|LICENSE|PLATE|LIC)(?:\s+(?:NUMBER|NUM|NO))?\s+"
    r"([A-Z0-9]{5,8})\b"
)
_CONTEXT_BEFORE = re.compile(r"\b(?:LICENSE|PLATE|LIC)(?:\s+(?:NUMBER|NUM|NO))?\s+$")
_GENERIC = re.compile(r"\b[A-Z0-9]{6,8}\b")


def is_plausible_plate(candidate: str, min_length: int = MIN_PLATE_LENGTH) -> bool:
    """Reject denylisted words and single-class candidates."""
    if not min_length <= len(candidate) <= MAX_PLATE_LENGTH:
        return False
    if not candidate.isalnum():
        return False
    if candidate.isdigit() or candidate.isalpha():
        return False
    return not any(word in candidate for word in DENYLIST_WORDS)


def _overlaps_any(span: tuple[int, int], spans: list[tuple[int, int]]) -> bool:
    start, end = span
    return any(start < span_end and span_start < end for span_start, span_end in spans)


def _after_plate_keyword(text: str, start: int) -> bool:
    return _CONTEXT_BEFORE.search(text[:start]) is not None


def extract_plate(text: str) -> ExtractedField:
    """Extract the license plate.

    Regional layouts are tried first, then a keyword-anchored search,
    then any 6-8 character alphanumeric token. Tokens that belong to a
    VIN printed in groups are never plate candidates. A regional match that
    directly follows a plate keyword is reported with the context
    confidence.

    Args:
        text: Normalized and corrected OCR text.

    Returns:
        The license plate field, absent when nothing plausible is found.
    """
    vin_spans = loose_vin_spans(text)
    for layout in _REGIONAL_PATTERNS:
        for match in layout.pattern.finditer(text):
            if _overlaps_any(match.span(), vin_spans):
                continue
            if match.groups() and _LABEL_TOKENS.intersection(match.groups()):
                continue
            candidate = layout.to_plate(match)
            if not is_plausible_plate(candidate):
                continue
            if _after_plate_keyword(text, match.start()):
                logger.debug("Plate %s matched %s after keyword", candidate, layout.method)
                return ExtractedField(candidate, CONTEXT_CONFIDENCE, "plate_context")
            logger.debug("Plate %s matched %s", candidate, layout.method)
            return ExtractedField(candidate, layout.confidence, layout.method)

    for match in _CONTEXT.finditer(text):
        candidate = match.group(1)
        if _overlaps_any(match.span(1), vin_spans):
            continue
        if is_plausible_plate(candidate, min_length=MIN_CONTEXT_PLATE_LENGTH):
            return ExtractedField(candidate, CONTEXT_CONFIDENCE, "plate_context")

    for match in _GENERIC.finditer(text):
        if _overlaps_any(match.span(), vin_spans):
            continue
        candidate = match.group(0)
        if is_plausible_plate(candidate):
            return ExtractedField(candidate, GENERIC_CONFIDENCE, "plate_generic")

    return ExtractedField.absent()
