"""Manufacturer (make) extraction."""

import re

from title_ocr.utils.logger import get_logger

from .aliases import MakeAliasTable
from .fields import ExtractedField

logger = get_logger(__name__)

CONTEXT_CONFIDENCE = 0.85
SUBSTRING_CONFIDENCE = 0.75
WORD_CONFIDENCE = 0.7

_CONTEXT = re.compile(r"\bMAKE\s+([A-Z0-9]+)(?:\s+([A-Z0-9]+))?")


def _context_make(text: str, aliases: MakeAliasTable) -> str | None:
    for match in _CONTEXT.finditer(text):
        first, second = match.group(1), match.group(2)
        if second:
            canonical = aliases.resolve(f"{first} {second}")
            if canonical:
                return canonical
        canonical = aliases.resolve(first)
        if canonical:
            return canonical
    return None


def extract_make(text: str, aliases: MakeAliasTable) -> ExtractedField:
    """Extract the canonical manufacturer name.

    Tries, in order: the word after a MAKE label, any long alias as a
    plain substring, then any alias as a whole word.

    Args:
        text: Normalized and corrected OCR text.
        aliases: Alias table used to recognize and canonicalize makes.

    Returns:
        The make field, absent when no alias is found.
    """
    canonical = _context_make(text, aliases)
    if canonical:
        return ExtractedField(canonical, CONTEXT_CONFIDENCE, "make_context")

    for pattern, confidence, method in (
        (aliases.substring_pattern, SUBSTRING_CONFIDENCE, "make_substring"),
        (aliases.boundary_pattern, WORD_CONFIDENCE, "make_word"),
    ):
        if pattern is None:
            continue
        match = pattern.search(text)
        if match:
            canonical = aliases[match.group(0)]
            logger.debug("Make %s found as %r via %s", canonical, match.group(0), method)
            return ExtractedField(canonical, confidence, method)

    return ExtractedField.absent()
