"""Repair of common OCR character confusions in normalized text.

Two mechanisms are provided:

* :func:`correct` applies context-scoped rules, each once and in a
  fixed order. A rule only fires where the surrounding characters make
  the intended character unambiguous (a letter wedged between digit
  runs, a year with a letter O, a plate with a leading I).
* :func:`ambiguous_variants` applies the general look-alike table as
  alternative readings of the whole text. Callers try extraction
  against each variant instead of rewriting the text in place, since a
  blanket ``O -> 0`` followed by ``0 -> O`` would undo itself and damage
  text that was already right.
"""

import re
from dataclasses import dataclass

from title_ocr.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CorrectionRule:
    """A single regex substitution applied by :func:`correct`."""

    name: str
    pattern: re.Pattern[str]
    replacement: str


def _rule(name: str, pattern: str, replacement: str) -> CorrectionRule:
    return CorrectionRule(name, re.compile(pattern), replacement)


# Order matters: digit-context fixes first so the year and plate
# rules see repaired digits.
CORRECTION_RULES: tuple[CorrectionRule, ...] = (
    _rule("digit_context_zero", r"(?<=\d{3})[OQD](?=\d{3})", "0"),
    _rule("digit_context_one", r"(?<=\d{3})[IL](?=\d{3})", "1"),
    _rule("digit_context_five", r"(?<=\d{3})S(?=\d{3})", "5"),
    _rule("digit_context_eight", r"(?<=\d{3})B(?=\d{3})", "8"),
    _rule("digit_context_two", r"(?<=\d{3})Z(?=\d{3})", "2"),
    _rule("year_letter_zero", r"\b([12])[OQD](\d{2})\b", r"\g<1>0\g<2>"),
    _rule("plate_leading_one", r"\b[IL](?=[A-Z]{3}\d{3}\b)", "1"),
    _rule("keyword_vin", r"\bV[1L]N\b", "VIN"),
    _rule("keyword_model", r"\bMODE1\b", "MODEL"),
)

# (letter, digit) look-alikes.
AMBIGUOUS_PAIRS: tuple[tuple[str, str], ...] = (
    ("O", "0"),
    ("Q", "0"),
    ("I", "1"),
    ("S", "5"),
    ("B", "8"),
    ("Z", "2"),
)

_LETTERS_TO_DIGITS = str.maketrans({letter: digit for letter, digit in AMBIGUOUS_PAIRS})
# Q and O both read as 0; the reverse reading picks O.
_DIGITS_TO_LETTERS = str.maketrans(
    {digit: letter for letter, digit in reversed(AMBIGUOUS_PAIRS)}
)


def correct(text: str, rules: tuple[CorrectionRule, ...] = CORRECTION_RULES) -> str:
    """Apply each correction rule once, in order.

    Args:
        text: Normalized OCR text.
        rules: Rules to apply. Defaults to :data:`CORRECTION_RULES`.

    Returns:
        The corrected text. Unmatched text passes through unchanged.
    """
    result = text
    for rule in rules:
        result, count = rule.pattern.subn(rule.replacement, result)
        if count:
            logger.debug("Correction %s applied %d time(s)", rule.name, count)
    return result


def ambiguous_variants(text: str) -> list[str]:
    """Return alternative readings of ``text`` using the look-alike table.

    The first variant reads every ambiguous letter as its digit, the
    second reads every ambiguous digit as its letter. Variants equal
    to ``text`` (or to an earlier variant) are left out.
    """
    variants: list[str] = []
    for table in (_LETTERS_TO_DIGITS, _DIGITS_TO_LETTERS):
        candidate = text.translate(table)
        if candidate != text and candidate not in variants:
            variants.append(candidate)
    return variants
