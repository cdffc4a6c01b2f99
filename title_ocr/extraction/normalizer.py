"""Text normalization for raw OCR output.

Reduces a recognition string to uppercase ASCII letters, digits and
single spaces so that the downstream patterns only deal with one
alphabet.
"""

import re

# Separators that OCR drops into the middle of VINs and plates.
_JOINERS = re.compile(r"[-'.‐-―]")
# A period between two digits is a decimal point or date separator.
_DIGIT_POINT = re.compile(r"(?<=\d)\.(?=\d)")
_DISALLOWED = re.compile(r"[^A-Z0-9 ]")
_WHITESPACE = re.compile(r"\s+")


def normalize(text: str) -> str:
    """Normalize a single recognition string.

    Uppercases, removes intra-token joiners (hyphens, apostrophes,
    periods), turns every other non-alphanumeric character into a
    space and collapses whitespace runs. A period between two digits
    becomes a space, so ``20.15`` does not read as a year.
    ``normalize(normalize(x))`` equals ``normalize(x)``.

    Args:
        text: Raw OCR text.

    Returns:
        Normalized text, possibly empty.
    """
    upper = text.upper()
    joined = _JOINERS.sub("", _DIGIT_POINT.sub(" ", upper))
    cleaned = _DISALLOWED.sub(" ", joined)
    return _WHITESPACE.sub(" ", cleaned).strip()


def normalize_lines(text: str) -> str:
    """Normalize each line of ``text`` and keep the non-empty ones.

    Lines are joined with ``\\n`` so per-line strategies can still
    see the original line structure.
    """
    lines = (normalize(line) for line in text.splitlines())
    return "\n".join(line for line in lines if line)
