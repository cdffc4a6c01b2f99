"""VIN detection and the vehicle identifier derived from it.

Only the last five characters of a validated VIN are reported as the
vehicle identifier; the full VIN is never returned.
"""

import re
from collections import Counter
from collections.abc import Callable, Iterator

from title_ocr.utils.logger import get_logger

from .fields import ExtractedField

logger = get_logger(__name__)

VIN_LENGTH = 17
VEHICLE_ID_LENGTH = 5
VIN_CONFIDENCE = 0.95
MAX_REPEATS = 4
# I, O and Q are never used in VINs.
BANNED_LETTERS = frozenset("IOQ")

_VIN_CHAR = r"[A-HJ-NPR-Z0-9]"
_STRICT = re.compile(rf"\b{_VIN_CHAR}{{{VIN_LENGTH}}}\b")
_VIN_WORD = re.compile(rf"^{_VIN_CHAR}+$")
_SEPARATORS = re.compile(r"[\s\-]+")
_WORD = re.compile(r"[^\s\-]+")
_CONTEXT = re.compile(
    r"\b(?:VEHICLE\s+IDENTIFICATION\s+(?:NUMBER|NO)|V[I1]N(?:\s+(?:NUMBER|NO))?)"
    r"\s*([A-Z0-9][A-Z0-9 \-]{16,40})"
)
# VINs are printed in at most a handful of groups.
_MAX_LOOSE_WORDS = 5


def is_valid_vin(candidate: str) -> bool:
    """Check the structural rules a VIN candidate must satisfy.

    The candidate must be exactly 17 characters of ``[A-Z0-9]``, avoid
    the letters I, O and Q, repeat no character more than four times
    and contain at least one letter and one digit. No check digit is
    computed.
    """
    if len(candidate) != VIN_LENGTH:
        return False
    if not candidate.isascii() or not candidate.isalnum() or not candidate.isupper():
        return False
    if BANNED_LETTERS.intersection(candidate):
        return False
    if max(Counter(candidate).values()) > MAX_REPEATS:
        return False
    has_letter = any(c.isalpha() for c in candidate)
    has_digit = any(c.isdigit() for c in candidate)
    return has_letter and has_digit


def _strict_candidates(text: str) -> Iterator[str]:
    for match in _STRICT.finditer(text):
        yield match.group(0)


def _is_vin_piece(word: str) -> bool:
    # Purely alphabetic words of four or more letters are labels, not VIN groups.
    if not _VIN_WORD.match(word):
        return False
    return not (word.isalpha() and len(word) >= 4)


def _loose_matches(text: str) -> Iterator[tuple[str, int, int]]:
    """Join consecutive VIN-alphabet groups whose lengths add up to 17.

    Yields the joined candidate with the start and end offsets of the
    groups it was built from.
    """
    words = list(_WORD.finditer(text))
    for index, first in enumerate(words):
        if not _is_vin_piece(first.group(0)):
            continue
        joined = ""
        end = first.end()
        for piece in words[index : index + _MAX_LOOSE_WORDS]:
            if not _is_vin_piece(piece.group(0)):
                break
            joined += piece.group(0)
            end = piece.end()
            if len(joined) >= VIN_LENGTH:
                break
        if len(joined) == VIN_LENGTH:
            yield joined, first.start(), end


def _loose_candidates(text: str) -> Iterator[str]:
    for joined, _, _ in _loose_matches(text):
        yield joined


def loose_vin_spans(text: str) -> list[tuple[int, int]]:
    """Return ``(start, end)`` offsets of valid VINs printed in groups."""
    return [(start, end) for joined, start, end in _loose_matches(text) if is_valid_vin(joined)]


def _context_candidates(text: str) -> Iterator[str]:
    for match in _CONTEXT.finditer(text):
        compact = _SEPARATORS.sub("", match.group(1))
        yield compact[:VIN_LENGTH]


def _line_candidates(text: str) -> Iterator[str]:
    """Treat each line with its separators removed as one candidate."""
    for line in text.splitlines():
        compact = _SEPARATORS.sub("", line)
        if len(compact) == VIN_LENGTH:
            yield compact


_STRATEGIES: dict[str, Callable[[str], Iterator[str]]] = {
    "strict": _strict_candidates,
    "loose": _loose_candidates,
    "context": _context_candidates,
    "per_line": _line_candidates,
}
ALL_STRATEGIES: tuple[str, ...] = tuple(_STRATEGIES)


def find_vin(text: str, strategies: tuple[str, ...] = ALL_STRATEGIES) -> tuple[str, str] | None:
    """Find the first valid VIN in ``text``.

    Args:
        text: Text to scan.
        strategies: Strategy names to try, in order.

    Returns:
        ``(vin, strategy_name)`` or ``None`` when no strategy succeeds.
    """
    for name in strategies:
        for candidate in _STRATEGIES[name](text):
            if is_valid_vin(candidate):
                logger.debug("VIN found by %s strategy", name)
                return candidate, name
    return None


def extract_vin(
    text: str,
    confidence: float = VIN_CONFIDENCE,
    strategies: tuple[str, ...] = ALL_STRATEGIES,
) -> ExtractedField:
    """Extract the vehicle identifier (last five VIN characters).

    Args:
        text: Normalized and corrected OCR text.
        confidence: Confidence reported on success.
        strategies: Strategy names to try, in order.

    Returns:
        The vehicle identifier field, absent when no valid VIN is found.
    """
    found = find_vin(text, strategies)
    if found is None:
        return ExtractedField.absent()
    vin, strategy = found
    return ExtractedField(
        value=vin[-VEHICLE_ID_LENGTH:],
        confidence=confidence,
        method=f"vin_{strategy}",
    )
