"""Vehicle model extraction, anchored on the resolved make."""

import re

from .aliases import MakeAliasTable
from .fields import ExtractedField
from .normalizer import normalize

CONTEXT_CONFIDENCE = 0.75
AFTER_MAKE_CONFIDENCE = 0.6

NON_MODEL_WORDS = frozenset(
    {
        # field labels
        "YEAR",
        "YR",
        "MAKE",
        "MODEL",
        "VIN",
        "PLATE",
        "LICENSE",
        "BODY",
        "TYPE",
        "STYLE",
        "COLOR",
        "NO",
        "NUMBER",
        "TITLE",
        # corporate and generic vehicle words
        "MOTOR",
        "MOTORS",
        "COMPANY",
        "CO",
        "CORP",
        "CORPORATION",
        "INC",
        "LLC",
        "LTD",
        "GROUP",
        "AMERICA",
        "USA",
        "NORTH",
        "VEHICLE",
        "AUTO",
        "AUTOMOBILE",
        "CAR",
        "TRUCK",
    }
)

_MODEL_TOKEN = r"([A-Z0-9]+)"
_CONTEXT = re.compile(rf"\bMODEL\s+{_MODEL_TOKEN}")
# Numeric models (300, 911, 1500) are kept; year-shaped tokens are not.
_YEAR_LIKE = re.compile(r"(?:19|20)\d{2}")


def _is_model_token(token: str, make: str, aliases: MakeAliasTable) -> bool:
    if token in NON_MODEL_WORDS or _YEAR_LIKE.fullmatch(token):
        return False
    return aliases.resolve(token) != make and token != normalize(make)


def extract_model(text: str, make: str | None, aliases: MakeAliasTable) -> ExtractedField:
    """Extract the model name for an already resolved make.

    Args:
        text: Normalized and corrected OCR text.
        make: Canonical make from the make extractor, or ``None``.
        aliases: Alias table used to locate the make in the text.

    Returns:
        The model field in title case, absent without a make or when
        no suitable token is found.
    """
    if not make:
        return ExtractedField.absent()

    for match in _CONTEXT.finditer(text):
        token = match.group(1)
        if _is_model_token(token, make, aliases):
            return ExtractedField(token.title(), CONTEXT_CONFIDENCE, "model_context")

    keys = [k for k in aliases.keys_for(make) or [normalize(make)] if k]
    if not keys:
        return ExtractedField.absent()
    anchor = re.compile(
        r"\b(?:" + "|".join(re.escape(k) for k in keys) + rf")\s+{_MODEL_TOKEN}"
    )
    match = anchor.search(text)
    if match and _is_model_token(match.group(1), make, aliases):
        return ExtractedField(match.group(1).title(), AFTER_MAKE_CONFIDENCE, "model_after_make")

    return ExtractedField.absent()
