"""Scoring of raw OCR candidates to pick the most useful read.

Scores are additive integers: one point per character, 50 per
title keyword, and flat bonuses for a VIN-shaped token, a plausible
year and a plate-shaped token.
"""

import re

from title_ocr.utils.logger import get_logger

from .fields import ScoredCandidate

logger = get_logger(__name__)

KEYWORD_POINTS = 50
VIN_POINTS = 100
YEAR_POINTS = 30
PLATE_POINTS = 40

TITLE_KEYWORDS: tuple[str, ...] = (
    "VEHICLE IDENTIFICATION",
    "IDENTIFICATION NUMBER",
    "VIN",
    "YEAR",
    "MAKE",
    "MODEL",
    "PLATE",
    "LICENSE",
    "TITLE",
    "REGISTRATION",
    "CALIFORNIA",
)

_KEYWORDS = re.compile(
    r"\b(?:" + "|".join(k.replace(" ", r"\s+") for k in TITLE_KEYWORDS) + r")\b",
    re.IGNORECASE,
)
_VIN_TOKEN = re.compile(r"\b[A-HJ-NPR-Z0-9]{17}\b")
_YEAR_TOKEN = re.compile(r"\b(?:19\d{2}|20[0-2]\d|2030)\b")
_PLATE_TOKEN = re.compile(r"\b(?=[A-Z0-9]*\d)(?=[A-Z0-9]*[A-Z])[A-Z0-9]{6,8}\b")


def count_keywords(text: str) -> int:
    return len(_KEYWORDS.findall(text))


def score_candidate(text: str) -> int:
    """Score one raw recognition string."""
    upper = text.upper()
    score = len(text)
    score += KEYWORD_POINTS * count_keywords(text)
    if _VIN_TOKEN.search(upper):
        score += VIN_POINTS
    if _YEAR_TOKEN.search(upper):
        score += YEAR_POINTS
    if _PLATE_TOKEN.search(upper):
        score += PLATE_POINTS
    return score


def rank_candidates(texts: list[str]) -> list[ScoredCandidate]:
    """Score every candidate, keeping input order."""
    return [ScoredCandidate(text=t, score=score_candidate(t)) for t in texts]


def select_best(texts: list[str]) -> str | None:
    """Return the highest-scoring candidate.

    Ties go to the candidate seen first. An empty list yields ``None``.
    """
    best: ScoredCandidate | None = None
    for candidate in rank_candidates(texts):
        if best is None or candidate.score > best.score:
            best = candidate
    if best is None:
        return None
    logger.info("Selected candidate with score %d from %d candidates", best.score, len(texts))
    return best.text
