"""Cross-document matcher: front OCR fields vs barcode fields -> MatchReport.

Scoring:
    * raw word overlap  : 2 points per shared significant word, capped at 30.
    * weighted fields   : FIELD_MAPPINGS rows; equal -> full weight, unequal ->
                          weight * similarity (PartialMatch above 0.7, else Mismatch),
                          one-sided or missing -> 0.
    * percent           : round-half-up(100 * total / (sum(weights) + 30)).
"""

import logging
import math
import string
from dataclasses import dataclass
from typing import Callable, List, Mapping, Optional, Set, Tuple

from crosscheck.extraction.fields import CanonicalField as F
from crosscheck.extraction.normalizers import normalize_for_comparison
from crosscheck.matching.schemas import (
    ConfidenceLevel,
    FieldMatchResult,
    MatchClassification,
    MatchReport,
)

logger = logging.getLogger("crosscheck.match")

MIN_WORD_LENGTH = 3
WORD_POINTS = 2
MAX_WORD_MATCHES = 15
WORD_SCORE_CAP = WORD_POINTS * MAX_WORD_MATCHES  # 30
PARTIAL_MATCH_THRESHOLD = 0.7

CONFIDENCE_BUCKETS: Tuple[Tuple[int, ConfidenceLevel], ...] = (
    (90, ConfidenceLevel.VERY_HIGH),
    (75, ConfidenceLevel.HIGH),
    (60, ConfidenceLevel.MEDIUM),
    (40, ConfidenceLevel.LOW),
)

Projection = Callable[[str], str]


def _first_token(value: str) -> str:
    parts = value.split()
    return parts[0] if parts else ""


def _last_token(value: str) -> str:
    parts = value.split()
    return parts[-1] if parts else ""


@dataclass(frozen=True)
class FieldMapping:
    """front field <-> barcode field with its discriminative weight.

    front_projection picks the comparable part of a composite front value
    (the front side only carries a full 'Name').
    """

    front: F
    barcode: F
    weight: int
    front_projection: Optional[Projection] = None


FIELD_MAPPINGS: Tuple[FieldMapping, ...] = (
    FieldMapping(F.NAME, F.FIRST_NAME, 15, _first_token),
    FieldMapping(F.NAME, F.LAST_NAME, 15, _last_token),
    FieldMapping(F.DATE_OF_BIRTH, F.DATE_OF_BIRTH, 20),
    FieldMapping(F.DRIVER_LICENSE_NUMBER, F.LICENSE_NUMBER, 25),
    FieldMapping(F.STATE, F.STATE, 10),
    FieldMapping(F.ADDRESS, F.STREET_ADDRESS, 8),
    FieldMapping(F.CITY, F.CITY, 8),
    FieldMapping(F.HEIGHT, F.HEIGHT, 12),
    FieldMapping(F.WEIGHT, F.WEIGHT, 8),
    FieldMapping(F.EYE_COLOR, F.EYE_COLOR, 8),
    FieldMapping(F.SEX, F.SEX, 10),
    FieldMapping(F.CLASS, F.CLASS, 5),
    FieldMapping(F.EXPIRATION_DATE, F.EXPIRATION_DATE, 15),
    FieldMapping(F.ISSUE_DATE, F.ISSUE_DATE, 10),
)

MAX_FIELD_SCORE = sum(m.weight for m in FIELD_MAPPINGS)


# ---- text helpers ----

def significant_words(text: Optional[str]) -> Set[str]:
    """Whitespace tokens, punctuation-trimmed and case-folded, of length >= 3."""
    words = set()
    for raw in (text or "").split():
        word = raw.strip(string.punctuation).lower()
        if len(word) >= MIN_WORD_LENGTH:
            words.add(word)
    return words


def levenshtein_distance(a: str, b: str) -> int:
    """Single-character edit distance (insert, delete, substitute; unit cost)."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, 1):
        current = [i]
        for j, cb in enumerate(b, 1):
            cost = 0 if ca == cb else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def similarity(a: str, b: str) -> float:
    """1 - distance / max(len); two empty strings are identical."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - levenshtein_distance(a, b) / longest


def confidence_for(percent: int) -> ConfidenceLevel:
    for floor, level in CONFIDENCE_BUCKETS:
        if percent >= floor:
            return level
    return ConfidenceLevel.VERY_LOW


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# ---- field comparison ----

def compare_field(mapping: FieldMapping,
                  front_fields: Mapping[str, str],
                  barcode_fields: Mapping[str, str]) -> FieldMatchResult:
    front_value = front_fields.get(mapping.front.value) or None
    if front_value and mapping.front_projection is not None:
        front_value = mapping.front_projection(front_value) or None
    barcode_value = barcode_fields.get(mapping.barcode.value) or None

    base = dict(
        front_key=mapping.front.value,
        barcode_key=mapping.barcode.value,
        front_value=front_value,
        barcode_value=barcode_value,
        weight=mapping.weight,
    )
    if front_value and barcode_value:
        a = normalize_for_comparison(front_value)
        b = normalize_for_comparison(barcode_value)
        if a == b:
            return FieldMatchResult(classification=MatchClassification.MATCH,
                                    similarity=1.0, points=float(mapping.weight), **base)
        ratio = similarity(a, b)
        classification = (MatchClassification.PARTIAL_MATCH if ratio > PARTIAL_MATCH_THRESHOLD
                          else MatchClassification.MISMATCH)
        return FieldMatchResult(classification=classification, similarity=ratio,
                                points=mapping.weight * ratio, **base)
    if front_value:
        return FieldMatchResult(classification=MatchClassification.FRONT_ONLY, **base)
    if barcode_value:
        return FieldMatchResult(classification=MatchClassification.BARCODE_ONLY, **base)
    return FieldMatchResult(classification=MatchClassification.MISSING, **base)


def match_documents(front_fields: Optional[Mapping[str, str]],
                    barcode_fields: Optional[Mapping[str, str]],
                    raw_front_text: Optional[str] = "",
                    raw_barcode_payload: Optional[str] = "",
                    mappings: Tuple[FieldMapping, ...] = FIELD_MAPPINGS) -> MatchReport:
    """Score how well the two independently extracted field sets agree. Never raises."""
    front_fields = front_fields or {}
    barcode_fields = barcode_fields or {}

    shared = sorted(significant_words(raw_front_text) & significant_words(raw_barcode_payload))
    word_score = min(len(shared), MAX_WORD_MATCHES) * WORD_POINTS

    results: List[FieldMatchResult] = [compare_field(m, front_fields, barcode_fields) for m in mappings]
    field_score = sum(r.points for r in results)

    max_possible = sum(m.weight for m in mappings) + WORD_SCORE_CAP
    total = field_score + word_score
    percent = min(100, max(0, _round_half_up(100.0 * total / max_possible))) if max_possible else 0
    level = confidence_for(percent)

    logger.debug(
        "match_scored percent=%d field_score=%.2f word_score=%d words=%d confidence=%s",
        percent, field_score, word_score, len(shared), level.value,
    )
    return MatchReport(
        overall_score_percent=percent,
        field_results=results,
        word_overlap_count=len(shared),
        matched_words=shared,
        word_score=word_score,
        field_score=field_score,
        total_score=total,
        max_possible_score=max_possible,
        confidence_level=level,
    )
