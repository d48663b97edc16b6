"""Pydantic models for cross-document match reports.

Layers / roles:
    MatchClassification : per-field outcome of comparing front vs barcode values.
    ConfidenceLevel     : five-bucket summary of the overall percentage.
    FieldMatchResult    : one row of the weighted mapping table, evaluated.
    MatchReport         : aggregate score, per-field rows and raw word overlap.

All models are frozen; a report is built once per validation attempt.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class MatchClassification(str, Enum):
    MATCH = "match"
    PARTIAL_MATCH = "partial_match"
    MISMATCH = "mismatch"
    FRONT_ONLY = "front_only"
    BARCODE_ONLY = "barcode_only"
    MISSING = "missing"


class ConfidenceLevel(str, Enum):
    VERY_HIGH = "Very High"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    VERY_LOW = "Very Low"


class FieldMatchResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    front_key: str
    barcode_key: str
    front_value: Optional[str] = None
    barcode_value: Optional[str] = None
    classification: MatchClassification
    similarity: Optional[float] = Field(None, ge=0.0, le=1.0)  # set when both sides present
    weight: int
    points: float = 0.0


class MatchReport(BaseModel):
    """Weighted agreement between the front OCR fields and the barcode fields.

    overall_score_percent : round(100 * total_score / max_possible_score), 0..100.
    word_overlap_count    : significant words shared by both raw texts (uncapped count).
    matched_words         : those words, sorted.
    word_score            : points from word overlap (2 per word, capped).
    """

    model_config = ConfigDict(frozen=True)

    overall_score_percent: int = Field(..., ge=0, le=100)
    field_results: List[FieldMatchResult] = Field(default_factory=list)
    word_overlap_count: int = 0
    matched_words: List[str] = Field(default_factory=list)
    word_score: int = 0
    field_score: float = 0.0
    total_score: float = 0.0
    max_possible_score: int
    confidence_level: ConfidenceLevel

    def count(self, classification: MatchClassification) -> int:
        return sum(1 for r in self.field_results if r.classification == classification)

    @property
    def needs_review(self) -> bool:
        """Low confidence or any reportable mismatch should go to manual review."""
        return (
            self.confidence_level in (ConfidenceLevel.LOW, ConfidenceLevel.VERY_LOW)
            or self.count(MatchClassification.MISMATCH) > 0
        )
