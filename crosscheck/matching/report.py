"""Plain-text rendering of a MatchReport for logs, e-mail and review queues."""

from typing import List

from crosscheck.matching.matcher import WORD_SCORE_CAP
from crosscheck.matching.schemas import MatchClassification as C, MatchReport

MAX_LISTED_WORDS = 10
RULE = "-" * 40


def _pct(value: float) -> str:
    return f"{int(value * 100)}%"


def format_report(report: MatchReport) -> str:
    field_max = report.max_possible_score - WORD_SCORE_CAP
    lines: List[str] = [
        "MATCHING ANALYSIS",
        RULE,
        f"Overall Score: {report.overall_score_percent}% "
        f"({report.total_score:.0f}/{report.max_possible_score})",
        f"Field Matching: {report.field_score:.0f}/{field_max}",
        f"Raw Word Matching: {report.word_score}/{WORD_SCORE_CAP}",
        "",
    ]

    if report.matched_words:
        lines.append(f"RAW WORD MATCHES ({report.word_overlap_count} found):")
        lines.extend(f"   '{w}'" for w in report.matched_words[:MAX_LISTED_WORDS])
        hidden = report.word_overlap_count - MAX_LISTED_WORDS
        if hidden > 0:
            lines.append(f"   ... and {hidden} more")
        lines.append("")

    matches, mismatches = [], []
    for r in report.field_results:
        pair = f"{r.front_key} <-> {r.barcode_key}"
        if r.classification == C.MATCH:
            matches.append(f"[match] {pair}: {r.front_value}")
        elif r.classification == C.PARTIAL_MATCH:
            matches.append(f"[partial] {pair}: {r.front_value} ~ {r.barcode_value} ({_pct(r.similarity or 0.0)})")
        elif r.classification == C.MISMATCH:
            mismatches.append(f"[mismatch] {pair}: {r.front_value} != {r.barcode_value}")
        elif r.classification == C.FRONT_ONLY:
            mismatches.append(f"[front only] {r.front_key}: {r.front_value}")
        elif r.classification == C.BARCODE_ONLY:
            mismatches.append(f"[barcode only] {r.barcode_key}: {r.barcode_value}")

    if matches:
        lines.append("FIELD MATCHES:")
        lines.extend(matches)
        lines.append("")
    if mismatches:
        lines.append("FIELD MISMATCHES:")
        lines.extend(mismatches)
        lines.append("")

    lines.append(f"CONFIDENCE LEVEL: {report.confidence_level.value}")
    return "\n".join(lines)
