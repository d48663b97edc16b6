"""Core validation helpers: input guards, request ids, full front/barcode pipeline."""

import logging
import time
import uuid
from typing import Optional

from crosscheck.core.config import get_settings
from crosscheck.extraction import barcode, ocr
from crosscheck.extraction.schemas import RawDocumentInput, ValidationResult
from crosscheck.matching.matcher import match_documents
from crosscheck.matching.report import format_report

logger = logging.getLogger("crosscheck.pipeline")


def generate_request_id() -> str:
    """Return a random hex string for correlation in logs/responses."""
    return uuid.uuid4().hex[:12]


def validate_source(doc: RawDocumentInput, max_kb: Optional[int] = None) -> RawDocumentInput:
    """Reject oversized inputs before any regex work.

    Raises ValueError with a concise error code string that maps directly to
    the user-facing error detail in API responses.
    """
    limit = (max_kb if max_kb is not None else get_settings().MAX_PAYLOAD_KB) * 1024
    for value in (doc.ocr_text, doc.barcode_payload):
        if value and len(value.encode("utf-8")) > limit:
            raise ValueError("payload_too_large")
    return doc


def validate_document(doc: RawDocumentInput,
                      request_id: Optional[str] = None,
                      scan_mode: Optional[str] = None) -> ValidationResult:
    """Run both extractors independently, then match their outputs.

    Absent inputs are not errors: they simply yield empty field maps and a
    low score.
    """
    request_id = request_id or generate_request_id()
    started = time.perf_counter()

    front_fields, ambiguous = ocr.extract_with_trace(doc.ocr_text)
    dialect, barcode_fields = barcode.decode_with_dialect(doc.barcode_payload, scan_mode)
    report = match_documents(front_fields, barcode_fields, doc.ocr_text or "", doc.barcode_payload or "")

    if ambiguous:
        logger.warning("ocr_ambiguous_fields request_id=%s fields=%s", request_id, ",".join(ambiguous))
    if not doc.ocr_text:
        logger.info("front_text_missing request_id=%s", request_id)
    if not doc.barcode_payload:
        logger.info("barcode_payload_missing request_id=%s", request_id)

    latency_ms = int((time.perf_counter() - started) * 1000)
    logger.info(
        "validation_complete request_id=%s dialect=%s front_fields=%d barcode_fields=%d score=%d confidence=%s latency_ms=%d",
        request_id,
        dialect.value if dialect else None,
        len(front_fields),
        len(barcode_fields),
        report.overall_score_percent,
        report.confidence_level.value,
        latency_ms,
    )
    return ValidationResult(
        request_id=request_id,
        front_fields=front_fields,
        barcode_fields=barcode_fields,
        barcode_dialect=dialect.value if dialect else None,
        ambiguous_fields=ambiguous,
        report=report,
        summary=format_report(report),
        needs_review=report.needs_review,
    )
