import logging

import pytest

from crosscheck.extraction.processing import (
    generate_request_id,
    validate_document,
    validate_source,
)
from crosscheck.extraction.schemas import RawDocumentInput
from crosscheck.matching.schemas import ConfidenceLevel, MatchClassification as C


def test_consistent_document_validates(front_text, ansi_payload):
    doc = RawDocumentInput(ocr_text=front_text, barcode_payload=ansi_payload)
    result = validate_document(doc, request_id="abc123", scan_mode="lenient")

    assert result.request_id == "abc123"
    assert result.barcode_dialect == "ansi"
    assert result.front_fields["Driver License Number"] == "C549417"
    assert result.barcode_fields["License Number"] == "C549417"
    assert result.report.count(C.MATCH) == 14
    assert result.report.confidence_level in (ConfidenceLevel.HIGH, ConfidenceLevel.VERY_HIGH)
    assert not result.needs_review
    assert result.summary.startswith("MATCHING ANALYSIS")


def test_missing_inputs_degrade_to_low_score():
    result = validate_document(RawDocumentInput(), scan_mode="off")
    assert result.front_fields == {}
    assert result.barcode_fields == {}
    assert result.barcode_dialect is None
    assert result.report.overall_score_percent == 0
    assert result.needs_review
    assert len(result.request_id) == 12


def test_pipeline_logs_completion_and_ambiguity(caplog):
    caplog.set_level(logging.INFO, logger="crosscheck.pipeline")
    validate_document(RawDocumentInput(ocr_text="SEX M\nF12"), request_id="r1", scan_mode="off")
    messages = [r.getMessage() for r in caplog.records]
    assert any(m.startswith("ocr_ambiguous_fields request_id=r1 fields=Sex") for m in messages)
    assert any(m.startswith("validation_complete request_id=r1") and "latency_ms=" in m for m in messages)


def test_validate_source_rejects_oversized_input():
    big = RawDocumentInput(ocr_text="X" * 2048)
    with pytest.raises(ValueError, match="payload_too_large"):
        validate_source(big, max_kb=1)
    assert validate_source(RawDocumentInput(ocr_text="X" * 1024), max_kb=1).ocr_text


def test_request_ids_are_unique():
    assert generate_request_id() != generate_request_id()


def test_raw_dump_lists_everything(front_text, ansi_payload):
    doc = RawDocumentInput(ocr_text=front_text, barcode_payload=ansi_payload)
    dump = doc.raw_dump({"Name": "John Allen Doe"})
    assert dump.startswith("=== COMPLETE RAW LICENSE DATA ===")
    assert "FRONT LICENSE OCR TEXT:" in dump
    assert "BACK LICENSE BARCODE DATA:" in dump
    assert "Name: John Allen Doe" in dump


def test_raw_document_is_immutable():
    doc = RawDocumentInput(ocr_text="x")
    with pytest.raises(Exception):
        doc.ocr_text = "y"
