"""License validation API endpoints (decode, extract, validate one, validate batch)."""

from fastapi import APIRouter, HTTPException, Depends
from typing import List
import logging

from crosscheck.core.config import get_settings
from crosscheck.extraction import barcode, ocr
from crosscheck.extraction.processing import (
    generate_request_id,
    validate_document,
    validate_source,
)
from crosscheck.extraction.schemas import (
    BarcodeDecodeRequest,
    BarcodeDecodeResult,
    BatchValidationRequest,
    FrontExtractRequest,
    FrontExtractResult,
    RawDocumentInput,
    ValidationResult,
)

logger = logging.getLogger("crosscheck.api")
router = APIRouter()


def _guard(doc: RawDocumentInput, settings) -> RawDocumentInput:
    try:
        return validate_source(doc, settings.MAX_PAYLOAD_KB)
    except ValueError as ve:
        logger.warning("input_rejected reason=%s", ve)
        raise HTTPException(400, str(ve))


@router.post(
    "/decode/barcode",
    summary="Decode a raw barcode payload into named fields",
    response_model=BarcodeDecodeResult,
    responses={400: {"description": "Payload too large"}},
)
async def decode_barcode(body: BarcodeDecodeRequest, settings=Depends(get_settings)):
    _guard(RawDocumentInput(barcode_payload=body.payload), settings)
    dialect, fields = barcode.decode_with_dialect(body.payload, settings.EMBEDDED_SCAN_MODE)
    return BarcodeDecodeResult(dialect=dialect.value if dialect else None, fields=fields)


@router.post(
    "/extract/front",
    summary="Extract named fields from front-side OCR text",
    response_model=FrontExtractResult,
    responses={400: {"description": "Text too large"}},
)
async def extract_front(body: FrontExtractRequest, settings=Depends(get_settings)):
    _guard(RawDocumentInput(ocr_text=body.text), settings)
    fields, ambiguous = ocr.extract_with_trace(body.text)
    return FrontExtractResult(fields=fields, ambiguous_fields=ambiguous)


@router.post(
    "/validate",
    summary="Cross-check ONE license (front OCR text vs barcode payload)",
    response_model=ValidationResult,
    responses={400: {"description": "Input too large"}},
)
async def validate_one(doc: RawDocumentInput, settings=Depends(get_settings)):
    _guard(doc, settings)
    return validate_document(doc, request_id=generate_request_id(), scan_mode=settings.EMBEDDED_SCAN_MODE)


@router.post(
    "/validate/batch",
    summary="Cross-check MANY independent licenses",
    response_model=List[ValidationResult],
    responses={400: {"description": "No documents, too many documents or input too large"}},
)
async def validate_batch(body: BatchValidationRequest, settings=Depends(get_settings)):
    if not body.documents:
        raise HTTPException(400, "provide_documents")
    if len(body.documents) > settings.MAX_BATCH:
        raise HTTPException(400, f"batch_too_large max={settings.MAX_BATCH}")
    rid = generate_request_id()
    docs = [_guard(d, settings) for d in body.documents]
    # each document is independent; results keep request order
    results = [
        validate_document(d, request_id=f"{rid}-d{idx}", scan_mode=settings.EMBEDDED_SCAN_MODE)
        for idx, d in enumerate(docs)
    ]
    logger.info("batch_complete request_id=%s docs=%d needs_review=%d",
                rid, len(results), sum(1 for r in results if r.needs_review))
    return results
