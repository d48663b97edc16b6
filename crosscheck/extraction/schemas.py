"""Pydantic models for API inputs/outputs around a single validation attempt.

Layers / roles:
    RawDocumentInput   : the two opaque strings from upstream capture (either may be absent).
    BarcodeDecodeResult: fields decoded from the back barcode + detected dialect.
    FrontExtractResult : fields extracted from front OCR text + ambiguous field keys.
    ValidationResult   : both field maps, the match report and review hints.

FieldMap values are plain display strings keyed by display field names
("Date of Birth", "License Number", ...), matching what presentation code expects.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from crosscheck.matching.schemas import MatchReport


class RawDocumentInput(BaseModel):
    """Raw capture output for one license; immutable once received."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "ocr_text": "CALIFORNIA DRIVER LICENSE\nDL C549417\nDOE JOHN ALLEN\nDOB 01/13/1976",
                "barcode_payload": "@\nANSI 636014040002DL00410278ZC03190024DLDAQC549417\nDCSDOE\nDACJOHN\nDBB01131976",
            }
        },
    )

    ocr_text: Optional[str] = Field(None, description="Free text recognized from the license front")
    barcode_payload: Optional[str] = Field(None, description="Decoded PDF417/QR payload from the back")

    def raw_dump(self, fields: Optional[Dict[str, str]] = None) -> str:
        """Human-readable dump of everything captured for this document."""
        out = "=== COMPLETE RAW LICENSE DATA ===\n\n"
        if self.ocr_text:
            out += f"FRONT LICENSE OCR TEXT:\n{self.ocr_text}\n\n"
        if self.barcode_payload:
            out += f"BACK LICENSE BARCODE DATA:\n{self.barcode_payload}\n\n"
        if fields:
            out += "EXTRACTED FIELDS:\n"
            for key, value in fields.items():
                out += f"{key}: {value}\n"
        return out


class BarcodeDecodeRequest(BaseModel):
    payload: str


class BarcodeDecodeResult(BaseModel):
    dialect: Optional[str] = None  # ansi | aamva | unstructured; None for empty payloads
    fields: Dict[str, str] = Field(default_factory=dict)


class FrontExtractRequest(BaseModel):
    text: str


class FrontExtractResult(BaseModel):
    fields: Dict[str, str] = Field(default_factory=dict)
    ambiguous_fields: List[str] = Field(default_factory=list)


class ValidationResult(BaseModel):
    """Everything produced for one validation attempt.

    needs_review is a hint for the presentation layer: a low score or any
    mismatch means "manual review", never a hard failure.
    """

    model_config = ConfigDict(frozen=True)

    request_id: str
    front_fields: Dict[str, str] = Field(default_factory=dict)
    barcode_fields: Dict[str, str] = Field(default_factory=dict)
    barcode_dialect: Optional[str] = None
    ambiguous_fields: List[str] = Field(default_factory=list)
    report: MatchReport
    summary: str = ""
    needs_review: bool = True


class BatchValidationRequest(BaseModel):
    documents: List[RawDocumentInput] = Field(default_factory=list)
