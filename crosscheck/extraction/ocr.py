"""Front-of-license OCR text -> FieldMap.

The extractor is an ordered cascade of OCR_RULES. Each rule owns a regex and
a builder turning the match into one or more field values. Rules are tried
top to bottom; a rule whose fields are all already populated is skipped, and
within a rule only still-empty fields are written. The first matching
surface form for a field therefore wins, and rule order is the only
tie-break.

extract_with_trace() also reports fields for which a lower-priority rule
would have produced a different value, so callers can log them as accuracy
risks.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from crosscheck.extraction.fields import CanonicalField as F, FieldMap, field_key
from crosscheck.extraction.normalizers import (
    format_height,
    format_weight,
    sex_from_code,
    to_proper_case,
)

logger = logging.getLogger("crosscheck.ocr")

Values = Dict[F, Optional[str]]
Builder = Callable[[re.Match], Values]

STREET_SUFFIXES = "ST|AVE|RD|BLVD|DR|LN|CT|PL|WAY|CIR|PKWY|HWY"
EYE_COLORS = (
    "BLU|BLUE|BRN|BROWN|GRN|GREEN|GRY|GRAY|HAZ|HAZEL|BLK|BLACK|AMB|AMBER|MUL|MULTI|"
    "PINK|PUR|PURPLE|YEL|YELLOW|WHI|WHITE|MAR|MARBLE|CHR|CHROME|GOL|GOLD|SIL|SILVER|"
    "COPPER|BURGUNDY|VIOLET|INDIGO|TEAL|TURQUOISE|AQUA|CYAN|LIME|OLIVE|NAVY|ROYAL|"
    "SKY|LIGHT|DARK|MED|MEDIUM"
)
DATE_TOKEN = r"(\d{1,2}/\d{1,2}/\d{4})"
NAME_TOKEN = r"[A-Z][A-Z'\-]*"

# Upper-case words that show up in runs next to names but are labels/values.
NAME_STOPWORDS = frozenset(
    """
    DRIVER DRIVERS LICENSE LIC CLASS DOB EXP ISS SEX HGT WGT EYES EYE HAIR REST RSTR
    END ENDORSEMENTS RESTRICTIONS NONE DONOR VETERAN REAL ID USA DL NO DD TYPE CDL
    STATE DEPARTMENT MOTOR VEHICLES IDENTIFICATION CARD ORGAN LN FN
    """.split()
) | frozenset(EYE_COLORS.split("|")) | frozenset(STREET_SUFFIXES.split("|"))


@dataclass(frozen=True)
class OcrRule:
    """One surface form for one or more fields.

    accept filters individual matches (the rule keeps scanning past rejected
    ones); the first accepted match is used.
    """

    name: str
    fields: Tuple[F, ...]
    pattern: re.Pattern
    build: Builder
    accept: Optional[Callable[[re.Match], bool]] = None

    def first_match(self, text: str) -> Optional[re.Match]:
        for m in self.pattern.finditer(text):
            if self.accept is None or self.accept(m):
                return m
        return None


def _rx(pattern: str, flags: int = 0) -> re.Pattern:
    return re.compile(pattern, flags)


def _one(field: F, transform: Callable[[str], Optional[str]] = lambda v: v, group: int = 1) -> Builder:
    return lambda m: {field: transform(m.group(group).strip())}


def _flag(field: F) -> Builder:
    return lambda m: {field: "Yes"}


# ---- builders with more than a single group ----

def _name_display(m: re.Match) -> Values:
    """Printed 'LAST FIRST MIDDLE' -> 'First Middle Last'."""
    last, first, middle = m.group(1).split()
    return {F.NAME: to_proper_case(f"{first} {middle} {last}")}


def _name_ok(m: re.Match) -> bool:
    return not any(tok in NAME_STOPWORDS for tok in m.group(1).split())


def _city_state_zip(m: re.Match) -> Values:
    return {
        F.CITY: to_proper_case(m.group(1)),
        F.STATE: to_proper_case(m.group(2)),
        F.ZIP_CODE: m.group(3),
    }


def _city_ok(m: re.Match) -> bool:
    return m.group(1) not in NAME_STOPWORDS


def _sex(m: re.Match) -> Values:
    return {F.SEX: sex_from_code(m.group(1))}


def _height(m: re.Match) -> Values:
    return {F.HEIGHT: format_height(m.group(1))}


def _not_none(field: F) -> Builder:
    def build(m: re.Match) -> Values:
        value = m.group(1).strip()
        if value.upper() == "NONE":
            return {field: None}
        return {field: to_proper_case(value)}
    return build


def _name_run(prefix: str) -> re.Pattern:
    # lookahead so overlapping runs are all visited
    return _rx(rf"{prefix}(?=\b({NAME_TOKEN}[ \t]+{NAME_TOKEN}[ \t]+{NAME_TOKEN})\b)")


OCR_RULES: Tuple[OcrRule, ...] = (
    # Name: field-number-prefixed run first, then any three-token run
    OcrRule("name_numbered", (F.NAME,), _name_run(r"(?<!\S)\d{1,2}\s+"), _name_display, _name_ok),
    OcrRule("name_run", (F.NAME,), _name_run(""), _name_display, _name_ok),

    OcrRule("dob", (F.DATE_OF_BIRTH,), _rx(rf"\bDOB[:.]?\s+{DATE_TOKEN}"), _one(F.DATE_OF_BIRTH)),

    OcrRule("license_labeled", (F.DRIVER_LICENSE_NUMBER,),
            _rx(r"\b(?:DL\s+)?NO[:.]?\s+([A-Z]\d{4,})\b"), _one(F.DRIVER_LICENSE_NUMBER)),
    OcrRule("license_bare", (F.DRIVER_LICENSE_NUMBER,),
            _rx(r"\b([A-Z]\d{6,8})\b"), _one(F.DRIVER_LICENSE_NUMBER)),

    OcrRule("state_header", (F.STATE,),
            _rx(r"^\s*([A-Z]+)\s+DRIVER\s+LICENSE", re.MULTILINE), _one(F.STATE, to_proper_case)),

    OcrRule("street", (F.ADDRESS,),
            _rx(rf"\b(\d+[ \t]+(?:[A-Z0-9]+[ \t]+)*?(?:{STREET_SUFFIXES}))\b"), _one(F.ADDRESS, to_proper_case)),
    OcrRule("city_comma", (F.CITY, F.STATE, F.ZIP_CODE),
            _rx(r"\b([A-Z]+),\s+([A-Z]{2})\s+(\d{5}(?:-\d{4})?)\b"), _city_state_zip, _city_ok),
    OcrRule("city_plain", (F.CITY, F.STATE, F.ZIP_CODE),
            _rx(r"\b([A-Z]+)[ \t]+([A-Z]{2})[ \t]+(\d{5}(?:-\d{4})?)\b"), _city_state_zip, _city_ok),

    OcrRule("issue", (F.ISSUE_DATE,), _rx(rf"\bISS[:.]?\s+{DATE_TOKEN}"), _one(F.ISSUE_DATE)),
    OcrRule("expiration", (F.EXPIRATION_DATE,), _rx(rf"\bEXP[:.]?\s+{DATE_TOKEN}"), _one(F.EXPIRATION_DATE)),

    # Sex: label artifact 'M8', then 'M SEX', then 'SEX M'
    OcrRule("sex_digit", (F.SEX,), _rx(r"\b([MF])\d{1,2}\b"), _sex),
    OcrRule("sex_before_label", (F.SEX,), _rx(r"\b([MF])\s+SEX\b"), _sex),
    OcrRule("sex_after_label", (F.SEX,), _rx(r"\bSEX[:.]?\s+([MF])\b"), _sex),

    # Height: most artifact-tolerant first, bare label+digits last
    OcrRule("height_period", (F.HEIGHT,), _rx(r"""(\d{1,2}['"]\s*\.\s*-?\s*\d{1,2}")"""), _height),
    OcrRule("height_quote", (F.HEIGHT,), _rx(r"""(\d{1,2}['"]\s*-?\s*\d{1,2}")"""), _height),
    OcrRule("height_label", (F.HEIGHT,), _rx(r"""\bHGT[:.]?\s+(\d{1,2}['"]?\s*-?\s*\d{0,2}"?)"""), _height),
    OcrRule("height_label_digits", (F.HEIGHT,), _rx(r"""\bHGT[:.]?\s+(\d{1,3})\b(?!['"-])"""), _height),

    OcrRule("weight_lb", (F.WEIGHT,), _rx(r"\b(\d{3})\s*lbs?\b", re.IGNORECASE), _one(F.WEIGHT, format_weight)),
    OcrRule("weight_label", (F.WEIGHT,), _rx(r"\bWGT[:.]?\s+(\d{3})"), _one(F.WEIGHT, format_weight)),

    # Eye color: bare vocabulary hit first, then label-adjacent forms
    OcrRule("eyes_bare", (F.EYE_COLOR,), _rx(rf"\b({EYE_COLORS})\b"), _one(F.EYE_COLOR, to_proper_case)),
    OcrRule("eyes_after_label", (F.EYE_COLOR,), _rx(r"\bEYES\s+([A-Z]+)\b"), _one(F.EYE_COLOR, to_proper_case)),
    OcrRule("eyes_before_label", (F.EYE_COLOR,), _rx(r"\b([A-Z]+)\s+EYES\b"), _one(F.EYE_COLOR, to_proper_case)),
    OcrRule("eyes_period", (F.EYE_COLOR,), _rx(r"\bEYES\.\s+([A-Z]+)\b"), _one(F.EYE_COLOR, to_proper_case)),

    OcrRule("hair", (F.HAIR_COLOR,), _rx(r"\bHAIR[:.]?\s+([A-Z]+)\b"), _one(F.HAIR_COLOR, to_proper_case)),
    OcrRule("class", (F.CLASS,), _rx(r"\bCLASS[:.]?\s+([A-Z0-9]{1,2})\b"), _one(F.CLASS)),
    OcrRule("restrictions", (F.RESTRICTIONS,),
            _rx(r"\b(?:RSTR|REST|RESTRICTIONS)[:.]?\s+([A-Z0-9]+)\b"), _not_none(F.RESTRICTIONS)),
    OcrRule("endorsements", (F.ENDORSEMENTS,),
            _rx(r"\b(?:END|ENDORSEMENTS)[:.]?\s+([A-Z0-9]+)\b"), _not_none(F.ENDORSEMENTS)),
    OcrRule("license_type", (F.LICENSE_TYPE,), _rx(r"\bTYPE[:.]?\s+([A-Z]+)\b"), _one(F.LICENSE_TYPE)),
    OcrRule("veteran", (F.VETERAN_STATUS,), _rx(r"\bVETERAN\b"), _flag(F.VETERAN_STATUS)),
    OcrRule("organ_donor", (F.ORGAN_DONOR,), _rx(r"\bDONOR\b"), _flag(F.ORGAN_DONOR)),
    OcrRule("real_id", (F.REAL_ID,), _rx(r"\bREAL\s*ID\b"), _flag(F.REAL_ID)),
    OcrRule("document_discriminator", (F.DOCUMENT_DISCRIMINATOR,),
            _rx(r"\bDD[:.]?\s+(\d+)\b"), _one(F.DOCUMENT_DISCRIMINATOR)),
)

AUDIT_RX = re.compile(r"\b(\d{10})\b")


def _apply(fields: FieldMap, values: Values) -> FieldMap:
    out = dict(fields)
    for field, value in values.items():
        key = field_key(field)
        if value and key not in out:
            out[key] = value
    return out


def _audit_number(fields: Mapping[str, str], text: str) -> FieldMap:
    """Bare 10-digit token, unless the same digits were already used as another value."""
    used = set(fields.values())
    for m in AUDIT_RX.finditer(text):
        if m.group(1) not in used:
            return _apply(fields, {F.AUDIT_NUMBER: m.group(1)})
    return dict(fields)


def extract_with_trace(text: Optional[str]) -> Tuple[FieldMap, List[str]]:
    """Run the cascade; return (fields, ambiguous field keys)."""
    if not text or not text.strip():
        return {}, []
    fields: FieldMap = {}
    winners: Dict[str, str] = {}
    ambiguous: List[str] = []
    for rule in OCR_RULES:
        keys = [field_key(f) for f in rule.fields]
        m = rule.first_match(text)
        if m is None:
            continue
        values = rule.build(m)
        if all(k in fields for k in keys):
            # already decided by a higher-priority rule; note disagreement
            for field, value in values.items():
                key = field_key(field)
                if value and fields.get(key) != value and key not in ambiguous:
                    ambiguous.append(key)
            continue
        updated = _apply(fields, values)
        for key in updated.keys() - fields.keys():
            winners[key] = rule.name
        fields = updated
    fields = _audit_number(fields, text)
    logger.debug("ocr_extracted fields=%d rules=%s ambiguous=%s", len(fields), winners, ambiguous)
    return fields, ambiguous


def extract(text: Optional[str]) -> FieldMap:
    """Extract canonical fields from raw front-side OCR text. Never raises."""
    return extract_with_trace(text)[0]
