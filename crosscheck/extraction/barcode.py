"""Barcode payload decoder (PDF417 / QR text on the back of a US driver license).

Flows handled:
    - ANSI line records   : payload contains "ANSI"; one "DXXvalue" element per line,
                            plus the subfile header carrying the license number.
    - AAMVA caret records : payload starts with "^"; elements separated by "$".
    - Unstructured        : neither marker; pattern extraction of name, date, license.

After the dialect pass an embedded field-code scan re-reads the payload split
on every candidate delimiter, filling only fields the dialect pass left empty.
Finally the name parts are consolidated into a single "Name" field.

The code table (BARCODE_RULES) is the only place element codes are mapped to
fields; dialect-specific behavior is expressed as rule overrides.
"""

import logging
import re
from dataclasses import dataclass, replace
from enum import Enum
from functools import reduce
from typing import Callable, Dict, Iterable, Mapping, Optional, Tuple

from crosscheck.core.config import EMBEDDED_SCAN_MODES, get_settings
from crosscheck.extraction.fields import (
    CanonicalField as F,
    FieldMap,
    field_key,
    fill_missing,
    with_field,
)
from crosscheck.extraction.normalizers import (
    format_date,
    format_height,
    format_weight,
    sex_from_code,
    to_proper_case,
)

logger = logging.getLogger("crosscheck.barcode")

Transform = Callable[[str], Optional[str]]

CODE_RX = re.compile(r"^[A-Z]{3}$")
ANSI_HEADER_RX = re.compile(r"^[^A-Za-z0-9]*ANSI\s*\d")  # "ANSI " + issuer id, not a value containing ANSI
ANSI_DAQ_RX = re.compile(r"DAQ([A-Z0-9]+)\s*$")
ANSI_LICENSE_RX = re.compile(r"(?<!D)([A-Z]\d{4,})\s*$")  # not the 'DL' designator + offsets
NAME_PAIR_RX = re.compile(r"\b([A-Z]+)\s+([A-Z]+)\b")
DATE_RX = re.compile(r"\d{2}/\d{2}/\d{4}")
LICENSE_TOKEN_RX = re.compile(r"\b(?=[A-Z0-9]*\d)[A-Z0-9]{6,}\b")

EMBEDDED_DELIMITERS = ("\n", "\r", " ", "$", "^", "|")
EMBEDDED_MIN_TOKEN = 6
TRIVIAL_VALUES = {"", "NONE", "UNK", "N"}


class Dialect(str, Enum):
    ANSI = "ansi"
    AAMVA = "aamva"
    UNSTRUCTURED = "unstructured"


# ---- value transforms ----

def _identity(value: str) -> Optional[str]:
    return value


def _height(value: str) -> Optional[str]:
    return format_height(value)


def _sex(value: str) -> Optional[str]:
    return sex_from_code(value)


def _yes_flag(value: str) -> Optional[str]:
    return "Yes" if value.strip().upper() in {"1", "Y", "YES"} else None


def _full_name(value: str) -> Optional[str]:
    """DAA full name; 'LAST,FIRST,MIDDLE' is reordered to display order."""
    if "," in value:
        parts = [p.strip() for p in value.split(",") if p.strip()]
        if len(parts) >= 2:
            value = " ".join(parts[1:] + parts[:1])
    return to_proper_case(value)


def license_last7(value: str) -> Optional[str]:
    """Keep the discriminating tail of long license numbers."""
    return value[-7:] if len(value) >= 7 else value


@dataclass(frozen=True)
class BarcodeRule:
    """One element code -> canonical field mapping.

    shape is the value pattern required by the strict embedded scan; None
    means any non-empty value is acceptable.
    """

    code: str
    field: F
    transform: Transform = _identity
    shape: Optional[re.Pattern] = None


_DATE8 = re.compile(r"^\d{8}$")
_DIGITS = re.compile(r"^\d{2,3}(?:\s*(?:in|IN|lb|LB|lbs|LBS))?$")
_SEXCODE = re.compile(r"^[12MF]$")
_ALPHA = re.compile(r"^[A-Za-z][A-Za-z .'\-]*$")
_LICENSE = re.compile(r"^[A-Z0-9]{4,}$")
_ZIP = re.compile(r"^\d{5}(?:-?\d{4})?\s*$")

BARCODE_RULES: Tuple[BarcodeRule, ...] = (
    BarcodeRule("DAA", F.NAME, _full_name, _ALPHA),
    BarcodeRule("DAC", F.FIRST_NAME, to_proper_case, _ALPHA),
    BarcodeRule("DAD", F.MIDDLE_NAME, to_proper_case, _ALPHA),
    BarcodeRule("DCS", F.LAST_NAME, to_proper_case, _ALPHA),
    BarcodeRule("DBB", F.DATE_OF_BIRTH, format_date, _DATE8),
    BarcodeRule("DBA", F.EXPIRATION_DATE, format_date, _DATE8),
    BarcodeRule("DCH", F.ISSUE_DATE, format_date, _DATE8),
    BarcodeRule("DBD", F.ISSUE_DATE, format_date, _DATE8),
    BarcodeRule("DBC", F.SEX, _sex, _SEXCODE),
    BarcodeRule("DAU", F.HEIGHT, _height, _DIGITS),
    BarcodeRule("DAW", F.WEIGHT, format_weight, _DIGITS),
    BarcodeRule("DAY", F.EYE_COLOR, to_proper_case, _ALPHA),
    BarcodeRule("DAZ", F.HAIR_COLOR, to_proper_case, _ALPHA),
    BarcodeRule("DAG", F.STREET_ADDRESS, to_proper_case),
    BarcodeRule("DCJ", F.ADDRESS, to_proper_case),
    BarcodeRule("DAI", F.CITY, to_proper_case, _ALPHA),
    BarcodeRule("DCK", F.CITY, to_proper_case, _ALPHA),
    BarcodeRule("DCI", F.STATE, _identity, _ALPHA),
    BarcodeRule("DCL", F.STATE, to_proper_case, _ALPHA),
    BarcodeRule("DAJ", F.STATE, to_proper_case, _ALPHA),
    BarcodeRule("DCM", F.ZIP_CODE, _identity, _ZIP),
    BarcodeRule("DAK", F.ZIP_CODE, _identity, _ZIP),
    BarcodeRule("DAQ", F.LICENSE_NUMBER, _identity, _LICENSE),
    BarcodeRule("DCA", F.LICENSE_NUMBER, _identity, _LICENSE),
    BarcodeRule("DCD", F.CLASS),
    BarcodeRule("DCF", F.RESTRICTIONS),
    BarcodeRule("DCG", F.ENDORSEMENTS),
    BarcodeRule("DDL", F.VETERAN_STATUS, _yes_flag, re.compile(r"^[01YN]$")),
)


def build_code_table(rules: Iterable[BarcodeRule],
                     overrides: Optional[Mapping[str, Transform]] = None) -> Dict[str, BarcodeRule]:
    """Index rules by code, swapping in dialect-specific transforms."""
    table = {r.code: r for r in rules}
    for code, transform in (overrides or {}).items():
        table[code] = replace(table[code], transform=transform)
    return table


CODE_TABLE = build_code_table(BARCODE_RULES)
AAMVA_CODE_TABLE = build_code_table(
    BARCODE_RULES,
    overrides={"DAQ": license_last7, "DCA": license_last7},
)


def catch_all_key(code: str) -> str:
    """Readable key for an element code the table does not know ('DDE' -> 'Dde')."""
    return code.replace("_", " ").title()


def is_trivial(value: str) -> bool:
    return value.strip().upper() in TRIVIAL_VALUES


def split_element(record: str) -> Optional[Tuple[str, str]]:
    """'DCSDOE' -> ('DCS', 'DOE'); None for records shorter than a code."""
    if len(record) < 3:
        return None
    return record[:3], record[3:].strip()


def decode_element(fields: FieldMap, record: str, table: Mapping[str, BarcodeRule]) -> FieldMap:
    """Fold one element record into a new field map (later elements replace)."""
    element = split_element(record)
    if element is None:
        return fields
    code, value = element
    rule = table.get(code)
    if rule is not None:
        if not value:
            return fields
        return with_field(fields, rule.field, rule.transform(value))
    if CODE_RX.match(code) and not is_trivial(value):
        return with_field(fields, catch_all_key(code), value)
    return fields


def decode_records(records: Iterable[str], table: Mapping[str, BarcodeRule]) -> FieldMap:
    return reduce(lambda acc, rec: decode_element(acc, rec, table), records, {})


# ---- dialects ----

def detect_dialect(payload: str) -> Dialect:
    if "ANSI" in payload:
        return Dialect.ANSI
    if payload.startswith("^"):
        return Dialect.AAMVA
    return Dialect.UNSTRUCTURED


def is_ansi_header(line: str) -> bool:
    return bool(ANSI_HEADER_RX.match(line))


def ansi_header_license(lines: Iterable[str]) -> Optional[str]:
    """License number trailing the 'ANSI ... DL' subfile header line."""
    for line in lines:
        if is_ansi_header(line) and "DL" in line:
            m = ANSI_DAQ_RX.search(line) or ANSI_LICENSE_RX.search(line)
            if m:
                return m.group(1)
    return None


def decode_ansi(payload: str) -> FieldMap:
    lines = payload.splitlines()
    header_license = ansi_header_license(lines)
    body = [ln for ln in lines if not is_ansi_header(ln)]
    fields = decode_records(body, CODE_TABLE)
    # header value is authoritative over a possibly truncated element line
    return with_field(fields, F.LICENSE_NUMBER, header_license)


def decode_aamva(payload: str) -> FieldMap:
    components = [c.lstrip("^") for c in payload.split("$")]
    return decode_records(components, AAMVA_CODE_TABLE)


def decode_unstructured(payload: str) -> FieldMap:
    fields: FieldMap = {}
    m = NAME_PAIR_RX.search(payload)
    if m:
        name = f"{to_proper_case(m.group(1))} {to_proper_case(m.group(2))}"
        fields = with_field(fields, F.NAME, name)
    m = DATE_RX.search(payload)
    if m:
        fields = with_field(fields, F.DATE, m.group(0))
    m = LICENSE_TOKEN_RX.search(payload)
    if m:
        fields = with_field(fields, F.LICENSE_NUMBER, license_last7(m.group(0)))
    return fields


_DIALECT_DECODERS = {
    Dialect.ANSI: decode_ansi,
    Dialect.AAMVA: decode_aamva,
    Dialect.UNSTRUCTURED: decode_unstructured,
}


# ---- embedded code fallback ----

def _embedded_value(token: str, strict: bool) -> Optional[Tuple[BarcodeRule, str]]:
    code, value = token[:3], token[3:].strip()
    rule = CODE_TABLE.get(code)
    if rule is None or not value or is_trivial(value):
        return None
    if strict and rule.shape is not None and not rule.shape.match(value):
        return None
    return rule, value


def scan_embedded_codes(payload: str, mode: Optional[str] = None) -> FieldMap:
    """Recover code+value tokens from payloads without clean record delimiters.

    mode: 'off' disables the scan; 'lenient' accepts any known code prefix on a
    token of 6+ characters; 'strict' additionally requires the value to match
    the rule's shape. The first hit per field wins.
    """
    mode = mode or get_settings().EMBEDDED_SCAN_MODE
    if mode not in EMBEDDED_SCAN_MODES:
        raise ValueError(f"embedded scan mode must be one of {EMBEDDED_SCAN_MODES}, got {mode!r}")
    if mode == "off" or not payload:
        return {}
    strict = mode == "strict"
    fields: FieldMap = {}
    for delimiter in EMBEDDED_DELIMITERS:
        for token in payload.split(delimiter):
            token = token.strip()
            if len(token) < EMBEDDED_MIN_TOKEN:
                continue
            hit = _embedded_value(token, strict)
            if hit is None:
                continue
            rule, value = hit
            if field_key(rule.field) in fields:
                continue
            fields = with_field(fields, rule.field, rule.transform(value))
    return fields


# ---- name consolidation ----

def consolidate_name(fields: Mapping[str, str]) -> FieldMap:
    """Derive 'Name': explicit full name first, else 'First [Middle] Last'."""
    if fields.get(F.NAME.value):
        return dict(fields)
    parts = [fields.get(f.value, "") for f in (F.FIRST_NAME, F.MIDDLE_NAME, F.LAST_NAME)]
    if not (parts[0] or parts[2]):
        return dict(fields)
    return with_field(fields, F.NAME, " ".join(p for p in parts if p))


def decode_with_dialect(payload: Optional[str], scan_mode: Optional[str] = None) -> Tuple[Optional[Dialect], FieldMap]:
    """Decode a raw payload, returning the detected dialect alongside the fields."""
    if not payload or not payload.strip():
        return None, {}
    dialect = detect_dialect(payload)
    primary = _DIALECT_DECODERS[dialect](payload)
    # embedded scan only runs against the finished primary map
    embedded = scan_embedded_codes(payload, scan_mode)
    merged = fill_missing(primary, embedded)
    fields = consolidate_name(merged)
    logger.debug(
        "barcode_decoded dialect=%s primary=%d embedded_filled=%d total=%d",
        dialect.value, len(primary), len(merged) - len(primary), len(fields),
    )
    return dialect, fields


def decode(payload: Optional[str], scan_mode: Optional[str] = None) -> FieldMap:
    """Decode a raw barcode payload into a FieldMap. Never raises."""
    return decode_with_dialect(payload, scan_mode)[1]
