"""Canonical field vocabulary shared by the barcode decoder, OCR extractor and matcher.

Internally every rule targets a CanonicalField member; the display string
(the enum value) is the key used in FieldMap dictionaries handed to callers.
Unrecognized barcode element codes are the only keys outside the enum (see
barcode.catch_all_key).
"""

from enum import Enum
from typing import Dict, Mapping, Optional, Union

FieldMap = Dict[str, str]


class CanonicalField(str, Enum):
    # Person
    NAME = "Name"
    FIRST_NAME = "First Name"
    MIDDLE_NAME = "Middle Name"
    LAST_NAME = "Last Name"
    DATE_OF_BIRTH = "Date of Birth"
    SEX = "Sex"
    HEIGHT = "Height"
    WEIGHT = "Weight"
    EYE_COLOR = "Eye Color"
    HAIR_COLOR = "Hair Color"

    # Address
    ADDRESS = "Address"
    STREET_ADDRESS = "Street Address"
    CITY = "City"
    STATE = "State"
    ZIP_CODE = "ZIP Code"

    # License
    DRIVER_LICENSE_NUMBER = "Driver License Number"  # front side label
    LICENSE_NUMBER = "License Number"                # barcode side label
    CLASS = "Class"
    RESTRICTIONS = "Restrictions"
    ENDORSEMENTS = "Endorsements"
    ISSUE_DATE = "Issue Date"
    EXPIRATION_DATE = "Expiration Date"
    LICENSE_TYPE = "License Type"
    DOCUMENT_DISCRIMINATOR = "Document Discriminator"
    AUDIT_NUMBER = "Audit Number"
    DATE = "Date"  # undated-context date from unstructured payloads

    # Indicators
    VETERAN_STATUS = "Veteran Status"
    ORGAN_DONOR = "Organ Donor"
    REAL_ID = "REAL ID"


FieldKey = Union[CanonicalField, str]

_BY_DISPLAY = {f.value: f for f in CanonicalField}


def field_key(field: FieldKey) -> str:
    """Display-string key for a canonical field (or a pass-through string key)."""
    return field.value if isinstance(field, CanonicalField) else field


def parse_field(key: str) -> Optional[CanonicalField]:
    return _BY_DISPLAY.get(key)


def fill_missing(primary: Mapping[str, str], secondary: Mapping[str, str]) -> FieldMap:
    """Return a new map: primary values win, secondary only fills absent keys."""
    merged: FieldMap = dict(primary)
    for k, v in secondary.items():
        if k not in merged:
            merged[k] = v
    return merged


def with_field(fields: Mapping[str, str], field: FieldKey, value: Optional[str]) -> FieldMap:
    """Return a new map with field set to value (replacing); None/empty leaves it untouched."""
    if value is None or value == "":
        return dict(fields)
    out = dict(fields)
    out[field_key(field)] = value
    return out
