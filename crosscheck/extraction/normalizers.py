"""Field value normalizers: raw tokens -> canonical display strings.

Every function here is total over strings (None is treated as empty) and
idempotent on its own output, so values can be pushed through twice (e.g. a
barcode transform followed by display formatting) without drift.

Canonical shapes:
    dates   -> MM/DD/YYYY (only reinterpreted from exactly 8 digits MMDDYYYY)
    heights -> F'I" (N")  (F' (N") when inches are zero; N" for bare values <= 12)
    weights -> N lbs
    sex     -> Male / Female (policy dependent, see sex_from_code)
"""

import re
import string
from typing import Callable, Dict, Optional

from crosscheck.core.config import SEX_CODE_POLICIES, get_settings

DATE8_RX = re.compile(r"^\d{8}$")
CANONICAL_HEIGHT_RX = re.compile(r"""^\d+'(?:\d+")?\s\(\d+"\)$""")
INCHES_ONLY_RX = re.compile(r'^(\d+)"$')
FEET_INCHES_RX = re.compile(r"""^(\d{1,2})\s*['"]\s*\.?\s*-?\s*(\d{1,2})\s*"?$""")  # 5'9", 5'-09", 5'. -09"
DASH_RX = re.compile(r"^(\d{1,2})\s*-\s*(\d{1,2})$")                              # 5-9
FEET_ONLY_RX = re.compile(r"^(\d{1,2})\s*'$")                                       # 5'
BARE_INCHES_RX = re.compile(r"^(\d{1,3})(?:\s*(?:in|IN|In))?$")                     # 069, 69 in
WEIGHT_RX = re.compile(r"^(\d{2,3})(?:\s*(?:lbs?|LBS?|Lbs?))?$")

_PUNCT = string.punctuation


def _is_caps_like(word: str) -> bool:
    clean = word.strip(_PUNCT)
    return (
        not clean
        or len(clean) <= 2
        or clean.isdigit()
        or (clean.isalpha() and clean.isupper())
    )


def _capitalize_word(word: str) -> str:
    return word[:1].upper() + word[1:].lower()


def to_proper_case(text: Optional[str]) -> str:
    """Title-case ALL-CAPS text; leave mixed-case text untouched.

    A text qualifies when every space-delimited word is short (<= 2 chars),
    numeric or fully upper-case.
    """
    if not text:
        return ""
    words = text.split(" ")
    if all(_is_caps_like(w) for w in words):
        return " ".join(_capitalize_word(w) for w in words)
    return text


def format_date(raw: Optional[str]) -> str:
    """Reformat an AAMVA MMDDYYYY date to MM/DD/YYYY; anything else unchanged."""
    if not raw:
        return ""
    value = raw.strip()
    if DATE8_RX.match(value):
        return f"{value[:2]}/{value[2:4]}/{value[4:]}"
    return raw


def feet_inches_from_total_inches(total: int) -> str:
    feet, inches = divmod(total, 12)
    if inches == 0:
        return f"{feet}'"
    return f"{feet}'{inches}\""


def _with_total(total: int) -> str:
    return f"{feet_inches_from_total_inches(total)} ({total}\")"


def format_height(raw: Optional[str]) -> str:
    """Normalize a height token to F'I" (N").

    Accepts feet/inches notation (5-9, 5'9", 5'-09", 5'), or a bare integer
    taken as total inches (069, 69 in). Bare values <= 12 are ambiguous and
    kept as inches only (N"). Unparseable input is returned unchanged.
    """
    if not raw:
        return ""
    value = raw.strip()
    if CANONICAL_HEIGHT_RX.match(value):
        return value
    m = FEET_INCHES_RX.match(value) or DASH_RX.match(value)
    if m:
        return _with_total(int(m.group(1)) * 12 + int(m.group(2)))
    m = FEET_ONLY_RX.match(value)
    if m:
        return _with_total(int(m.group(1)) * 12)
    m = INCHES_ONLY_RX.match(value) or BARE_INCHES_RX.match(value)
    if m:
        inches = int(m.group(1))
        if inches <= 12:
            return f"{inches}\""
        return _with_total(inches)
    return raw


def format_weight(raw: Optional[str]) -> str:
    """'185', '185lb', '185 LBS' -> '185 lbs'; other shapes unchanged (e.g. metric)."""
    if not raw:
        return ""
    value = raw.strip()
    m = WEIGHT_RX.match(value)
    if m:
        return f"{int(m.group(1))} lbs"
    return raw


# ---- Sex code policy ----
# The legacy mapping collapses every non-male code to Female. It is kept as the
# default and selectable per call or via SEX_CODE_POLICY.

SexPolicy = Callable[[str], Optional[str]]

_MALE_CODES = {"1", "M", "MALE"}
_FEMALE_CODES = {"2", "F", "FEMALE"}


def binary_sex_policy(code: str) -> Optional[str]:
    return "Male" if code in _MALE_CODES else "Female"


def strict_sex_policy(code: str) -> Optional[str]:
    if code in _MALE_CODES:
        return "Male"
    if code in _FEMALE_CODES:
        return "Female"
    return None


SEX_POLICIES: Dict[str, SexPolicy] = {
    "binary": binary_sex_policy,
    "strict": strict_sex_policy,
}


def sex_from_code(code: Optional[str], policy: Optional[str] = None) -> Optional[str]:
    """Map a sex code ('1', 'M', 'Male', ...) through the configured policy.

    Returns None only under a policy that declines to map the code; callers
    then leave the field absent. An unknown policy name raises ValueError.
    """
    name = policy or get_settings().SEX_CODE_POLICY
    if name not in SEX_POLICIES:
        raise ValueError(f"sex code policy must be one of {SEX_CODE_POLICIES}, got {name!r}")
    return SEX_POLICIES[name]((code or "").strip().upper())


def normalize_for_comparison(text: Optional[str]) -> str:
    """Case-folded, alphanumeric-only form used for cross-source equality."""
    return re.sub(r"[^a-z0-9]", "", (text or "").lower())
