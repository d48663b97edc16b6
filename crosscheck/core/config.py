"""Runtime configuration helpers.

This module centralizes environment-driven runtime switches so the rest of the
codebase can import a single cached Settings instance.

Env vars (optional) and their roles:
        DEBUG_EXTRACTION   -> Verbose logging toggle (rule hits, dialect choice, ambiguity).
        MAX_PAYLOAD_KB     -> Upper bound for each raw input string (OCR text / barcode payload).
        MAX_BATCH          -> Max documents accepted by the batch validation endpoint.
        EMBEDDED_SCAN_MODE -> Strictness of the embedded field-code fallback scan: off | lenient | strict.
        SEX_CODE_POLICY    -> How barcode/OCR sex codes map to display values: binary | strict.
"""

import os
from functools import lru_cache
from dotenv import load_dotenv

load_dotenv()

EMBEDDED_SCAN_MODES = ("off", "lenient", "strict")
SEX_CODE_POLICIES = ("binary", "strict")


class Settings:
        """Central runtime switches.

        Design notes:
        - Values read once at process start and memoized via get_settings().
        - Core functions take the same knobs as keyword arguments; these values
          are only the defaults used when a caller does not pass one.
        """

        # ---- Diagnostics ----
        DEBUG_EXTRACTION: bool = os.getenv("DEBUG_EXTRACTION", "1") in {"1", "true", "True"}

        # ---- Resource & size guards ----
        MAX_PAYLOAD_KB: int = int(os.getenv("MAX_PAYLOAD_KB", "64"))  # Per input string
        MAX_BATCH: int = int(os.getenv("MAX_BATCH", "20"))

        # ---- Decoding policy knobs ----
        EMBEDDED_SCAN_MODE: str = os.getenv("EMBEDDED_SCAN_MODE", "lenient").strip().lower()
        SEX_CODE_POLICY: str = os.getenv("SEX_CODE_POLICY", "binary").strip().lower()

        def __init__(self):
                if self.EMBEDDED_SCAN_MODE not in EMBEDDED_SCAN_MODES:
                        raise ValueError(
                                f"EMBEDDED_SCAN_MODE must be one of {EMBEDDED_SCAN_MODES}, got {self.EMBEDDED_SCAN_MODE!r}"
                        )
                if self.SEX_CODE_POLICY not in SEX_CODE_POLICIES:
                        raise ValueError(
                                f"SEX_CODE_POLICY must be one of {SEX_CODE_POLICIES}, got {self.SEX_CODE_POLICY!r}"
                        )


@lru_cache
def get_settings() -> Settings:
        """Return cached singleton Settings instance.

        Each worker process resolves environment variables once; subsequent
        calls are cheap attribute access.
        """
        return Settings()
