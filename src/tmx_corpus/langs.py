"""Language code helpers.

DGT-TM uses its own language variants (`EN-GB`, `PL-01`, ...). Users type ISO
639-1 codes, so CLI input is coerced through `LANG_CODE_COERCION` first.

Language codes double as column names in the output store:
- `EN-GB` => `en_gb`
- `PL-01` => `pl_01`
"""

from __future__ import annotations
import re
from typing import Iterable, List

from .errors import InvalidLanguageColumnError

LANG_CODE_COERCION = {
    "en": "EN-GB",
    "pl": "PL-01",
    "de": "DE-DE",
    "da": "DA-01",
    "el": "EL-01",
    "es": "ES-ES",
    "fi": "FI-01",
    "fr": "FR-FR",
    "it": "IT-IT",
    "nl": "NL-NL",
    "pt": "PT-PT",
    "sv": "SV-SE",
    "lv": "LV-01",
    "cs": "CS-01",
    "et": "ET-01",
    "hu": "HU-01",
    "sl": "SL-01",
    "lt": "LT-01",
    "mt": "MT-01",
    "sk": "SK-01",
    "ro": "RO-RO",
    "bg": "BG-01",
    "hr": "HR-HR",
    "ga": "GA-IE",
}

_SEPARATOR_RE = re.compile(r"[\W_]+")
_COLUMN_RE = re.compile(r"\w{2}_\w{2}", re.ASCII)


def coerce_lang_code(code: str) -> str:
    """`en` => `EN-GB`; unknown codes are returned unchanged."""
    return LANG_CODE_COERCION.get(code.lower(), code)


def coerce_lang_codes(codes: Iterable[str]) -> List[str]:
    return [coerce_lang_code(c) for c in codes]


def normalize_lang_code(code: str) -> str:
    """Lowercase and fold separator runs into a single underscore.

    Idempotent: normalizing an already normalized code returns it unchanged.
    """
    return _SEPARATOR_RE.sub("_", code.strip().lower())


def is_valid_column(column: str) -> bool:
    return _COLUMN_RE.fullmatch(column) is not None


def lang_code_to_column(code: str) -> str:
    """Normalize a language code and validate it as a column identifier."""
    column = normalize_lang_code(code)
    if not is_valid_column(column):
        raise InvalidLanguageColumnError(code, column)
    return column
