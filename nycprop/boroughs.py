"""Borough tokens, codes and BBL helpers."""

from __future__ import annotations

import re

from nycprop.errors import InvalidInput

BOROUGH_CODES: dict[str, str] = {
    "manhattan": "1",
    "bronx": "2",
    "brooklyn": "3",
    "queens": "4",
    "staten island": "5",
}

BOROUGH_NAMES: dict[str, str] = {
    "1": "Manhattan",
    "2": "Bronx",
    "3": "Brooklyn",
    "4": "Queens",
    "5": "Staten Island",
}

# PLUTO's own borough column uses two-letter abbreviations
BOROUGH_ABBREVIATIONS: dict[str, str] = {
    "mn": "1",
    "bx": "2",
    "bk": "3",
    "qn": "4",
    "si": "5",
}

_ALIASES: dict[str, str] = {
    "new york": "1",
    "new york county": "1",
    "the bronx": "2",
    "bronx county": "2",
    "kings": "3",
    "kings county": "3",
    "queens county": "4",
    "richmond": "5",
    "richmond county": "5",
    "staten is": "5",
}

_BBL_RE = re.compile(r"^[1-5]\d{9}$")


def borough_code(token: str | None) -> str | None:
    """Map a borough name, abbreviation or digit to its numeric code.

    Returns None for unrecognized tokens.
    """
    if token is None:
        return None
    key = " ".join(str(token).lower().split())
    if key in BOROUGH_NAMES:
        return key
    return BOROUGH_CODES.get(key) or BOROUGH_ABBREVIATIONS.get(key) or _ALIASES.get(key)


def require_borough_code(token: str) -> str:
    """Like borough_code() but raises InvalidInput on an unknown token."""
    code = borough_code(token)
    if code is None:
        raise InvalidInput(
            f"Invalid borough: '{token}'. Use one of "
            "manhattan, bronx, brooklyn, queens, staten island."
        )
    return code


def borough_name(code: str) -> str | None:
    return BOROUGH_NAMES.get(str(code))


def normalize_key_part(value: str | int | None) -> str:
    """Strip leading zeros from a block or lot; empty becomes '0'.

    PLUTO sometimes serves block/lot as floats ('1234.0'), so the fractional
    part is dropped first.
    """
    text = str(value if value is not None else "").strip()
    if "." in text:
        text = text.split(".", 1)[0]
    return text.lstrip("0") or "0"


def format_bbl(borough: str, block: str, lot: str) -> str:
    """Build the 10-digit BBL: 1-digit borough + 5-digit block + 4-digit lot."""
    b = normalize_key_part(borough)
    blk = normalize_key_part(block)
    lt = normalize_key_part(lot)
    if not (b.isdigit() and blk.isdigit() and lt.isdigit()):
        raise InvalidInput(f"BBL parts must be numeric (got {borough}/{block}/{lot})")
    if len(b) != 1 or len(blk) > 5 or len(lt) > 4:
        raise InvalidInput(f"BBL parts out of range (got {borough}/{block}/{lot})")
    return f"{b}{blk.zfill(5)}{lt.zfill(4)}"


def validate_bbl(bbl: str) -> str:
    """Return a cleaned 10-digit BBL or raise InvalidInput."""
    cleaned = str(bbl).strip()
    if cleaned.endswith(".00000000"):
        cleaned = cleaned.split(".", 1)[0]
    if not _BBL_RE.match(cleaned):
        raise InvalidInput(
            f"Invalid BBL '{bbl}': expected 10 digits "
            "(1-digit borough 1-5, 5-digit block, 4-digit lot)"
        )
    return cleaned


def split_bbl(bbl: str) -> tuple[str, str, str]:
    """Split a 10-digit BBL into normalized (borough, block, lot)."""
    cleaned = validate_bbl(bbl)
    return (
        cleaned[0],
        normalize_key_part(cleaned[1:6]),
        normalize_key_part(cleaned[6:]),
    )
