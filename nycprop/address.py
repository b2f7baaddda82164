"""Address normalization to PLUTO's canonical form.

PLUTO stores addresses like ``522 EAST 5 STREET``: upper case, no ordinal
suffixes, street types spelled out. These helpers are pure string functions
with no registry access.
"""

from __future__ import annotations

import re

_ORDINAL_RE = re.compile(r"\b(\d+)(?:ST|ND|RD|TH)\b")

# Trailing street-type abbreviations -> PLUTO spelling
STREET_TYPES: dict[str, str] = {
    "ST": "STREET",
    "AVE": "AVENUE",
    "AV": "AVENUE",
    "BLVD": "BOULEVARD",
    "PL": "PLACE",
    "DR": "DRIVE",
    "LN": "LANE",
    "CT": "COURT",
    "RD": "ROAD",
    "PKWY": "PARKWAY",
    "TER": "TERRACE",
    "HWY": "HIGHWAY",
}

DIRECTIONS: dict[str, str] = {
    "E": "EAST",
    "W": "WEST",
    "N": "NORTH",
    "S": "SOUTH",
}

_STREET_NUMBER_RE = re.compile(r"^(\d+(?:-\d+)?)\b")


def normalize_address(address: str) -> str:
    """Upper-case, collapse whitespace, drop ordinals and expand abbreviations.

    >>> normalize_address("522 E 5th St")
    '522 EAST 5 STREET'
    """
    text = address.upper().replace(",", " ")
    text = " ".join(text.split())
    if not text:
        return ""
    text = _ORDINAL_RE.sub(r"\1", text)

    tokens = [t.rstrip(".") for t in text.split(" ")]

    # A lone compass letter right after the house number is a direction
    if len(tokens) >= 3 and tokens[0][:1].isdigit() and tokens[1] in DIRECTIONS:
        tokens[1] = DIRECTIONS[tokens[1]]

    if len(tokens) >= 2 and tokens[-1] in STREET_TYPES:
        tokens[-1] = STREET_TYPES[tokens[-1]]

    return " ".join(t for t in tokens if t)


def street_number(address: str) -> str | None:
    """Leading house number, hyphenated Queens style included ('37-15')."""
    match = _STREET_NUMBER_RE.match(address.strip())
    return match.group(1) if match else None


def street_name(address: str) -> str | None:
    """Normalized street name with the house number removed."""
    normalized = normalize_address(address)
    number = street_number(normalized)
    if not number:
        return None
    rest = normalized[len(number):].strip()
    return rest or None


def short_street_prefix(address: str) -> str | None:
    """House number plus the first two street-name tokens.

    Used for the loose fallback lookup, e.g. ``522 EAST 5 STREET`` becomes
    ``522 EAST 5``.
    """
    number = street_number(address.strip())
    name = street_name(address)
    if not number or not name:
        return None
    return f"{number} {' '.join(name.split()[:2])}"
