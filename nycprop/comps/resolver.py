"""Resolve a free-text address to a PLUTO parcel.

Three queries, first non-empty wins:
1. Normalized address as an anchored prefix (plus borough when given)
2. Same prefix without the borough, in case the hint was wrong
3. House number + first two street-name tokens as a looser prefix
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from nycprop.address import normalize_address, short_street_prefix
from nycprop.errors import InvalidInput, NotFound
from nycprop.models import ParcelRecord
from nycprop.registries import ParcelRegistry
from nycprop.soql import And, Eq, StartsWith

logger = logging.getLogger(__name__)

RESOLVE_LIMIT = 5


@dataclass
class Resolution:
    parcel: ParcelRecord
    strategy: str  # exact | exact_any_borough | street_prefix
    notes: list[str] = field(default_factory=list)


def _address_filter(prefix: str, borough: str | None):
    # LIKE 'X%' and not '%X%': "522 ..." must not match "1522 ..."
    match = StartsWith("address", prefix, upper=True)
    if borough:
        return And(match, Eq("borocode", borough))
    return match


async def resolve_parcel(
    parcels: ParcelRegistry,
    address: str,
    borough: str | None = None,
    log: logging.Logger | logging.LoggerAdapter | None = None,
) -> Resolution:
    """Find the canonical parcel for an address.

    Args:
        parcels: Parcel registry
        address: Street address, e.g. '522 E 5th St'
        borough: Numeric borough code ('1'-'5'), optional

    Raises:
        InvalidInput: address is blank
        NotFound: no query matched
        UpstreamUnavailable: the parcel registry failed (fatal here)
    """
    log = log or logger
    normalized = normalize_address(address or "")
    if not normalized:
        raise InvalidInput("Address is required")

    notes: list[str] = []

    results = await parcels.query(_address_filter(normalized, borough), limit=RESOLVE_LIMIT)
    if results:
        return Resolution(results[0], "exact", notes)

    if borough:
        results = await parcels.query(_address_filter(normalized, None), limit=RESOLVE_LIMIT)
        if results:
            found = results[0].borough or "?"
            note = (
                f"Borough hint {borough} did not match '{normalized}'; "
                f"resolved in borough {found} without it."
            )
            log.info("Borough discrepancy: %s", note)
            notes.append(note)
            return Resolution(results[0], "exact_any_borough", notes)

    prefix = short_street_prefix(address)
    if prefix and prefix != normalized:
        log.debug("Falling back to street prefix %r", prefix)
        results = await parcels.query(_address_filter(prefix, borough), limit=RESOLVE_LIMIT)
        if results:
            notes.append(f"Matched loosely on '{prefix}'.")
            return Resolution(results[0], "street_prefix", notes)

    log.info("No parcel found for %r (borough=%s)", address, borough)
    raise NotFound(address, borough)
