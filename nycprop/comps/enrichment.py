"""Join candidate sales with their PLUTO parcels.

Each fetch is independent. One failing fetch marks only its own candidate as
degraded; results are merged back at the candidate's original index.
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass

from nycprop.errors import UpstreamUnavailable
from nycprop.models import CandidateComp, ParcelRecord, SaleRecord
from nycprop.registries import ParcelRegistry

logger = logging.getLogger(__name__)

FULL = "full"
MISSING = "missing"      # registry answered, no parcel for the key
DEGRADED = "degraded"    # registry call failed


@dataclass(frozen=True)
class Enrichment:
    sale: SaleRecord
    parcel: ParcelRecord | None
    status: str
    error: str | None = None


def _concurrency() -> int:
    try:
        return max(1, int(os.environ.get("NYCPROP_ENRICH_CONCURRENCY", "8")))
    except ValueError:
        return 8


async def enrich_sales(
    parcels: ParcelRegistry,
    sales: list[SaleRecord],
    log: logging.Logger | logging.LoggerAdapter | None = None,
) -> list[Enrichment]:
    """Fetch the parcel for every sale, concurrently, order preserved."""
    log = log or logger
    semaphore = asyncio.Semaphore(_concurrency())

    async def _one(sale: SaleRecord) -> ParcelRecord | None:
        async with semaphore:
            return await parcels.get_by_key(sale.borough, sale.block, sale.lot)

    outcomes = await asyncio.gather(*(_one(s) for s in sales), return_exceptions=True)

    enriched: list[Enrichment] = []
    for sale, outcome in zip(sales, outcomes):
        if isinstance(outcome, Exception):
            if not isinstance(outcome, UpstreamUnavailable):
                log.exception("Unexpected enrichment error", exc_info=outcome)
            log.warning(
                "Parcel enrichment failed for %s/%s/%s: %s",
                sale.borough, sale.block, sale.lot, outcome,
            )
            enriched.append(Enrichment(sale, None, DEGRADED, str(outcome)))
        elif isinstance(outcome, BaseException):
            raise outcome
        elif outcome is None:
            enriched.append(Enrichment(sale, None, MISSING))
        else:
            enriched.append(Enrichment(sale, outcome, FULL))
    return enriched


def _rate(price: float, divisor: int | None) -> float | None:
    if not divisor or divisor <= 0 or price <= 0:
        return None
    return float(round(price / divisor))


def to_candidate(item: Enrichment) -> CandidateComp:
    """Derive comp metrics, falling back to the sale's own fields."""
    sale, parcel = item.sale, item.parcel
    units_total = (parcel.unit_count if parcel else 0) or sale.units_total or sale.units
    year_built = (parcel.year_built if parcel else None) or sale.year_built
    sqft = sale.sqft or 0
    return CandidateComp(
        sale=sale,
        units_total=units_total,
        sqft=sqft,
        year_built=year_built,
        assessed_total=parcel.assessed_total if parcel else None,
        price_per_unit=_rate(sale.sale_price, units_total),
        price_per_sqft=_rate(sale.sale_price, sqft),
        enrichment=item.status,
    )
