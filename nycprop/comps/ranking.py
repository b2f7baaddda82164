"""Rank scored comps and compute implied-value statistics."""

from __future__ import annotations

from nycprop.comps.enrichment import FULL
from nycprop.models import CandidateComp, CompsSummary, ParcelRecord

DEFAULT_LIMIT = 10
MAX_LIMIT = 50


def clamp_limit(requested: int | None) -> int:
    if not requested or requested <= 0:
        return DEFAULT_LIMIT
    return min(requested, MAX_LIMIT)


def rank_comps(comps: list[CandidateComp], requested: int | None) -> list[CandidateComp]:
    """Highest score first; equal scores keep their enumeration order."""
    ranked = sorted(comps, key=lambda c: -c.similarity_score)  # sorted() is stable
    return ranked[: clamp_limit(requested)]


def mean(values: list[float | None]) -> float | None:
    present = [v for v in values if v is not None]
    if not present:
        return None
    return float(round(sum(present) / len(present)))


def implied_value(quantity: float | None, rate: float | None) -> float | None:
    if not quantity or not rate:
        return None
    return float(round(quantity * rate))


def summarize(subject: ParcelRecord, comps: list[CandidateComp]) -> CompsSummary:
    avg_ppu = mean([c.price_per_unit for c in comps])
    avg_ppsf = mean([c.price_per_sqft for c in comps])
    return CompsSummary(
        comps_found=len(comps),
        avg_price_per_unit=avg_ppu,
        avg_price_per_sqft=avg_ppsf,
        implied_value_by_unit=implied_value(subject.unit_count, avg_ppu),
        implied_value_by_sqft=implied_value(subject.building_area, avg_ppsf),
        degraded_enrichment=sum(1 for c in comps if c.enrichment != FULL),
    )
