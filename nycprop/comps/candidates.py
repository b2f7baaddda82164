"""Build the candidate comparable-sales set for a subject parcel."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from nycprop.models import ParcelRecord, SaleRecord
from nycprop.registries import SalesLedger
from nycprop.soql import And, Contains, Eq, Gt, IsBlank, Predicate, StartsWith, any_of

logger = logging.getLogger(__name__)

# Sales at or below this are transfers between related parties, not market sales
NOMINAL_SALE_THRESHOLD = 100_000
OVERFETCH_FACTOR = 3


@dataclass(frozen=True)
class CandidateQuery:
    borough: str
    class_category: str
    neighborhoods: list[str]
    limit: int

    def predicate(self) -> Predicate:
        terms: list[Predicate | None] = [
            Gt("sale_price", NOMINAL_SALE_THRESHOLD),
            Eq("borough", self.borough),
            StartsWith("building_class_at_time_of_sale", self.class_category),
            IsBlank("apartment_number"),
            any_of([Contains("neighborhood", n) for n in self.neighborhoods]),
        ]
        return And(*terms)


def build_candidate_query(
    subject: ParcelRecord,
    class_category: str,
    neighborhoods: list[str],
    requested: int,
) -> CandidateQuery:
    return CandidateQuery(
        borough=subject.borough,
        class_category=class_category[:1].upper(),
        neighborhoods=[n.upper() for n in neighborhoods if n],
        limit=max(requested, 1) * OVERFETCH_FACTOR,
    )


def exclude_subject(sales: list[SaleRecord], subject: ParcelRecord) -> list[SaleRecord]:
    return [s for s in sales if s.key != subject.key]


async def fetch_candidates(
    sales: SalesLedger,
    subject: ParcelRecord,
    class_category: str,
    neighborhoods: list[str],
    requested: int,
    log: logging.Logger | logging.LoggerAdapter | None = None,
) -> list[SaleRecord]:
    """Query the ledger for candidate sales, minus the subject itself.

    Over-fetches so that self-exclusion and score truncation still leave
    ``requested`` comps. A ledger failure propagates.
    """
    log = log or logger
    query = build_candidate_query(subject, class_category, neighborhoods, requested)
    results = await sales.query(query.predicate(), limit=query.limit)
    candidates = exclude_subject(results, subject)
    log.info(
        "Candidate sales: %d fetched, %d after excluding subject (class %s, %d neighborhoods)",
        len(results), len(candidates), query.class_category, len(query.neighborhoods),
    )
    return candidates
